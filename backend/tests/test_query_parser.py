import pytest
from starlette.datastructures import QueryParams

from apicache.query.parser import parse_bool, parse_query_parameters
from apicache.query.types import FIELD_CREATION_TIMESTAMP, Field, Pagination, Value


class TestDefaults:
    def test_empty_parameters(self):
        query = parse_query_parameters({})
        assert query.pagination == Pagination(limit=-1, offset=0, page=1)
        assert query.sort_by == FIELD_CREATION_TIMESTAMP
        assert query.ascending is False
        assert query.filters == {}
        assert query.label_selector == ""

    def test_malformed_limit_and_page(self):
        query = parse_query_parameters({"limit": "ten", "page": "x"})
        assert query.pagination == Pagination(limit=-1, offset=0, page=1)

    def test_empty_sort_by_uses_creation_timestamp(self):
        assert parse_query_parameters({"sortBy": ""}).sort_by == FIELD_CREATION_TIMESTAMP

    def test_sort_by_passed_through(self):
        assert parse_query_parameters({"sortBy": "name"}).sort_by == Field("name")


class TestPagination:
    def test_offset_derived_from_page_and_limit(self):
        query = parse_query_parameters({"page": "2", "limit": "10"})
        assert query.pagination == Pagination(limit=10, offset=10, page=2)

    def test_page_without_limit_gives_negative_offset(self):
        query = parse_query_parameters({"page": "3"})
        assert query.pagination == Pagination(limit=-1, offset=-2, page=3)
        # the sentinel still returns everything
        assert query.pagination.get_valid_window(5) == (0, 5)

    def test_negative_page(self):
        query = parse_query_parameters({"page": "-1", "limit": "10"})
        assert query.pagination.offset == -20
        assert query.pagination.get_valid_window(100) == (0, 0)

    @pytest.mark.parametrize("raw", ["1_0", " 5 ", "5\n", "٥", "+", "1e1", "10.0", ""])
    def test_only_plain_decimal_integers(self, raw):
        query = parse_query_parameters({"limit": raw, "page": raw})
        assert query.pagination == Pagination(limit=-1, offset=0, page=1)

    def test_signed_integers(self):
        query = parse_query_parameters({"limit": "+5", "page": "-0"})
        assert query.pagination == Pagination(limit=5, offset=-5, page=0)


class TestAscending:
    @pytest.mark.parametrize("raw", ["1", "t", "T", "true", "TRUE", "True"])
    def test_true_values(self, raw):
        assert parse_query_parameters({"ascending": raw}).ascending is True

    @pytest.mark.parametrize("raw", ["0", "f", "false", "FALSE", "yes", "on", "tRuE"])
    def test_false_or_invalid_values(self, raw):
        assert parse_query_parameters({"ascending": raw}).ascending is False

    def test_parse_bool_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestFilters:
    def test_unreserved_keys_become_filters(self):
        query = parse_query_parameters({
            "page": "1",
            "limit": "5",
            "sortBy": "name",
            "ascending": "true",
            "labelSelector": "app=web",
            "name": "web",
            "label": "tier=frontend",
            "fieldSelector": "status.phase=Running",
        })
        assert query.filters == {
            Field("name"): Value("web"),
            Field("label"): Value("tier=frontend"),
            Field("fieldSelector"): Value("status.phase=Running"),
        }

    def test_last_value_wins_for_repeated_key(self):
        query = parse_query_parameters({"label": ["a=b", "c=d"]})
        assert query.filters == {Field("label"): Value("c=d")}

    def test_starlette_query_params(self):
        params = QueryParams("label=a%3Db&label=c%3Dd&limit=5&page=2&names=x,y")
        query = parse_query_parameters(params)
        assert query.filters[Field("label")] == "c=d"
        assert query.filters[Field("names")] == "x,y"
        assert query.pagination == Pagination(limit=5, offset=5, page=2)

    def test_first_value_used_for_reserved_keys(self):
        query = parse_query_parameters({"limit": ["3", "7"]})
        assert query.pagination.limit == 3


class TestLabelSelector:
    def test_passed_through_verbatim(self):
        query = parse_query_parameters({"labelSelector": "tier=web, app"})
        assert query.label_selector == "tier=web, app"
        assert query.selector() == "app,tier=web"

    def test_malformed_selector_selects_everything(self):
        query = parse_query_parameters({"labelSelector": "app in (web"})
        assert query.label_selector == "app in (web"
        assert query.selector() == ""
