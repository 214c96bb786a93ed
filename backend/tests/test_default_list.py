"""Tests for the generic list engine and the default metadata compare/filter."""

import copy
from datetime import datetime, timedelta, timezone

import pytest
from kubernetes import client

from apicache.cluster.memory_source import InMemoryDataSource
from apicache.query.parser import parse_query_parameters
from apicache.query.types import NO_PAGINATION, Field, Filter, Pagination, Query, Value
from apicache.resources.core import ConfigMapGetter
from apicache.resources.interface import (
    default_list,
    default_object_meta_compare,
    default_object_meta_filter,
    later,
    latest,
)

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _meta(name, created=BASE_TIME, **kwargs) -> client.V1ObjectMeta:
    return client.V1ObjectMeta(name=name, creation_timestamp=created, **kwargs)


def _config_map(name, created=BASE_TIME, **kwargs) -> client.V1ConfigMap:
    return client.V1ConfigMap(metadata=_meta(name, created, **kwargs))


def _owner(kind, uid) -> client.V1OwnerReference:
    return client.V1OwnerReference(api_version="apps/v1", kind=kind, name=f"{kind.lower()}-owner", uid=uid)


def _getter() -> ConfigMapGetter:
    return ConfigMapGetter(InMemoryDataSource())


def _names(result) -> list[str]:
    return [obj.metadata.name for obj in result.data]


def _list(objects, query, *transforms):
    getter = _getter()
    return default_list(objects, query, getter.compare, getter.filter, *transforms)


# ---------------------------------------------------------------------------
# default_list
# ---------------------------------------------------------------------------

class TestDefaultList:
    def test_page_two_of_twenty_five(self):
        objects = [_config_map(f"cm-{i:02d}", BASE_TIME + timedelta(minutes=i)) for i in range(25)]
        query = parse_query_parameters({"page": "2", "limit": "10"})

        result = _list(objects, query)

        # newest first by default
        expected = [f"cm-{i:02d}" for i in range(24, -1, -1)][10:20]
        assert _names(result) == expected
        assert result.pagination.model_dump() == {"limit": 10, "total": 25, "offset": 10, "page": 2}

    def test_total_counts_filtered_objects_not_page(self):
        objects = [_config_map(f"web-{i}") for i in range(7)] + [_config_map(f"db-{i}") for i in range(3)]
        query = Query(pagination=Pagination(limit=2, offset=0, page=1), filters={Field("name"): Value("web")})

        result = _list(objects, query)

        assert len(result.data) == 2
        assert result.pagination.total == 7

    def test_filters_are_anded(self):
        objects = [
            _config_map("web-a", labels={"tier": "frontend"}),
            _config_map("web-b", labels={"tier": "backend"}),
            _config_map("db-a", labels={"tier": "frontend"}),
        ]
        query = Query(filters={Field("name"): Value("web"), Field("label"): Value("tier=frontend")})

        assert _names(_list(objects, query)) == ["web-a"]

    def test_creation_time_tie_falls_back_to_name(self):
        objects = [_config_map("alpha"), _config_map("bravo")]

        assert _names(_list(objects, Query(sort_by=Field("creationTimestamp")))) == ["bravo", "alpha"]
        assert _names(_list(objects, Query(sort_by=Field("creationTimestamp"), ascending=True))) == ["alpha", "bravo"]

    def test_sort_by_name_ascending(self):
        objects = [_config_map(n) for n in ("charlie", "alpha", "bravo")]
        query = Query(sort_by=Field("name"), ascending=True)
        assert _names(_list(objects, query)) == ["alpha", "bravo", "charlie"]

    def test_unknown_sort_field_uses_creation_time(self):
        objects = [_config_map("old", BASE_TIME), _config_map("new", BASE_TIME + timedelta(days=1))]
        assert _names(_list(objects, Query(sort_by=Field("bogus")))) == ["new", "old"]

    def test_transforms_apply_in_order_to_survivors_only(self):
        seen = []

        def first(obj):
            seen.append(obj.metadata.name)
            obj = copy.deepcopy(obj)
            obj.metadata.annotations = {"step": "1"}
            return obj

        def second(obj):
            obj = copy.deepcopy(obj)
            obj.metadata.annotations["step"] += "2"
            return obj

        objects = [_config_map("keep"), _config_map("drop")]
        query = Query(filters={Field("names"): Value("keep")})

        result = _list(objects, query, first, second)

        assert seen == ["keep"]
        assert result.data[0].metadata.annotations == {"step": "12"}
        # inputs untouched
        assert objects[0].metadata.annotations is None

    def test_missing_pagination_written_back(self):
        query = Query(pagination=None)
        result = _list([_config_map("a")], query)
        assert query.pagination == NO_PAGINATION
        assert result.pagination.limit == -1
        assert len(result.data) == 1

    def test_out_of_range_page_is_empty(self):
        objects = [_config_map(f"cm-{i}") for i in range(3)]
        query = Query(pagination=Pagination(limit=10, offset=5, page=1))

        result = _list(objects, query)

        assert result.data == []
        assert result.pagination.total == 3

    def test_idempotent(self):
        objects = [_config_map(f"cm-{i}", BASE_TIME + timedelta(seconds=i % 3)) for i in range(12)]
        query = parse_query_parameters({"page": "2", "limit": "5", "name": "cm"})

        first = _list(objects, query)
        second = _list(objects, query)

        assert _names(first) == _names(second)
        assert first.pagination == second.pagination

    def test_input_order_not_modified(self):
        objects = [_config_map(n) for n in ("b", "c", "a")]
        _list(objects, Query(sort_by=Field("name"), ascending=True))
        assert [o.metadata.name for o in objects] == ["b", "c", "a"]

    def test_mixed_kinds_do_not_raise(self):
        secret = client.V1Secret(metadata=_meta("secret"))
        objects = [_config_map("cm-a"), secret, _config_map("cm-b")]

        unfiltered = _list(objects, Query())
        assert len(unfiltered.data) == 3

        filtered = _list(objects, Query(filters={Field("name"): Value("")}))
        assert "secret" not in _names(filtered)

    def test_empty_input(self):
        result = _list([], parse_query_parameters({"limit": "10"}))
        assert result.data == []
        assert result.pagination.total == 0


# ---------------------------------------------------------------------------
# Type mismatch policy
# ---------------------------------------------------------------------------

class TestTypedCallbacks:
    def test_compare_wrong_kind_is_false(self):
        getter = _getter()
        secret = client.V1Secret(metadata=_meta("zzz"))
        assert getter.compare(secret, _config_map("aaa"), Field("name")) is False
        assert getter.compare(_config_map("zzz"), secret, Field("name")) is False

    def test_filter_wrong_kind_is_false(self):
        getter = _getter()
        secret = client.V1Secret(metadata=_meta("web"))
        assert getter.filter(secret, Filter(Field("name"), Value("web"))) is False

    def test_plain_object_is_false(self):
        getter = _getter()
        assert getter.filter(object(), Filter(Field("name"), Value(""))) is False


# ---------------------------------------------------------------------------
# default_object_meta_compare
# ---------------------------------------------------------------------------

class TestDefaultCompare:
    def test_name(self):
        assert default_object_meta_compare(_meta("b"), _meta("a"), Field("name")) is True
        assert default_object_meta_compare(_meta("a"), _meta("b"), Field("name")) is False
        assert default_object_meta_compare(_meta("a"), _meta("a"), Field("name")) is False

    @pytest.mark.parametrize("field", ["creationTimestamp", "createTime", "anythingElse"])
    def test_later_creation_outranks(self, field):
        newer = _meta("a", BASE_TIME + timedelta(hours=1))
        older = _meta("z", BASE_TIME)
        assert default_object_meta_compare(newer, older, Field(field)) is True
        assert default_object_meta_compare(older, newer, Field(field)) is False

    def test_missing_timestamp_is_oldest(self):
        assert default_object_meta_compare(_meta("a"), _meta("b", None), Field("creationTimestamp")) is True

    def test_naive_and_aware_timestamps(self):
        naive = _meta("a", datetime(2024, 3, 1, 13, 0))
        aware = _meta("b", BASE_TIME)
        assert default_object_meta_compare(naive, aware, Field("creationTimestamp")) is True


class TestTimeHelpers:
    def test_later(self):
        assert later(BASE_TIME + timedelta(seconds=1), BASE_TIME)
        assert not later(BASE_TIME, BASE_TIME)
        assert later(BASE_TIME, None)
        assert not later(None, BASE_TIME)

    def test_latest(self):
        assert latest(None, BASE_TIME, BASE_TIME + timedelta(days=1)) == BASE_TIME + timedelta(days=1)
        assert latest(None, None) is None


# ---------------------------------------------------------------------------
# default_object_meta_filter
# ---------------------------------------------------------------------------

class TestDefaultFilter:
    META = _meta(
        "payment-api",
        namespace="shop",
        uid="a8a8d6cf-f6a5-4fea-9c1b-e57610115706",
        labels={"app": "payment", "tier": "backend"},
        annotations={"owner": "payments-team", "enabled": "true"},
        owner_references=[_owner("ReplicaSet", "rs-uid-1")],
    )

    @pytest.mark.parametrize("field,value,expected", [
        ("names", "web,payment-api,db", True),
        ("names", "payment", False),
        ("name", "payment", True),
        ("name", "api", True),
        ("name", "checkout", False),
        ("uid", "a8a8d6cf-f6a5-4fea-9c1b-e57610115706", True),
        ("uid", "a8a8d6cf", False),
        ("namespace", "shop", True),
        ("namespace", "sho", False),
        ("ownerReference", "rs-uid-1", True),
        ("ownerReference", "rs-uid-2", False),
        ("ownerKind", "ReplicaSet", True),
        ("ownerKind", "Deployment", False),
        ("annotation", "enabled=true", True),
        ("annotation", "enabled=false", False),
        ("label", "app=payment", True),
        ("label", "app!=payment", False),
        ("label", "app!=checkout", True),
        ("label", "missing!=x", False),
        ("label", "tier", True),
        ("dogo", "owner=team,enabled=tru", True),
        ("dogo", "owner=nobody||enabled=true", True),
        ("dogo", "owner=team,enabled=false", False),
        ("fieldSelector", "status.phase=Running", False),
        ("unknown", "anything", False),
    ])
    def test_fields(self, field, value, expected):
        assert default_object_meta_filter(self.META, Filter(Field(field), Value(value))) is expected

    def test_no_owner_references(self):
        meta = _meta("a")
        assert default_object_meta_filter(meta, Filter(Field("ownerKind"), Value("ReplicaSet"))) is False

    def test_no_labels(self):
        assert default_object_meta_filter(_meta("a"), Filter(Field("label"), Value("app"))) is False
