import pytest

from apicache.query.matching import LabelAtom, custom_match, label_match, parse_atom


class TestParseAtom:
    def test_key_value(self):
        assert parse_atom("app=web") == LabelAtom(key="app", value="web", negated=False)

    def test_negated(self):
        assert parse_atom("app!=web") == LabelAtom(key="app", value="web", negated=True)

    def test_bare_key_is_wildcard(self):
        assert parse_atom("app") == LabelAtom(key="app", value="*", negated=False)

    def test_value_may_contain_equals(self):
        assert parse_atom("cfg=a=b").value == "a=b"

    def test_prefixed_key(self):
        assert parse_atom("example.com/workspace=system").key == "example.com/workspace"


class TestLabelMatch:
    LABELS = {"app": "web", "tier": "frontend"}

    @pytest.mark.parametrize("expression,expected", [
        ("app=web", True),
        ("app=we", False),
        ("app=webx", False),
        ("app", True),
        ("app=*", True),
        ("missing", False),
        ("app!=web", False),
        ("app!=db", True),
        ("missing!=db", False),
    ])
    def test_exact_mode(self, expression, expected):
        assert label_match(self.LABELS, expression) is expected

    def test_negation_requires_present_key(self):
        assert label_match({"k": "other"}, "k!=v") is True
        assert label_match({"x": "v"}, "k!=v") is False
        assert label_match({}, "k!=v") is False

    def test_none_mapping(self):
        assert label_match(None, "app") is False


class TestCustomMatch:
    def test_and_of_or_clauses(self):
        expression = "a=b||c=d,e=f"
        assert custom_match({"a": "xb", "e": "zfz"}, expression) is True
        assert custom_match({"c": "d0"}, expression) is False
        assert custom_match({"c": "d0", "e": "f"}, expression) is True

    def test_containment_not_equality(self):
        assert custom_match({"owner": "payments-team"}, "owner=team") is True
        assert custom_match({"owner": "payments"}, "owner=team") is False

    def test_every_and_clause_required(self):
        assert custom_match({"a": "1"}, "a=1,b=2") is False
        assert custom_match({"a": "1", "b": "2"}, "a=1,b=2") is True

    def test_any_or_alternative_suffices(self):
        assert custom_match({"d": "h"}, "a=b||c=d,e=f||d=h") is False
        assert custom_match({"c": "d", "d": "h"}, "a=b||c=d,e=f||d=h") is True

    def test_negated_containment(self):
        assert custom_match({"a": "hello"}, "a!=xyz") is True
        assert custom_match({"a": "hello"}, "a!=ell") is False
        assert custom_match({}, "a!=x") is False

    def test_negation_inside_or(self):
        assert custom_match({"a": "hello"}, "a!=ell||b") is False
        assert custom_match({"a": "hello", "b": ""}, "a!=ell||b") is True

    def test_wildcard_key_presence(self):
        assert custom_match({"a": ""}, "a") is True
        assert custom_match({}, "a") is False

    def test_empty_expression_never_matches(self):
        assert custom_match({"a": "b"}, "") is False

    def test_none_mapping(self):
        assert custom_match(None, "a") is False
