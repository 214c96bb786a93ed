"""Build a Query from request parameters.

Malformed values never raise; each falls back to its default:

    limit      -> -1 (no pagination)
    page       -> 1
    sortBy     -> creationTimestamp
    ascending  -> False
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from apicache.query.types import (
    FIELD_CREATION_TIMESTAMP,
    PARAMETER_ASCENDING,
    PARAMETER_LABEL_SELECTOR,
    PARAMETER_LIMIT,
    PARAMETER_ORDER_BY,
    PARAMETER_PAGE,
    RESERVED_PARAMETERS,
    Field,
    Pagination,
    Query,
    Value,
)
from apicache.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = -1
DEFAULT_PAGE = 1

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
# what strconv.Atoi accepts: no whitespace, underscores or non-ASCII digits
_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_bool(value: str) -> bool:
    """Parse a boolean the way Go's strconv.ParseBool does."""
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def _multi_items(params: Any) -> Iterable[tuple[str, str]]:
    """Yield (key, value) pairs from a multi-valued mapping, in order."""
    if hasattr(params, "multi_items"):
        yield from params.multi_items()
        return
    for key, values in params.items():
        if isinstance(values, (list, tuple)):
            for value in values:
                yield key, value
        else:
            yield key, values


def _first(params: Any, key: str) -> str:
    for k, v in _multi_items(params):
        if k == key:
            return v
    return ""


def _parse_int(raw: str, default: int, name: str) -> int:
    if isinstance(raw, str) and _INT_RE.fullmatch(raw):
        return int(raw)
    if raw:
        logger.debug("Ignoring malformed %s=%r, using %d", name, raw, default)
    return default


def parse_query_parameters(params: Mapping[str, Any]) -> Query:
    """Parse list request parameters into a Query.

    Args:
        params: string-keyed parameters; values may be a string or a list of
            strings (Starlette QueryParams and parse_qs output both work).
    """
    query = Query.new()

    limit = _parse_int(_first(params, PARAMETER_LIMIT), DEFAULT_LIMIT, PARAMETER_LIMIT)
    page = _parse_int(_first(params, PARAMETER_PAGE), DEFAULT_PAGE, PARAMETER_PAGE)
    query.pagination = Pagination(limit=limit, offset=(page - 1) * limit, page=page)

    query.sort_by = Field(_first(params, PARAMETER_ORDER_BY) or FIELD_CREATION_TIMESTAMP)

    raw_ascending = _first(params, PARAMETER_ASCENDING) or "false"
    try:
        query.ascending = parse_bool(raw_ascending)
    except ValueError:
        logger.debug("Ignoring malformed %s=%r", PARAMETER_ASCENDING, raw_ascending)
        query.ascending = False

    query.label_selector = _first(params, PARAMETER_LABEL_SELECTOR)

    # repeated keys: last value wins
    for key, value in _multi_items(params):
        if key not in RESERVED_PARAMETERS:
            query.filters[Field(key)] = Value(value)

    return query
