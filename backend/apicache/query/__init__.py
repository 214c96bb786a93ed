from apicache.query.types import (
    NO_PAGINATION,
    Field,
    Filter,
    Pagination,
    Query,
    Value,
)
from apicache.query.parser import parse_query_parameters
from apicache.query.matching import custom_match, label_match
from apicache.query.selector import EVERYTHING, LabelSelector, SelectorParseError, parse_selector

__all__ = [
    "NO_PAGINATION",
    "Field",
    "Filter",
    "Pagination",
    "Query",
    "Value",
    "parse_query_parameters",
    "custom_match",
    "label_match",
    "EVERYTHING",
    "LabelSelector",
    "SelectorParseError",
    "parse_selector",
]
