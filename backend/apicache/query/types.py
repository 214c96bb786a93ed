"""Query model: the structured form of a list request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType, Optional

from apicache.query.selector import SelectorParseError, parse_selector

Field = NewType("Field", str)
Value = NewType("Value", str)

# Request parameter names
PARAMETER_NAME = "name"
PARAMETER_LABEL_SELECTOR = "labelSelector"
PARAMETER_FIELD_SELECTOR = "fieldSelector"
PARAMETER_PAGE = "page"
PARAMETER_LIMIT = "limit"
PARAMETER_ORDER_BY = "sortBy"
PARAMETER_ASCENDING = "ascending"

# Parameters consumed by the parser itself; everything else becomes a filter
RESERVED_PARAMETERS = frozenset({
    PARAMETER_PAGE,
    PARAMETER_LIMIT,
    PARAMETER_ORDER_BY,
    PARAMETER_ASCENDING,
    PARAMETER_LABEL_SELECTOR,
})

# Sortable / filterable fields
FIELD_NAME = Field("name")
FIELD_NAMES = Field("names")
FIELD_UID = Field("uid")
FIELD_NAMESPACE = Field("namespace")
FIELD_OWNER_REFERENCE = Field("ownerReference")
FIELD_OWNER_KIND = Field("ownerKind")
FIELD_ANNOTATION = Field("annotation")
FIELD_LABEL = Field("label")
FIELD_DOGO = Field("dogo")
FIELD_CREATION_TIMESTAMP = Field("creationTimestamp")
FIELD_CREATE_TIME = Field("createTime")
FIELD_LAST_UPDATE_TIMESTAMP = Field("lastUpdateTimestamp")
FIELD_UPDATE_TIME = Field("updateTime")
FIELD_STATUS = Field("status")


@dataclass(frozen=True)
class Pagination:
    # items per page, -1 means unlimited
    limit: int
    offset: int
    page: int

    def get_valid_window(self, total: int) -> tuple[int, int]:
        """Return the [start, end) slice of a result set of size ``total``.

        Out-of-range requests (negative limit or offset, offset past the end)
        produce an empty window instead of an error.
        """
        if self.limit == NO_PAGINATION.limit:
            return 0, total

        if self.limit < 0 or self.offset < 0 or self.offset > total:
            return 0, 0

        start = self.offset
        end = min(start + self.limit, total)
        return start, end


NO_PAGINATION = Pagination(limit=-1, offset=0, page=1)


@dataclass(frozen=True)
class Filter:
    field: Field
    value: Value


@dataclass
class Query:
    pagination: Optional[Pagination] = NO_PAGINATION

    # sort result by this field, empty means FIELD_CREATION_TIMESTAMP
    sort_by: Field = Field("")

    # descending unless set
    ascending: bool = False

    filters: dict[Field, Value] = field(default_factory=dict)

    label_selector: str = ""

    @classmethod
    def new(cls) -> "Query":
        return cls()

    def selector(self) -> str:
        """Canonical label selector, or "" (everything) if it does not parse."""
        try:
            return str(parse_selector(self.label_selector))
        except SelectorParseError:
            return ""

    def iter_filters(self):
        for f, v in self.filters.items():
            yield Filter(field=f, value=v)
