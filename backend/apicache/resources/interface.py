"""Generic list engine and the compare/filter contracts every resource adapter implements.

An adapter supplies two callbacks per kind:

* ``compare(left, right, field) -> bool``: True if ``left`` outranks
  ``right``, i.e. sorts first in the default (descending) order.
* ``filter(obj, Filter) -> bool``: True if ``obj`` satisfies one clause.

``default_list`` does the rest: AND the filter clauses, apply transforms to
survivors, sort, count, then window by the query's pagination.

Comparators must break ties themselves (the defaults fall back to the name);
the engine adds no tie-break of its own.
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from pydantic import BaseModel, Field as PydanticField

from apicache.cluster.base import DataSource
from apicache.query import matching
from apicache.query.types import (
    FIELD_ANNOTATION,
    FIELD_DOGO,
    FIELD_LABEL,
    FIELD_NAME,
    FIELD_NAMES,
    FIELD_NAMESPACE,
    FIELD_OWNER_KIND,
    FIELD_OWNER_REFERENCE,
    FIELD_UID,
    NO_PAGINATION,
    Field,
    Filter,
    Query,
)
from apicache.utils.logger import get_logger

logger = get_logger(__name__)


class OwnerReference(Protocol):
    uid: str
    kind: str


class ObjectMeta(Protocol):
    name: Optional[str]
    namespace: Optional[str]
    uid: Optional[str]
    creation_timestamp: Optional[datetime]
    labels: Optional[dict[str, str]]
    annotations: Optional[dict[str, str]]
    owner_references: Optional[list[OwnerReference]]


class HasMetadata(Protocol):
    """Anything with Kubernetes object metadata, e.g. every kubernetes.client V1* model."""
    metadata: ObjectMeta


CompareFunc = Callable[[Any, Any, Field], bool]
FilterFunc = Callable[[Any, Filter], bool]
# Must return a copy; objects handed to the engine can be shared.
TransformFunc = Callable[[Any], Any]


class PaginationInfo(BaseModel):
    limit: int
    total: int
    offset: int
    page: int


class ListResult(BaseModel):
    """Envelope returned by every list call. ``total`` counts after filtering, before windowing."""
    model_config = {"arbitrary_types_allowed": True}

    data: list[Any] = PydanticField(default_factory=list)
    pagination: PaginationInfo


def default_list(
    objects: Iterable[Any],
    query: Query,
    compare_func: CompareFunc,
    filter_func: FilterFunc,
    *transform_funcs: TransformFunc,
) -> ListResult:
    filters = list(query.iter_filters())

    # selected matched ones
    filtered: list[Any] = []
    for obj in objects:
        if all(filter_func(obj, f) for f in filters):
            for transform in transform_funcs:
                obj = transform(obj)
            filtered.append(obj)

    ordered = sort_objects(filtered, query, compare_func)

    total = len(ordered)
    if query.pagination is None:
        query.pagination = NO_PAGINATION
    start, end = query.pagination.get_valid_window(total)

    logger.debug(
        "list window",
        extra={"filters": len(filters), "total": total, "start": start, "end": end},
    )

    return ListResult(
        data=ordered[start:end],
        pagination=PaginationInfo(
            limit=query.pagination.limit,
            total=total,
            offset=query.pagination.offset,
            page=query.pagination.page,
        ),
    )


def sort_objects(objects: Sequence[Any], query: Query, compare_func: CompareFunc) -> list[Any]:
    """Return a new list ordered by ``query.sort_by``.

    Descending puts ``a`` before ``b`` when compare(a, b) is True; ascending
    negates the result rather than swapping the arguments.
    """
    def _cmp(left: Any, right: Any) -> int:
        first = compare_func(left, right, query.sort_by)
        if query.ascending:
            first = not first
        return -1 if first else 1

    return sorted(objects, key=functools.cmp_to_key(_cmp))


def _epoch(ts: Optional[datetime]) -> float:
    if ts is None:
        return float("-inf")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def later(left: Optional[datetime], right: Optional[datetime]) -> bool:
    """True if ``left`` is strictly after ``right``; a missing time is the oldest."""
    return _epoch(left) > _epoch(right)


def same_instant(left: Optional[datetime], right: Optional[datetime]) -> bool:
    return _epoch(left) == _epoch(right)


def latest(*timestamps: Optional[datetime]) -> Optional[datetime]:
    result = None
    for ts in timestamps:
        if ts is not None and (result is None or later(ts, result)):
            result = ts
    return result


def default_object_meta_compare(left: ObjectMeta, right: ObjectMeta, sort_by: Field) -> bool:
    """Return True if ``left`` outranks ``right``.

    ``name`` compares names; ``creationTimestamp``, ``createTime`` and any
    unknown field compare creation time, falling back to the name on a tie.
    """
    left_name, right_name = left.name or "", right.name or ""
    if sort_by == FIELD_NAME:
        return left_name > right_name

    # FIELD_CREATION_TIMESTAMP, FIELD_CREATE_TIME and anything else
    if same_instant(left.creation_timestamp, right.creation_timestamp):
        return left_name > right_name
    return later(left.creation_timestamp, right.creation_timestamp)


def default_object_meta_filter(item: ObjectMeta, f: Filter) -> bool:
    value = str(f.value)
    name = item.name or ""

    # ?names=default,kube-system
    if f.field == FIELD_NAMES:
        return name in value.split(",")
    # ?name=default
    if f.field == FIELD_NAME:
        return value in name
    # ?uid=a8a8d6cf-f6a5-4fea-9c1b-e57610115706
    if f.field == FIELD_UID:
        return (item.uid or "") == value
    # ?namespace=kube-system
    if f.field == FIELD_NAMESPACE:
        return (item.namespace or "") == value
    # ?ownerReference=a8a8d6cf-f6a5-4fea-9c1b-e57610115706
    if f.field == FIELD_OWNER_REFERENCE:
        return any(ref.uid == value for ref in item.owner_references or [])
    # ?ownerKind=ReplicaSet
    if f.field == FIELD_OWNER_KIND:
        return any(ref.kind == value for ref in item.owner_references or [])
    # ?annotation=enabled=true
    if f.field == FIELD_ANNOTATION:
        return matching.label_match(item.annotations, value)
    # ?label=app.kubernetes.io/name=web
    if f.field == FIELD_LABEL:
        return matching.label_match(item.labels, value)
    # ?dogo=a=b||c=d,e=f
    if f.field == FIELD_DOGO:
        return matching.custom_match(item.annotations, value)
    return False


def typed(method):
    """Make a compare/filter method return False for objects that are not ``self.model``."""
    @functools.wraps(method)
    def wrapper(self, *args):
        if not all(isinstance(obj, self.model) for obj in args[:-1]):
            return False
        return method(self, *args)
    return wrapper


class ResourceGetter(ABC):
    """Per-kind read contract used by the HTTP layer."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> Any:
        """Retrieve a single object by namespace and name."""
        ...

    @abstractmethod
    def list(self, namespace: str, query: Query) -> ListResult:
        """Retrieve the objects matching ``query``."""
        ...


class MetadataGetter(ResourceGetter):
    """Getter for any kind whose objects carry standard metadata.

    Subclasses set ``kind``/``model`` and override ``compare``/``filter`` for
    kind-specific fields, delegating to this class for everything else.
    """

    kind: str = ""
    model: type = object

    def __init__(self, data_source: DataSource):
        self._data_source = data_source

    def get(self, namespace: str, name: str) -> Any:
        return self._data_source.fetch_one(self.kind, namespace, name)

    def list(self, namespace: str, query: Query) -> ListResult:
        objects = self._data_source.fetch_all(self.kind, namespace, query.selector())
        return default_list(objects, query, self.compare, self.filter, *self.transforms())

    def transforms(self) -> tuple[TransformFunc, ...]:
        return ()

    @typed
    def compare(self, left: Any, right: Any, field: Field) -> bool:
        return default_object_meta_compare(left.metadata, right.metadata, field)

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        return default_object_meta_filter(obj.metadata, f)
