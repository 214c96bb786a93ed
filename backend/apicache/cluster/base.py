"""Abstract DataSource: where resource adapters fetch Kubernetes objects from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ApiCacheError(Exception):
    """Base class for errors surfaced to API callers."""


class UnsupportedResourceError(ApiCacheError):
    """Raised when a resource type has no registered adapter."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"unsupported resource type {kind!r}")


class ResourceNotFoundError(ApiCacheError):
    """Raised when a single object lookup finds nothing."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        where = f"{namespace}/{name}" if namespace else name
        super().__init__(f"{kind} {where!r} not found")


class DataSourceError(ApiCacheError):
    """Raised when the backing cluster call fails for any other reason."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class DataSource(ABC):
    """Read-only access to cluster objects, one kind at a time.

    Objects returned may be shared with other callers; never mutate them,
    deep-copy first.
    """

    @abstractmethod
    def fetch_one(self, kind: str, namespace: str, name: str) -> Any:
        """Return one object or raise ResourceNotFoundError."""
        ...

    @abstractmethod
    def fetch_all(self, kind: str, namespace: str = "", label_selector: str = "") -> list[Any]:
        """Return every object of ``kind`` in ``namespace`` ("" = all) matching the selector."""
        ...

    def close(self) -> None:
        pass
