from apicache.cluster.base import (
    ApiCacheError,
    DataSource,
    DataSourceError,
    ResourceNotFoundError,
    UnsupportedResourceError,
)
from apicache.cluster.kinds import KIND_SPECS, KindSpec, get_kind_spec

__all__ = [
    "ApiCacheError",
    "DataSource",
    "DataSourceError",
    "ResourceNotFoundError",
    "UnsupportedResourceError",
    "KIND_SPECS",
    "KindSpec",
    "get_kind_spec",
]
