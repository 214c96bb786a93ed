from apicache.resources.interface import (
    CompareFunc,
    FilterFunc,
    HasMetadata,
    ListResult,
    MetadataGetter,
    PaginationInfo,
    ResourceGetter,
    TransformFunc,
    default_list,
    default_object_meta_compare,
    default_object_meta_filter,
)
from apicache.resources.registry import GETTERS, new_getter

__all__ = [
    "CompareFunc",
    "FilterFunc",
    "HasMetadata",
    "ListResult",
    "MetadataGetter",
    "PaginationInfo",
    "ResourceGetter",
    "TransformFunc",
    "default_list",
    "default_object_meta_compare",
    "default_object_meta_filter",
    "GETTERS",
    "new_getter",
]
