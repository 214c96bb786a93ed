"""Explicit kind -> getter registration."""

from __future__ import annotations

from apicache.cluster import kinds
from apicache.cluster.base import DataSource, UnsupportedResourceError
from apicache.resources.batch import CronJobGetter, JobGetter
from apicache.resources.core import (
    ConfigMapGetter,
    IngressGetter,
    NamespaceGetter,
    RoleBindingGetter,
    RoleGetter,
    SecretGetter,
    ServiceAccountGetter,
    ServiceGetter,
)
from apicache.resources.interface import MetadataGetter
from apicache.resources.nodes import NodeGetter
from apicache.resources.pods import PodGetter
from apicache.resources.storage import PersistentVolumeClaimGetter, PersistentVolumeGetter, StorageClassGetter
from apicache.resources.workloads import DaemonSetGetter, DeploymentGetter, StatefulSetGetter

GETTERS: dict[str, type[MetadataGetter]] = {
    getter.kind: getter
    for getter in (
        NamespaceGetter,
        NodeGetter,
        StorageClassGetter,
        PersistentVolumeGetter,
        PodGetter,
        ConfigMapGetter,
        SecretGetter,
        ServiceGetter,
        ServiceAccountGetter,
        PersistentVolumeClaimGetter,
        DeploymentGetter,
        StatefulSetGetter,
        DaemonSetGetter,
        JobGetter,
        CronJobGetter,
        IngressGetter,
        RoleGetter,
        RoleBindingGetter,
    )
}


def new_getter(kind: str, data_source: DataSource, namespaced: bool | None = None) -> MetadataGetter:
    """Build the getter for ``kind``.

    Args:
        namespaced: if given, also require the kind's scope to match.

    Raises:
        UnsupportedResourceError: unknown kind, or scope mismatch.
    """
    getter = GETTERS.get(kind)
    if getter is None:
        raise UnsupportedResourceError(kind)
    if namespaced is not None and kinds.get_kind_spec(kind).namespaced != namespaced:
        raise UnsupportedResourceError(kind)
    return getter(data_source)
