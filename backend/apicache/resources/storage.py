"""PersistentVolumeClaims, PersistentVolumes and StorageClasses."""

from __future__ import annotations

import copy
from typing import Any

from kubernetes import client

from apicache.cluster import kinds
from apicache.query.types import FIELD_STATUS, Field, Filter, Query
from apicache.resources.interface import ListResult, MetadataGetter, default_list, typed
from apicache.resources.pods import pod_binds_pvc

FIELD_STORAGE_CLASS_NAME = Field("storageClassName")

ANNOTATION_IN_USE = "apicache.io/in-use"


def annotate_in_use(pvc: client.V1PersistentVolumeClaim, pods: list[client.V1Pod]) -> client.V1PersistentVolumeClaim:
    """Return a copy of ``pvc`` carrying the in-use annotation."""
    # never mutate the shared object
    pvc = copy.deepcopy(pvc)
    in_use = any(
        p.metadata.namespace == pvc.metadata.namespace and pod_binds_pvc(p, pvc.metadata.name)
        for p in pods
    )
    if pvc.metadata.annotations is None:
        pvc.metadata.annotations = {}
    pvc.metadata.annotations[ANNOTATION_IN_USE] = "true" if in_use else "false"
    return pvc


class PersistentVolumeClaimGetter(MetadataGetter):
    kind = kinds.PERSISTENT_VOLUME_CLAIMS
    model = client.V1PersistentVolumeClaim

    def get(self, namespace: str, name: str) -> Any:
        pvc = self._data_source.fetch_one(self.kind, namespace, name)
        pods = self._data_source.fetch_all(kinds.PODS, namespace)
        return annotate_in_use(pvc, pods)

    def list(self, namespace: str, query: Query) -> ListResult:
        objects = self._data_source.fetch_all(self.kind, namespace, query.selector())
        pods = self._data_source.fetch_all(kinds.PODS, namespace)
        # annotate before filtering so the in-use annotation can be filtered on
        annotated = [annotate_in_use(pvc, pods) for pvc in objects]
        return default_list(annotated, query, self.compare, self.filter)

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            phase = obj.status.phase if obj.status else None
            return (phase or "").lower() == f.value.lower()
        if f.field == FIELD_STORAGE_CLASS_NAME:
            return obj.spec is not None and obj.spec.storage_class_name is not None \
                and obj.spec.storage_class_name == f.value
        return super().filter(obj, f)


class PersistentVolumeGetter(MetadataGetter):
    kind = kinds.PERSISTENT_VOLUMES
    model = client.V1PersistentVolume

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            phase = obj.status.phase if obj.status else None
            return (phase or "").lower() == f.value.lower()
        if f.field == FIELD_STORAGE_CLASS_NAME:
            storage_class = obj.spec.storage_class_name if obj.spec else None
            return bool(storage_class) and storage_class == f.value
        return super().filter(obj, f)


class StorageClassGetter(MetadataGetter):
    kind = kinds.STORAGE_CLASSES
    model = client.V1StorageClass
