"""Pods."""

from __future__ import annotations

from typing import Any, Optional

from kubernetes import client

from apicache.cluster import kinds
from apicache.cluster.base import ApiCacheError, DataSource
from apicache.query.selector import LabelSelector, selector_from_set
from apicache.query.types import FIELD_STATUS, Field, Filter, Query
from apicache.resources.interface import ListResult, MetadataGetter, typed
from apicache.utils.logger import get_logger

logger = get_logger(__name__)

FIELD_NODE_NAME = Field("nodeName")
FIELD_PVC_NAME = Field("pvcName")
FIELD_SERVICE_NAME = Field("serviceName")


def pod_binds_pvc(pod: client.V1Pod, pvc_name: str) -> bool:
    volumes = (pod.spec.volumes if pod.spec else None) or []
    return any(
        v.persistent_volume_claim is not None and v.persistent_volume_claim.claim_name == pvc_name
        for v in volumes
    )


class PodGetter(MetadataGetter):
    kind = kinds.PODS
    model = client.V1Pod

    def __init__(self, data_source: DataSource):
        super().__init__(data_source)
        # (namespace, service name) -> selector, None if the lookup failed
        self._service_selectors: dict[tuple[str, str], Optional[LabelSelector]] = {}

    def list(self, namespace: str, query: Query) -> ListResult:
        self._service_selectors.clear()
        return super().list(namespace, query)

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_NODE_NAME:
            return (obj.spec.node_name if obj.spec else None) == f.value
        if f.field == FIELD_PVC_NAME:
            return pod_binds_pvc(obj, f.value)
        if f.field == FIELD_SERVICE_NAME:
            return self._belongs_to_service(obj, f.value)
        if f.field == FIELD_STATUS:
            return (obj.status.phase if obj.status else None) == f.value
        return super().filter(obj, f)

    def _service_selector(self, namespace: str, service_name: str) -> Optional[LabelSelector]:
        key = (namespace, service_name)
        if key not in self._service_selectors:
            try:
                service = self._data_source.fetch_one(kinds.SERVICES, namespace, service_name)
            except ApiCacheError as e:
                logger.debug(
                    "service lookup failed: %s", e,
                    extra={"namespace": namespace, "resource_name": service_name},
                )
                self._service_selectors[key] = None
            else:
                self._service_selectors[key] = selector_from_set(service.spec.selector if service.spec else None)
        return self._service_selectors[key]

    def _belongs_to_service(self, pod: client.V1Pod, service_name: str) -> bool:
        """True if the named Service in the pod's namespace selects this pod."""
        selector = self._service_selector(pod.metadata.namespace, service_name)
        return selector is not None and not selector.empty and selector.matches(pod.metadata.labels)
