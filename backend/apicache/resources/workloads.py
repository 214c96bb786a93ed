"""Deployments, StatefulSets and DaemonSets."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from kubernetes import client

from apicache.cluster import kinds
from apicache.query.types import FIELD_LAST_UPDATE_TIMESTAMP, FIELD_STATUS, FIELD_UPDATE_TIME, Field, Filter
from apicache.resources.interface import MetadataGetter, latest, later, same_instant, typed

STATUS_STOPPED = "stopped"
STATUS_RUNNING = "running"
STATUS_UPDATING = "updating"


def _replica_status(desired: Optional[int], ready: Optional[int]) -> str:
    desired, ready = desired or 0, ready or 0
    if desired == 0 and ready == 0:
        return STATUS_STOPPED
    if desired == ready:
        return STATUS_RUNNING
    return STATUS_UPDATING


def deployment_status(deployment: client.V1Deployment) -> str:
    status = deployment.status or client.V1DeploymentStatus()
    return _replica_status(status.replicas, status.ready_replicas)


def deployment_last_update_time(deployment: client.V1Deployment) -> Optional[datetime]:
    conditions = (deployment.status.conditions if deployment.status else None) or []
    return latest(
        deployment.metadata.creation_timestamp,
        *(c.last_update_time for c in conditions),
    )


def stateful_set_status(stateful_set: client.V1StatefulSet) -> str:
    # no desired replica count means nothing is scheduled
    if stateful_set.spec is None or stateful_set.spec.replicas is None:
        return STATUS_STOPPED
    ready = stateful_set.status.ready_replicas if stateful_set.status else 0
    return _replica_status(stateful_set.spec.replicas, ready)


def daemon_set_status(daemon_set: client.V1DaemonSet) -> str:
    if daemon_set.status is None:
        return STATUS_STOPPED
    return _replica_status(daemon_set.status.desired_number_scheduled, daemon_set.status.number_ready)


class DeploymentGetter(MetadataGetter):
    kind = kinds.DEPLOYMENTS
    model = client.V1Deployment

    @typed
    def compare(self, left: Any, right: Any, field: Field) -> bool:
        if field in (FIELD_UPDATE_TIME, FIELD_LAST_UPDATE_TIMESTAMP):
            left_time, right_time = deployment_last_update_time(left), deployment_last_update_time(right)
            if not same_instant(left_time, right_time):
                return later(left_time, right_time)
        return super().compare(left, right, field)

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return deployment_status(obj) == f.value
        return super().filter(obj, f)


class StatefulSetGetter(MetadataGetter):
    kind = kinds.STATEFUL_SETS
    model = client.V1StatefulSet

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return stateful_set_status(obj) == f.value
        return super().filter(obj, f)


class DaemonSetGetter(MetadataGetter):
    kind = kinds.DAEMON_SETS
    model = client.V1DaemonSet

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return daemon_set_status(obj) == f.value
        return super().filter(obj, f)
