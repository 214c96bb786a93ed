"""Nodes, enriched with the resource requests/limits of the pods scheduled on them."""

from __future__ import annotations

import copy
from decimal import Decimal
from typing import Any, Iterable

from kubernetes import client
from kubernetes.utils import parse_quantity

from apicache.cluster import kinds
from apicache.query.types import FIELD_STATUS, Filter, Query
from apicache.resources.interface import ListResult, MetadataGetter, default_list, typed

ANNOTATION_CPU_REQUESTS = "node.apicache.io/cpu-requests"
ANNOTATION_MEMORY_REQUESTS = "node.apicache.io/memory-requests"
ANNOTATION_CPU_LIMITS = "node.apicache.io/cpu-limits"
ANNOTATION_MEMORY_LIMITS = "node.apicache.io/memory-limits"
ANNOTATION_CPU_REQUESTS_FRACTION = "node.apicache.io/cpu-requests-fraction"
ANNOTATION_CPU_LIMITS_FRACTION = "node.apicache.io/cpu-limits-fraction"
ANNOTATION_MEMORY_REQUESTS_FRACTION = "node.apicache.io/memory-requests-fraction"
ANNOTATION_MEMORY_LIMITS_FRACTION = "node.apicache.io/memory-limits-fraction"

STATUS_RUNNING = "running"
STATUS_WARNING = "warning"
STATUS_UNSCHEDULABLE = "unschedulable"

# condition type -> healthy status
EXPECTED_CONDITIONS = {
    "MemoryPressure": "False",
    "DiskPressure": "False",
    "PIDPressure": "False",
    "NetworkUnavailable": "False",
    "ConfigOK": "True",
    "KubeletReady": "True",
    "Ready": "True",
}

_TERMINATED_PHASES = ("Succeeded", "Failed")
_BINARY_SUFFIXES = (("Ti", 1024 ** 4), ("Gi", 1024 ** 3), ("Mi", 1024 ** 2), ("Ki", 1024))


def node_status(node: client.V1Node) -> str:
    if node.spec is not None and node.spec.unschedulable:
        return STATUS_UNSCHEDULABLE
    conditions = (node.status.conditions if node.status else None) or []
    for condition in conditions:
        expected = EXPECTED_CONDITIONS.get(condition.type)
        if expected is not None and condition.status != expected:
            return STATUS_WARNING
    return STATUS_RUNNING


def format_cpu(cores: Decimal) -> str:
    if cores == cores.to_integral_value():
        return str(int(cores))
    return f"{int(cores * 1000)}m"


def format_memory(size: Decimal) -> str:
    size = int(size)
    for suffix, factor in _BINARY_SUFFIXES:
        if size and size % factor == 0:
            return f"{size // factor}{suffix}"
    return str(size)


def _add(total: dict[str, Decimal], quantities: dict[str, str] | None) -> None:
    for name, raw in (quantities or {}).items():
        total[name] = total.get(name, Decimal(0)) + parse_quantity(raw)


def pod_requests_and_limits(pod: client.V1Pod) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
    """Sum of app containers, raised to the largest init container where that is bigger."""
    reqs: dict[str, Decimal] = {}
    limits: dict[str, Decimal] = {}
    spec = pod.spec
    if spec is None:
        return reqs, limits

    for container in spec.containers or []:
        resources = container.resources
        if resources is not None:
            _add(reqs, resources.requests)
            _add(limits, resources.limits)

    for container in spec.init_containers or []:
        resources = container.resources
        if resources is None:
            continue
        for target, quantities in ((reqs, resources.requests), (limits, resources.limits)):
            for name, raw in (quantities or {}).items():
                value = parse_quantity(raw)
                if value > target.get(name, Decimal(0)):
                    target[name] = value

    return reqs, limits


def pods_total_requests_and_limits(pods: Iterable[client.V1Pod]) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
    reqs: dict[str, Decimal] = {}
    limits: dict[str, Decimal] = {}
    for pod in pods:
        pod_reqs, pod_limits = pod_requests_and_limits(pod)
        for name, value in pod_reqs.items():
            reqs[name] = reqs.get(name, Decimal(0)) + value
        for name, value in pod_limits.items():
            limits[name] = limits.get(name, Decimal(0)) + value
    return reqs, limits


def _percent(used: Decimal, allocatable: Decimal) -> str:
    if not allocatable:
        return "0%"
    return f"{int(used / allocatable * 100)}%"


def annotate_node(node: client.V1Node, pods: list[client.V1Pod]) -> client.V1Node:
    """Write request/limit annotations onto ``node`` in place. Pass a copy."""
    if node.metadata.annotations is None:
        node.metadata.annotations = {}
    if not pods:
        return node

    node_pods = [p for p in pods if p.spec is not None and p.spec.node_name == node.metadata.name]
    reqs, limits = pods_total_requests_and_limits(node_pods)
    zero = Decimal(0)
    cpu_reqs, cpu_limits = reqs.get("cpu", zero), limits.get("cpu", zero)
    memory_reqs, memory_limits = reqs.get("memory", zero), limits.get("memory", zero)

    allocatable = (node.status.allocatable if node.status else None) or {}
    allocatable_cpu = parse_quantity(allocatable["cpu"]) if "cpu" in allocatable else zero
    allocatable_memory = parse_quantity(allocatable["memory"]) if "memory" in allocatable else zero

    node.metadata.annotations.update({
        ANNOTATION_CPU_REQUESTS: format_cpu(cpu_reqs),
        ANNOTATION_CPU_LIMITS: format_cpu(cpu_limits),
        ANNOTATION_MEMORY_REQUESTS: format_memory(memory_reqs),
        ANNOTATION_MEMORY_LIMITS: format_memory(memory_limits),
        ANNOTATION_CPU_REQUESTS_FRACTION: _percent(cpu_reqs, allocatable_cpu),
        ANNOTATION_CPU_LIMITS_FRACTION: _percent(cpu_limits, allocatable_cpu),
        ANNOTATION_MEMORY_REQUESTS_FRACTION: _percent(memory_reqs, allocatable_memory),
        ANNOTATION_MEMORY_LIMITS_FRACTION: _percent(memory_limits, allocatable_memory),
    })
    return node


class NodeGetter(MetadataGetter):
    kind = kinds.NODES
    model = client.V1Node

    def _non_terminated_pods(self) -> list[client.V1Pod]:
        return [
            p for p in self._data_source.fetch_all(kinds.PODS)
            if p.status is None or p.status.phase not in _TERMINATED_PHASES
        ]

    def get(self, namespace: str, name: str) -> Any:
        node = self._data_source.fetch_one(self.kind, "", name)
        # never mutate the shared object
        return annotate_node(copy.deepcopy(node), self._non_terminated_pods())

    def list(self, namespace: str, query: Query) -> ListResult:
        objects = self._data_source.fetch_all(self.kind, "", query.selector())
        result = default_list(objects, query, self.compare, self.filter)

        # only the returned page is annotated
        pods = self._non_terminated_pods()
        result.data = [annotate_node(copy.deepcopy(node), pods) for node in result.data]
        return result

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return node_status(obj) == f.value
        return super().filter(obj, f)
