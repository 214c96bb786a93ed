"""In-memory DataSource holding kubernetes.client models, for demo/dev/testing."""

from __future__ import annotations

import json
import os
from typing import Any, Iterable, Mapping

from kubernetes import client

from apicache.cluster.base import DataSource, ResourceNotFoundError
from apicache.cluster.kinds import KIND_SPECS, get_kind_spec
from apicache.query.selector import parse_selector

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "..", "fixtures")
DEFAULT_FIXTURE = os.path.join(FIXTURES_DIR, "demo_cluster.json")


class _FixtureResponse:
    """Quacks like the urllib3 response ApiClient.deserialize expects."""

    def __init__(self, payload: Any):
        self.data = json.dumps(payload)


class InMemoryDataSource(DataSource):
    """Serves objects from a dict of kind -> objects.

    Like an informer cache, the stored objects are shared between callers.
    """

    def __init__(self, objects: Mapping[str, Iterable[Any]] | None = None):
        self._objects: dict[str, list[Any]] = {}
        for kind, items in (objects or {}).items():
            get_kind_spec(kind)
            self._objects[kind] = list(items)

    def add(self, kind: str, *items: Any) -> None:
        get_kind_spec(kind)
        self._objects.setdefault(kind, []).extend(items)

    def fetch_one(self, kind: str, namespace: str, name: str) -> Any:
        spec = get_kind_spec(kind)
        for obj in self._objects.get(kind, []):
            if obj.metadata.name != name:
                continue
            if spec.namespaced and obj.metadata.namespace != namespace:
                continue
            return obj
        raise ResourceNotFoundError(kind, namespace if spec.namespaced else "", name)

    def fetch_all(self, kind: str, namespace: str = "", label_selector: str = "") -> list[Any]:
        spec = get_kind_spec(kind)
        selector = parse_selector(label_selector)
        return [
            obj for obj in self._objects.get(kind, [])
            if (not spec.namespaced or not namespace or obj.metadata.namespace == namespace)
            and selector.matches(obj.metadata.labels)
        ]


def load_fixture(path: str = DEFAULT_FIXTURE) -> InMemoryDataSource:
    """Load a JSON fixture of {kind: [manifest, ...]} into an InMemoryDataSource."""
    with open(path, "r") as f:
        raw = json.load(f)

    api_client = client.ApiClient()
    objects: dict[str, list[Any]] = {}
    for kind, manifests in raw.items():
        if kind not in KIND_SPECS:
            continue
        model = KIND_SPECS[kind].model
        objects[kind] = [api_client.deserialize(_FixtureResponse(m), model) for m in manifests]
    return InMemoryDataSource(objects)
