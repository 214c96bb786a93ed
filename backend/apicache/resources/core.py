"""Kinds that only need the default metadata compare/filter (plus namespace phase)."""

from __future__ import annotations

from typing import Any

from kubernetes import client

from apicache.cluster import kinds
from apicache.query.types import FIELD_STATUS, Filter
from apicache.resources.interface import MetadataGetter, typed


class NamespaceGetter(MetadataGetter):
    kind = kinds.NAMESPACES
    model = client.V1Namespace

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return (obj.status.phase if obj.status else None) == f.value
        return super().filter(obj, f)


class ConfigMapGetter(MetadataGetter):
    kind = kinds.CONFIG_MAPS
    model = client.V1ConfigMap


class SecretGetter(MetadataGetter):
    kind = kinds.SECRETS
    model = client.V1Secret


class ServiceGetter(MetadataGetter):
    kind = kinds.SERVICES
    model = client.V1Service


class ServiceAccountGetter(MetadataGetter):
    kind = kinds.SERVICE_ACCOUNTS
    model = client.V1ServiceAccount


class IngressGetter(MetadataGetter):
    kind = kinds.INGRESSES
    model = client.V1Ingress


class RoleGetter(MetadataGetter):
    kind = kinds.ROLES
    model = client.V1Role


class RoleBindingGetter(MetadataGetter):
    kind = kinds.ROLE_BINDINGS
    model = client.V1RoleBinding
