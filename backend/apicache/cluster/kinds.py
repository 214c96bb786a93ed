"""Kubernetes resource kinds served by apicache and how to reach them through kubernetes.client."""

from __future__ import annotations

from dataclasses import dataclass

from apicache.cluster.base import UnsupportedResourceError

# Resource type names as they appear in request paths
NAMESPACES = "namespaces"
NODES = "nodes"
STORAGE_CLASSES = "storageclasses"
PERSISTENT_VOLUMES = "persistentvolumes"
PODS = "pods"
CONFIG_MAPS = "configmaps"
SECRETS = "secrets"
SERVICES = "services"
SERVICE_ACCOUNTS = "serviceaccounts"
PERSISTENT_VOLUME_CLAIMS = "persistentvolumeclaims"
DEPLOYMENTS = "deployments"
STATEFUL_SETS = "statefulsets"
DAEMON_SETS = "daemonsets"
JOBS = "jobs"
CRON_JOBS = "cronjobs"
INGRESSES = "ingresses"
ROLES = "roles"
ROLE_BINDINGS = "rolebindings"


@dataclass(frozen=True)
class KindSpec:
    name: str
    # kubernetes.client API class, e.g. "CoreV1Api"
    api: str
    # snake_case resource used in generated method names, e.g. "config_map"
    resource: str
    # kubernetes.client model class name, e.g. "V1ConfigMap"
    model: str
    namespaced: bool

    @property
    def read_method(self) -> str:
        if self.namespaced:
            return f"read_namespaced_{self.resource}"
        return f"read_{self.resource}"

    @property
    def list_method(self) -> str:
        if self.namespaced:
            return f"list_namespaced_{self.resource}"
        return f"list_{self.resource}"

    @property
    def list_all_namespaces_method(self) -> str:
        if self.namespaced:
            return f"list_{self.resource}_for_all_namespaces"
        return self.list_method


KIND_SPECS: dict[str, KindSpec] = {
    spec.name: spec
    for spec in (
        KindSpec(NAMESPACES, "CoreV1Api", "namespace", "V1Namespace", False),
        KindSpec(NODES, "CoreV1Api", "node", "V1Node", False),
        KindSpec(PERSISTENT_VOLUMES, "CoreV1Api", "persistent_volume", "V1PersistentVolume", False),
        KindSpec(STORAGE_CLASSES, "StorageV1Api", "storage_class", "V1StorageClass", False),
        KindSpec(PODS, "CoreV1Api", "pod", "V1Pod", True),
        KindSpec(CONFIG_MAPS, "CoreV1Api", "config_map", "V1ConfigMap", True),
        KindSpec(SECRETS, "CoreV1Api", "secret", "V1Secret", True),
        KindSpec(SERVICES, "CoreV1Api", "service", "V1Service", True),
        KindSpec(SERVICE_ACCOUNTS, "CoreV1Api", "service_account", "V1ServiceAccount", True),
        KindSpec(PERSISTENT_VOLUME_CLAIMS, "CoreV1Api", "persistent_volume_claim", "V1PersistentVolumeClaim", True),
        KindSpec(DEPLOYMENTS, "AppsV1Api", "deployment", "V1Deployment", True),
        KindSpec(STATEFUL_SETS, "AppsV1Api", "stateful_set", "V1StatefulSet", True),
        KindSpec(DAEMON_SETS, "AppsV1Api", "daemon_set", "V1DaemonSet", True),
        KindSpec(JOBS, "BatchV1Api", "job", "V1Job", True),
        KindSpec(CRON_JOBS, "BatchV1Api", "cron_job", "V1CronJob", True),
        KindSpec(INGRESSES, "NetworkingV1Api", "ingress", "V1Ingress", True),
        KindSpec(ROLES, "RbacAuthorizationV1Api", "role", "V1Role", True),
        KindSpec(ROLE_BINDINGS, "RbacAuthorizationV1Api", "role_binding", "V1RoleBinding", True),
    )
}


def get_kind_spec(kind: str) -> KindSpec:
    spec = KIND_SPECS.get(kind)
    if spec is None:
        raise UnsupportedResourceError(kind)
    return spec
