"""DataSource backed by the official kubernetes Python client."""

from __future__ import annotations

import os
import time
from typing import Any, Optional

from kubernetes import client, config as k8s_config
from kubernetes.client.exceptions import ApiException

from apicache.cluster.base import DataSource, DataSourceError, ResourceNotFoundError
from apicache.cluster.kinds import get_kind_spec
from apicache.config import ApiCacheConfig
from apicache.utils.logger import get_logger

logger = get_logger(__name__)


def build_api_client(cfg: Optional[ApiCacheConfig] = None) -> client.ApiClient:
    """Build a kubernetes ApiClient.

    Resolution order:
    1. cfg.cluster_url + cfg.cluster_token
    2. Environment variables (KUBERNETES_API_URL, KUBERNETES_TOKEN)
    3. In-cluster service account
    4. Default kubeconfig (~/.kube/config)
    """
    api_url = None
    token = None
    verify_ssl = False

    if cfg:
        api_url = cfg.cluster_url or None
        token = cfg.cluster_token or None
        verify_ssl = cfg.verify_ssl

    # Fallback to env vars
    if not api_url:
        api_url = os.getenv("KUBERNETES_API_URL")
    if not token:
        token = os.getenv("KUBERNETES_TOKEN")

    if api_url and token:
        configuration = client.Configuration()
        configuration.host = api_url
        configuration.api_key = {"authorization": f"Bearer {token}"}
        configuration.verify_ssl = verify_ssl
        logger.info("Using token authentication against %s", api_url)
        return client.ApiClient(configuration)

    try:
        k8s_config.load_incluster_config()
        logger.info("Using in-cluster service account")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
            logger.info("Using kubeconfig")
        except Exception as e:
            raise RuntimeError(f"Failed to initialize K8s client: {e}")
    return client.ApiClient()


class KubernetesDataSource(DataSource):
    """Fetches objects straight from the API server. Stateless apart from cached API objects."""

    def __init__(self, api_client: client.ApiClient):
        self._api_client = api_client
        self._apis: dict[str, Any] = {}

    def _get_api(self, api_name: str) -> Any:
        """Lazily initialize and cache e.g. CoreV1Api / AppsV1Api."""
        if api_name not in self._apis:
            self._apis[api_name] = getattr(client, api_name)(self._api_client)
        return self._apis[api_name]

    def fetch_one(self, kind: str, namespace: str, name: str) -> Any:
        spec = get_kind_spec(kind)
        method = getattr(self._get_api(spec.api), spec.read_method)
        try:
            if spec.namespaced:
                return method(name=name, namespace=namespace)
            return method(name=name)
        except ApiException as exc:
            if exc.status == 404:
                raise ResourceNotFoundError(kind, namespace if spec.namespaced else "", name) from exc
            logger.warning(
                "read failed",
                extra={"kind": kind, "namespace": namespace, "resource_name": name, "status_code": exc.status},
            )
            raise DataSourceError(f"K8s API error ({exc.status}): {exc.reason}", status=exc.status) from exc

    def fetch_all(self, kind: str, namespace: str = "", label_selector: str = "") -> list[Any]:
        spec = get_kind_spec(kind)
        api = self._get_api(spec.api)
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        start = time.monotonic()
        try:
            if spec.namespaced and namespace:
                result = getattr(api, spec.list_method)(namespace=namespace, **kwargs)
            else:
                result = getattr(api, spec.list_all_namespaces_method)(**kwargs)
        except ApiException as exc:
            logger.warning(
                "list failed",
                extra={"kind": kind, "namespace": namespace, "status_code": exc.status},
            )
            raise DataSourceError(f"K8s API error ({exc.status}): {exc.reason}", status=exc.status) from exc

        items = list(result.items or [])
        logger.debug(
            "listed",
            extra={
                "kind": kind,
                "namespace": namespace,
                "total": len(items),
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return items

    def close(self) -> None:
        self._api_client.close()
