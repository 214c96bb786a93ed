"""
Resolved runtime configuration.

Values come from environment variables (optionally loaded from a .env file by
the API entry point) and are frozen for the lifetime of the application.
"""

import os
from dataclasses import dataclass

from apicache.utils.logger import get_logger

logger = get_logger("config")

DATA_SOURCE_KUBERNETES = "kubernetes"
DATA_SOURCE_MEMORY = "memory"

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ApiCacheConfig:
    """Immutable application config.

    The cluster token is plaintext and lives only in memory.
    """
    # Cluster
    cluster_url: str = ""
    cluster_token: str = ""
    verify_ssl: bool = False

    # "kubernetes" talks to a real API server, "memory" serves a fixture file
    data_source: str = DATA_SOURCE_KUBERNETES
    fixture_path: str = ""

    # HTTP
    cors_origins: tuple = ("http://localhost:5173", "http://localhost:3000")


def config_from_env() -> ApiCacheConfig:
    """Build an ApiCacheConfig from environment variables."""
    data_source = os.getenv("APICACHE_DATA_SOURCE", DATA_SOURCE_KUBERNETES).strip().lower()
    if data_source not in (DATA_SOURCE_KUBERNETES, DATA_SOURCE_MEMORY):
        logger.warning("Unknown APICACHE_DATA_SOURCE %r, using %s", data_source, DATA_SOURCE_KUBERNETES)
        data_source = DATA_SOURCE_KUBERNETES

    origins = os.getenv("APICACHE_CORS_ORIGINS", "")
    cors_origins = tuple(o.strip() for o in origins.split(",") if o.strip())

    return ApiCacheConfig(
        cluster_url=os.getenv("KUBERNETES_API_URL", ""),
        cluster_token=os.getenv("KUBERNETES_TOKEN", ""),
        verify_ssl=os.getenv("KUBERNETES_VERIFY_SSL", "false").strip().lower() in _TRUE_VALUES,
        data_source=data_source,
        fixture_path=os.getenv("APICACHE_FIXTURE_PATH", ""),
        cors_origins=cors_origins or ApiCacheConfig.cors_origins,
    )
