"""
FastAPI Main Application
Entry point for the API server
"""

from dotenv import load_dotenv
load_dotenv()

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apicache import __version__
from apicache.cluster.base import DataSource
from apicache.config import DATA_SOURCE_MEMORY, ApiCacheConfig, config_from_env
from .routes import router
from apicache.utils.logger import get_logger

logger = get_logger("main")


def _build_data_source(cfg: ApiCacheConfig) -> DataSource:
    if cfg.data_source == DATA_SOURCE_MEMORY:
        from apicache.cluster.memory_source import DEFAULT_FIXTURE, load_fixture

        path = cfg.fixture_path or DEFAULT_FIXTURE
        logger.info("Serving fixture data from %s", path)
        return load_fixture(path)

    from apicache.cluster.kubernetes_source import KubernetesDataSource, build_api_client

    return KubernetesDataSource(build_api_client(cfg))


def create_app(
    data_source: Optional[DataSource] = None,
    cfg: Optional[ApiCacheConfig] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    The data source is built on first use unless one is passed in.
    """
    cfg = cfg or config_from_env()

    app = FastAPI(
        title="apicache",
        description="Filtered, sorted and paginated listing of Kubernetes resources",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.data_source = data_source

    def get_data_source() -> DataSource:
        if app.state.data_source is None:
            app.state.data_source = _build_data_source(cfg)
        return app.state.data_source

    app.state.get_data_source = get_data_source

    app.include_router(router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.on_event("shutdown")
    async def shutdown():
        if app.state.data_source is not None:
            app.state.data_source.close()

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apicache.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
