"""Resource list/get endpoints.

    GET /cache/cluster/{cluster}/resource/{resources}
    GET /cache/cluster/{cluster}/resource/{resources}/name/{name}
    GET /cache/cluster/{cluster}/resource/{resources}/namespace/{namespace}
    GET /cache/cluster/{cluster}/resource/{resources}/namespace/{namespace}/{name}

List endpoints accept page, limit, sortBy, ascending, labelSelector and any
filter field (names, name, uid, namespace, ownerReference, ownerKind,
annotation, label, dogo, plus kind-specific ones such as status).
Bad paging/sorting values and malformed selectors fall back to defaults
instead of failing the request.
"""

import asyncio
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from kubernetes.client import ApiClient

from apicache.cluster.base import ApiCacheError, DataSource, ResourceNotFoundError, UnsupportedResourceError
from apicache.query.parser import parse_query_parameters
from apicache.resources.interface import ListResult
from apicache.resources.registry import new_getter
from apicache.utils.logger import get_logger

logger = get_logger("routes")

router = APIRouter(prefix="/cache", tags=["resources"])

# only used to turn models into JSON-ready dicts; never talks to a cluster
_serializer = ApiClient()


def get_data_source(request: Request) -> DataSource:
    return request.app.state.get_data_source()


def _render(obj: Any) -> Any:
    return _serializer.sanitize_for_serialization(obj)


def _render_list(result: ListResult) -> dict:
    return {
        "data": [_render(obj) for obj in result.data],
        "pagination": result.pagination.model_dump(),
    }


async def _call(kind: str, func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking getter call off the event loop and map errors to HTTP."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, func, *args)
    except UnsupportedResourceError:
        raise HTTPException(status_code=404, detail="unsupported resource type")
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ApiCacheError as e:
        logger.warning("request failed: %s", e, extra={"kind": kind})
        raise HTTPException(status_code=400, detail=str(e))


def _getter(kind: str, data_source: DataSource, namespaced: bool):
    try:
        return new_getter(kind, data_source, namespaced=namespaced)
    except UnsupportedResourceError:
        raise HTTPException(status_code=404, detail="unsupported resource type")


@router.get("/cluster/{cluster}/resource/{resources}")
async def list_cluster_resources(
    cluster: str,
    resources: str,
    request: Request,
    data_source: DataSource = Depends(get_data_source),
):
    """List cluster-scoped resources, e.g. namespaces, nodes, storageclasses."""
    getter = _getter(resources, data_source, namespaced=False)
    query = parse_query_parameters(request.query_params)
    result = await _call(resources, getter.list, "", query)
    return _render_list(result)


@router.get("/cluster/{cluster}/resource/{resources}/name/{name}")
async def get_cluster_resource(
    cluster: str,
    resources: str,
    name: str,
    data_source: DataSource = Depends(get_data_source),
):
    getter = _getter(resources, data_source, namespaced=False)
    obj = await _call(resources, getter.get, "", name)
    return _render(obj)


@router.get("/cluster/{cluster}/resource/{resources}/namespace/{namespace}")
async def list_namespaced_resources(
    cluster: str,
    resources: str,
    namespace: str,
    request: Request,
    data_source: DataSource = Depends(get_data_source),
):
    """List namespaced resources, e.g. deployments, pods, configmaps."""
    getter = _getter(resources, data_source, namespaced=True)
    query = parse_query_parameters(request.query_params)
    result = await _call(resources, getter.list, namespace, query)
    return _render_list(result)


@router.get("/cluster/{cluster}/resource/{resources}/namespace/{namespace}/{name}")
async def get_namespaced_resource(
    cluster: str,
    resources: str,
    namespace: str,
    name: str,
    data_source: DataSource = Depends(get_data_source),
):
    getter = _getter(resources, data_source, namespaced=True)
    obj = await _call(resources, getter.get, namespace, name)
    return _render(obj)
