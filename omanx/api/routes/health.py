"""
Health Check Routes - System health and monitoring endpoints.

These endpoints are used for:
1. Load balancer health checks
2. Kubernetes liveness and readiness checks
3. Monitoring dashboards (knowledge load state, cache occupancy, uptime)

They only read state; nothing here touches the provider.
"""
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from omanx.api.dependencies import get_app_settings, get_knowledge_store, get_response_cache
from omanx.cache.response_cache import ResponseCache
from omanx.core.audit import get_request_id
from omanx.core.config import Settings
from omanx.core.logging_config import get_logger
from omanx.knowledge.store import KnowledgeStore
from omanx.models.chat import (
    CacheStats,
    HealthResponse,
    KnowledgeStatus,
    MetricsResponse,
    ProviderStatus,
    ReadyResponse,
    ServerStats,
)

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


def _uptime(request: Request) -> int:
    return int(time.monotonic() - request.app.state.started_at)


def _knowledge_status(store: KnowledgeStore) -> KnowledgeStatus:
    snapshot = store.snapshot
    return KnowledgeStatus(
        loaded=snapshot.document is not None,
        path=str(store.path),
        mtime=snapshot.mtime if snapshot.document is not None else None,
        version=snapshot.version,
        entries=snapshot.document.entry_count if snapshot.document is not None else 0,
        last_error=store.last_error,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="""
    Returns the current health status of the service, including whether
    the knowledge file is loaded and how full the response cache is.

    Returns 200 OK whenever the process is serving requests.
    """
)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: KnowledgeStore = Depends(get_knowledge_store),
    cache: ResponseCache = Depends(get_response_cache),
) -> HealthResponse:
    logger.debug("Health check requested")

    return HealthResponse(
        ok=True,
        env=settings.app_env,
        uptime_s=_uptime(request),
        request_id=get_request_id(request),
        provider=ProviderStatus(
            configured=bool(settings.groq_api_key),
            model=settings.llm_model,
        ),
        knowledge=_knowledge_status(store),
        cache=CacheStats(**cache.stats()),
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check endpoint",
    description="""
    200 when the knowledge file is loaded and a provider key is configured,
    503 otherwise.
    """
)
async def readiness_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    ready = store.is_loaded and bool(settings.groq_api_key)
    body = ReadyResponse(ready=ready, request_id=get_request_id(request))

    return JSONResponse(
        status_code=200 if ready else 503,
        content=body.model_dump(by_alias=True),
    )


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Runtime metrics",
)
async def metrics(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: KnowledgeStore = Depends(get_knowledge_store),
    cache: ResponseCache = Depends(get_response_cache),
) -> MetricsResponse:
    return MetricsResponse(
        request_id=get_request_id(request),
        cache=CacheStats(**cache.stats()),
        knowledge=_knowledge_status(store),
        server=ServerStats(env=settings.app_env, uptime_s=_uptime(request)),
    )
