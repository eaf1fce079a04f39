"""
Admin Routes - Operator actions on the in-memory state.

- POST /admin/cache/clear       : drop every cached answer
- POST /admin/knowledge/reload  : re-read the knowledge file now

Both are gated by require_admin (shared secret in production).
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from omanx.api.dependencies import get_knowledge_store, get_response_cache, require_admin
from omanx.cache.response_cache import ResponseCache
from omanx.core.audit import get_request_id
from omanx.core.exceptions import KnowledgeLoadError
from omanx.core.logging_config import get_logger
from omanx.knowledge.store import KnowledgeStore
from omanx.models.chat import AdminResponse, ErrorResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={403: {"model": ErrorResponse, "description": "Missing or wrong admin key"}},
)


@router.post(
    "/cache/clear",
    response_model=AdminResponse,
    response_model_exclude_none=True,
    summary="Clear the response cache",
)
async def clear_cache(
    request: Request,
    cache: ResponseCache = Depends(get_response_cache),
) -> AdminResponse:
    cache.clear()
    return AdminResponse(ok=True, request_id=get_request_id(request))


@router.post(
    "/knowledge/reload",
    response_model=AdminResponse,
    summary="Force a knowledge reload",
    description="""
    Re-reads the knowledge file regardless of its modification time.
    On failure the previous knowledge stays in service and the error is
    returned with status 500.
    """
)
async def reload_knowledge(
    request: Request,
    store: KnowledgeStore = Depends(get_knowledge_store),
):
    request_id = get_request_id(request)

    try:
        updated = await store.load(force=True)
    except KnowledgeLoadError as e:
        logger.error(
            f"Admin knowledge reload failed: request_id={request_id}, "
            f"error={e.message}, details={e.details}"
        )
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": e.message, "requestId": request_id},
        )

    logger.info(f"Admin knowledge reload: request_id={request_id}, updated={updated}")
    return AdminResponse(ok=True, updated=updated, request_id=request_id)
