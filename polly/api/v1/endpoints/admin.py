"""Admin endpoints.

Every handler goes through the admin gate, which redirects (303) anonymous
callers to the login page and signed-in non-admins to the poll list.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request

from polly.api.deps import get_context
from polly.core.rate_limit import limiter, RATE_LIMITS
from polly.schemas import ActionResult, PollListResult
from polly.services import admin as admin_service
from polly.services.context import RequestContext

router = APIRouter()


@router.get("/polls", response_model=PollListResult)
@limiter.limit(RATE_LIMITS["admin"])
async def list_all_polls(request: Request, ctx: RequestContext = Depends(get_context)) -> PollListResult:
    """
    Every poll with its owner id and creation time, newest first.

    Includes a CSRF token for the delete forms on the admin page.
    """
    result = admin_service.list_all_polls(ctx)
    return PollListResult(**result, csrf_token=ctx.tokens.issue())


@router.post("/polls/delete", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["admin"])
async def delete_any_poll(
    request: Request,
    poll_id: Optional[str] = Form(None),
    csrf_token: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """Delete any poll by id, regardless of owner."""
    return ActionResult(**admin_service.admin_delete_poll(ctx, poll_id, csrf_token))


@router.get("/cache/stats")
async def get_cache_stats(ctx: RequestContext = Depends(get_context)):
    """
    View cache statistics for monitoring.

    Returns size, capacity, hits, misses, hit rate and per-entry age.
    """
    admin_service.assert_admin(ctx)
    return ctx.cache.get_stats()
