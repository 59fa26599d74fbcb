"""Admin gate: role-checked listing and deletion of any poll."""
from typing import Any, Dict, Optional

import structlog

from polly.auth.identity import Identity, current_user
from polly.core.cache import ALL_POLLS_KEY, get_or_fetch
from polly.core.config import settings
from polly.core.constants import POLLS_TABLE
from polly.core.errors import NotFoundError, RedirectRequired
from polly.core.sanitization import validate_identifier
from polly.services.context import RequestContext
from polly.services.ownership import POLL_NOT_FOUND_MESSAGE, fetch_poll
from polly.services.poll import invalidate_poll_views
from polly.services.results import returns_result

logger = structlog.get_logger(__name__)

NON_ADMIN_REDIRECT = "/polls"


def assert_admin(ctx: RequestContext) -> Identity:
    """
    Page-level guard for admin views.

    Raises:
        RedirectRequired: To the login page for anonymous callers, to the
            poll list for signed-in users without the admin flag
    """
    user = current_user(ctx.identity)
    if user is None:
        raise RedirectRequired(settings.LOGIN_PATH, reason="anonymous")
    if not user.is_admin:
        logger.warning("admin_access_denied", user_id=user.id)
        raise RedirectRequired(NON_ADMIN_REDIRECT, reason="not_admin")
    return user


@returns_result(polls=[])
def list_all_polls(ctx: RequestContext) -> Dict[str, Any]:
    """Every poll in the system, newest first."""
    assert_admin(ctx)
    polls = get_or_fetch(
        ctx.cache,
        ALL_POLLS_KEY,
        lambda: ctx.store.select(POLLS_TABLE, order_by="created_at", descending=True),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return {"polls": polls, "error": None}


@returns_result("Failed to delete poll.")
def admin_delete_poll(ctx: RequestContext, poll_id: Any, csrf_token: Optional[str]) -> Dict[str, Any]:
    """Delete any poll by id; admins bypass the ownership filter. Votes cascade."""
    admin = assert_admin(ctx)
    ctx.tokens.require(csrf_token)

    poll_id = validate_identifier(poll_id)

    poll = fetch_poll(ctx.store, poll_id)

    if not ctx.store.delete(POLLS_TABLE, {"id": poll_id}):
        raise NotFoundError(POLL_NOT_FOUND_MESSAGE)

    invalidate_poll_views(ctx, poll["user_id"], poll_id)
    logger.info("poll_deleted", poll_id=poll_id, user_id=admin.id, by_admin=True)
    return {"error": None}
