"""Poll business logic."""
from typing import Any, Dict, Optional, Sequence

import structlog

from polly.auth.identity import current_user, require_user
from polly.core.cache import (
    ALL_POLLS_KEY,
    get_or_fetch,
    poll_key,
    results_key,
    user_polls_key,
)
from polly.core.config import settings
from polly.core.constants import POLLS_TABLE
from polly.core.errors import NotFoundError, RedirectRequired
from polly.core.sanitization import clean_options, validate_poll_input
from polly.services.context import RequestContext
from polly.services.ownership import (
    POLL_NOT_FOUND_MESSAGE,
    clean_poll_id,
    fetch_owned_poll,
    fetch_poll,
)
from polly.services.results import returns_result

logger = structlog.get_logger(__name__)


def invalidate_poll_views(ctx: RequestContext, owner_id: str, poll_id: Optional[str] = None) -> None:
    """Drop cached list views, and the detail/results views of poll_id if given."""
    keys = [user_polls_key(owner_id), ALL_POLLS_KEY]
    if poll_id:
        keys += [poll_key(poll_id), results_key(poll_id)]
    ctx.cache.invalidate(*keys)
    logger.info("cache_invalidated", keys=keys)


@returns_result("Failed to create poll.")
def create_poll(
    ctx: RequestContext,
    question: Any,
    options: Sequence[Any],
    csrf_token: Optional[str],
) -> Dict[str, Any]:
    """
    Create a poll owned by the calling user.

    Order: CSRF token, input validation, identity, insert. The owner is always
    the session identity.
    """
    ctx.tokens.require(csrf_token)
    question, options = validate_poll_input(question, clean_options(options))
    user = require_user(ctx.identity, "You must be logged in to create a poll.")

    inserted = ctx.store.insert(POLLS_TABLE, [{
        "user_id": user.id,
        "question": question,
        "options": options,
    }])

    invalidate_poll_views(ctx, user.id)
    logger.info("poll_created", poll_id=inserted[0]["id"], user_id=user.id)
    return {"error": None}


@returns_result("Failed to update poll.")
def update_poll(
    ctx: RequestContext,
    poll_id: Any,
    question: Any,
    options: Sequence[Any],
    csrf_token: Optional[str],
) -> Dict[str, Any]:
    """
    Replace the question and options of a poll the caller owns.

    The write is filtered on both id and owner, so a poll whose ownership
    changed between the check and the write is left untouched.
    """
    ctx.tokens.require(csrf_token)
    question, options = validate_poll_input(question, clean_options(options))
    user = require_user(ctx.identity, "You must be logged in to update a poll.")
    poll_id = clean_poll_id(poll_id)

    fetch_owned_poll(ctx.store, poll_id, user, action="update")

    updated = ctx.store.update(
        POLLS_TABLE,
        {"question": question, "options": options},
        {"id": poll_id, "user_id": user.id},
    )
    if not updated:
        raise NotFoundError(POLL_NOT_FOUND_MESSAGE)

    invalidate_poll_views(ctx, user.id, poll_id)
    logger.info("poll_updated", poll_id=poll_id, user_id=user.id)
    return {"error": None}


@returns_result("Failed to delete poll.")
def delete_poll(ctx: RequestContext, poll_id: Any, csrf_token: Optional[str]) -> Dict[str, Any]:
    """
    Delete a poll. Allowed for the owner and for admins.

    Votes are removed by the votes.poll_id ON DELETE CASCADE, within the
    poll delete itself.
    """
    ctx.tokens.require(csrf_token)
    user = require_user(ctx.identity, "You must be logged in to delete a poll.")
    poll_id = clean_poll_id(poll_id)

    poll = fetch_owned_poll(ctx.store, poll_id, user, action="delete", allow_admin=True)

    filters = {"id": poll_id}
    if poll["user_id"] == user.id:
        filters["user_id"] = user.id

    if not ctx.store.delete(POLLS_TABLE, filters):
        raise NotFoundError(POLL_NOT_FOUND_MESSAGE)

    invalidate_poll_views(ctx, poll["user_id"], poll_id)
    logger.info("poll_deleted", poll_id=poll_id, user_id=user.id, by_admin=poll["user_id"] != user.id)
    return {"error": None}


@returns_result(poll=None)
def get_poll_by_id(ctx: RequestContext, poll_id: Any) -> Dict[str, Any]:
    """Public read of a single poll; no ownership check."""
    poll_id = clean_poll_id(poll_id)
    poll = get_or_fetch(
        ctx.cache,
        poll_key(poll_id),
        lambda: fetch_poll(ctx.store, poll_id),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return {"poll": poll, "error": None}


@returns_result(polls=[])
def get_user_polls(ctx: RequestContext) -> Dict[str, Any]:
    """Polls owned by the caller, newest first."""
    user = current_user(ctx.identity)
    if user is None:
        return {"polls": [], "error": "Not authenticated"}

    polls = get_or_fetch(
        ctx.cache,
        user_polls_key(user.id),
        lambda: ctx.store.select(
            POLLS_TABLE,
            {"user_id": user.id},
            order_by="created_at",
            descending=True,
        ),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return {"polls": polls, "error": None}


def get_poll_for_edit(ctx: RequestContext, poll_id: Any) -> Dict[str, Any]:
    """
    Page-level guard for the edit form.

    Returns the poll together with a fresh CSRF token for the form. Callers
    who do not own the poll are redirected to its public page.

    Raises:
        NotFoundError: No such poll
        RedirectRequired: Anonymous caller, or caller is not the owner
    """
    poll_id = clean_poll_id(poll_id)
    poll = fetch_poll(ctx.store, poll_id)

    user = current_user(ctx.identity)
    if user is None or poll["user_id"] != user.id:
        raise RedirectRequired(f"/polls/{poll_id}", reason="not_owner")

    return {"poll": poll, "csrf_token": ctx.tokens.issue()}
