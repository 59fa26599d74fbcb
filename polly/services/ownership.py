"""Ownership checks against freshly read rows."""
from typing import Any, Optional

import structlog

from polly.auth.identity import Identity
from polly.core.constants import POLLS_TABLE
from polly.core.errors import AuthorizationError, NotFoundError, ValidationError
from polly.core.sanitization import validate_identifier
from polly.store.base import Row, RowStore

logger = structlog.get_logger(__name__)

POLL_NOT_FOUND_MESSAGE = "Poll not found"


def clean_poll_id(poll_id: Any) -> str:
    """Validate a poll id; malformed ids are reported as a missing poll."""
    try:
        return validate_identifier(poll_id)
    except ValidationError:
        raise NotFoundError(POLL_NOT_FOUND_MESSAGE)


def assert_owner(
    resource_owner_id: str,
    caller: Identity,
    message: Optional[str] = None,
    allow_admin: bool = False,
) -> None:
    """
    Fail unless caller owns the resource (or is an admin, when allowed).

    resource_owner_id must come from a row the server just read, never from
    request data.

    Raises:
        AuthorizationError: Caller is neither owner nor a permitted admin
    """
    if resource_owner_id == caller.id:
        return
    if allow_admin and caller.is_admin:
        return

    logger.warning("ownership_denied", user_id=caller.id, owner_id=resource_owner_id)
    raise AuthorizationError(message)


def fetch_poll(store: RowStore, poll_id: str) -> Row:
    """Read a poll row by id.

    Raises:
        NotFoundError: No poll with that id
    """
    rows = store.select(POLLS_TABLE, {"id": poll_id}, limit=1)
    if not rows:
        raise NotFoundError(POLL_NOT_FOUND_MESSAGE)
    return rows[0]


def fetch_owned_poll(
    store: RowStore,
    poll_id: str,
    caller: Identity,
    action: str = "modify",
    allow_admin: bool = False,
) -> Row:
    """Re-read the poll and check the caller may perform action on it."""
    poll = fetch_poll(store, poll_id)
    assert_owner(
        poll["user_id"],
        caller,
        message=f"You can only {action} your own polls",
        allow_admin=allow_admin,
    )
    return poll
