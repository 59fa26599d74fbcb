"""Vote business logic."""
import re
from typing import Any, Dict, List, Optional

import structlog

from polly.auth.identity import current_user, require_user
from polly.core.cache import get_or_fetch, poll_key, results_key
from polly.core.config import settings
from polly.core.constants import VOTES_TABLE
from polly.core.errors import ConflictError, ValidationError
from polly.services.context import RequestContext
from polly.services.ownership import clean_poll_id, fetch_poll
from polly.services.results import returns_result

logger = structlog.get_logger(__name__)

ALREADY_VOTED_MESSAGE = "You have already voted on this poll."
INVALID_OPTION_MESSAGE = "Invalid option selected"

# ASCII digits only; str.isdigit also admits superscripts and other scripts
OPTION_INDEX_PATTERN = re.compile(r"-?[0-9]{1,9}")


def parse_option_index(option_index: Any, option_count: int) -> int:
    """
    Coerce a submitted option index and check it is in range.

    Accepts ints and decimal strings (form fields arrive as text); bools,
    floats and anything else are rejected.

    Raises:
        ValidationError: Index is not an integer in [0, option_count)
    """
    if isinstance(option_index, bool):
        raise ValidationError(INVALID_OPTION_MESSAGE)
    if isinstance(option_index, str):
        text = option_index.strip()
        if not OPTION_INDEX_PATTERN.fullmatch(text):
            raise ValidationError(INVALID_OPTION_MESSAGE)
        option_index = int(text)
    if not isinstance(option_index, int):
        raise ValidationError(INVALID_OPTION_MESSAGE)

    if option_index < 0 or option_index >= option_count:
        raise ValidationError(INVALID_OPTION_MESSAGE)
    return option_index


@returns_result("Failed to submit vote.")
def submit_vote(
    ctx: RequestContext,
    poll_id: Any,
    option_index: Any,
    csrf_token: Optional[str],
) -> Dict[str, Any]:
    """
    Cast the caller's single vote on a poll.

    Checks run in this order: token, poll id, poll lookup, option range,
    identity. The range check must stay ahead of identity: an out-of-range
    index reports "Invalid option selected" to every caller, signed in or
    not, and never "You must be logged in to vote." The existence check is a
    fast path only; the unique (poll_id, user_id) constraint in the store is
    what actually stops a concurrent second vote.
    """
    ctx.tokens.require(csrf_token)
    poll_id = clean_poll_id(poll_id)

    poll = fetch_poll(ctx.store, poll_id)
    selected = parse_option_index(option_index, len(poll["options"]))

    user = require_user(ctx.identity, "You must be logged in to vote.")

    existing = ctx.store.select(
        VOTES_TABLE,
        {"poll_id": poll_id, "user_id": user.id},
        columns=["id"],
        limit=1,
    )
    if existing:
        logger.info("vote_rejected", poll_id=poll_id, user_id=user.id, reason="already_voted")
        return {"error": ALREADY_VOTED_MESSAGE}

    try:
        ctx.store.insert(VOTES_TABLE, [{
            "poll_id": poll_id,
            "user_id": user.id,
            "selected_option": selected,
        }])
    except ConflictError:
        # Lost a race with a concurrent vote from the same user
        logger.info("vote_rejected", poll_id=poll_id, user_id=user.id, reason="unique_constraint")
        return {"error": ALREADY_VOTED_MESSAGE}

    ctx.cache.invalidate(poll_key(poll_id), results_key(poll_id))
    logger.info("vote_recorded", poll_id=poll_id, user_id=user.id)
    return {"error": None}


def tally_votes(option_count: int, selected_options: List[Any]) -> List[int]:
    """Count votes per option index. Indices outside the current range are ignored."""
    counts = [0] * option_count
    for selected in selected_options:
        if isinstance(selected, int) and not isinstance(selected, bool) and 0 <= selected < option_count:
            counts[selected] += 1
    return counts


def _load_results(ctx: RequestContext, poll_id: str) -> Dict[str, Any]:
    poll = fetch_poll(ctx.store, poll_id)
    votes = ctx.store.select(VOTES_TABLE, {"poll_id": poll_id}, columns=["selected_option"])
    counts = tally_votes(len(poll["options"]), [vote["selected_option"] for vote in votes])
    return {
        "poll_id": poll_id,
        "question": poll["question"],
        "options": poll["options"],
        "vote_counts": counts,
        "total_votes": sum(counts),
    }


@returns_result(results=None)
def get_poll_results(ctx: RequestContext, poll_id: Any) -> Dict[str, Any]:
    """Public read: vote count per option, in option order."""
    poll_id = clean_poll_id(poll_id)
    results = get_or_fetch(
        ctx.cache,
        results_key(poll_id),
        lambda: _load_results(ctx, poll_id),
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
    return {"results": results, "error": None}


@returns_result(voted=False)
def has_user_voted(ctx: RequestContext, poll_id: Any) -> Dict[str, Any]:
    """Whether the caller already voted on poll_id; False for anonymous callers."""
    user = current_user(ctx.identity)
    if user is None:
        return {"voted": False, "error": None}

    poll_id = clean_poll_id(poll_id)
    rows = ctx.store.select(
        VOTES_TABLE,
        {"poll_id": poll_id, "user_id": user.id},
        columns=["id"],
        limit=1,
    )
    return {"voted": bool(rows), "error": None}
