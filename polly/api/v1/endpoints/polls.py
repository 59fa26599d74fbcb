"""Poll and vote endpoints.

Mutating endpoints take form fields (``question``, repeated ``options``,
``csrf_token``, ``poll_id``, ``option_index``) and always answer 200 with
``{"error": null}`` or ``{"error": "<message>"}``.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response

from polly.api.deps import get_context
from polly.core.errors import NotFoundError
from polly.core.rate_limit import limiter, RATE_LIMITS
from polly.schemas import (
    ActionResult,
    PollDetailResult,
    PollEditPage,
    PollListResult,
    PollResultsResult,
)
from polly.services import poll as poll_service
from polly.services import vote as vote_service
from polly.services.context import RequestContext

router = APIRouter()


@router.get("", response_model=PollListResult)
async def list_my_polls(ctx: RequestContext = Depends(get_context)) -> PollListResult:
    """
    Polls owned by the signed-in user, newest first.

    Includes a CSRF token for the per-poll delete forms.
    """
    result = poll_service.get_user_polls(ctx)
    return PollListResult(**result, csrf_token=ctx.tokens.issue())


@router.post("", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["create_poll"])
async def create_poll(
    request: Request,
    question: Optional[str] = Form(None),
    options: List[str] = Form(default=[]),
    csrf_token: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """
    Create a poll.

    Example:
        Request (form-encoded):
            question=Best language?&options=Python&options=Go&csrf_token=9f2c...

        Response (200):
            {"error": null}

        Response (200, validation failure):
            {"error": "Please provide a question and at least two options."}
    """
    return ActionResult(**poll_service.create_poll(ctx, question, options, csrf_token))


@router.post("/delete", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["delete_poll"])
async def delete_poll(
    request: Request,
    poll_id: Optional[str] = Form(None),
    csrf_token: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """Delete a poll the caller owns (admins may delete any poll)."""
    return ActionResult(**poll_service.delete_poll(ctx, poll_id, csrf_token))


@router.get("/{poll_id}", response_model=PollDetailResult)
async def get_poll(
    poll_id: str,
    response: Response,
    ctx: RequestContext = Depends(get_context),
) -> PollDetailResult:
    """
    Poll detail page data.

    Any signed-in user may read any poll. The payload carries whether the
    caller has voted and a CSRF token for the vote form.
    """
    result = poll_service.get_poll_by_id(ctx, poll_id)
    if result["poll"] is None:
        response.status_code = 404
        return PollDetailResult(**result)

    voted = vote_service.has_user_voted(ctx, poll_id)
    return PollDetailResult(
        **result,
        has_voted=voted["voted"],
        csrf_token=ctx.tokens.issue(),
    )


@router.get("/{poll_id}/edit", response_model=PollEditPage)
async def edit_poll_page(poll_id: str, ctx: RequestContext = Depends(get_context)) -> PollEditPage:
    """
    Edit form data for the poll owner.

    Non-owners are redirected (303) to the poll's public page.
    """
    try:
        return PollEditPage(**poll_service.get_poll_for_edit(ctx, poll_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{poll_id}", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["update_poll"])
async def update_poll(
    request: Request,
    poll_id: str,
    question: Optional[str] = Form(None),
    options: List[str] = Form(default=[]),
    csrf_token: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """
    Replace a poll's question and options.

    Ownership is checked against the stored poll and the session identity;
    a ``user_id`` field in the form is ignored.
    """
    return ActionResult(**poll_service.update_poll(ctx, poll_id, question, options, csrf_token))


@router.post("/{poll_id}/votes", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["vote"])
async def submit_vote(
    request: Request,
    poll_id: str,
    option_index: Optional[str] = Form(None),
    csrf_token: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """
    Cast the caller's vote.

    Example:
        Request (form-encoded):
            option_index=1&csrf_token=9f2c...

        Response (200):
            {"error": null}

        Response (200, second vote):
            {"error": "You have already voted on this poll."}
    """
    return ActionResult(**vote_service.submit_vote(ctx, poll_id, option_index, csrf_token))


@router.get("/{poll_id}/results", response_model=PollResultsResult)
@limiter.limit(RATE_LIMITS["read"])
async def get_results(
    request: Request,
    poll_id: str,
    response: Response,
    ctx: RequestContext = Depends(get_context),
) -> PollResultsResult:
    """Vote count per option, in option order."""
    result = vote_service.get_poll_results(ctx, poll_id)
    if result["results"] is None:
        response.status_code = 404
    return PollResultsResult(**result)
