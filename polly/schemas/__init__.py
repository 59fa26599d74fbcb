"""Pydantic schemas for request/response validation."""
from polly.schemas.auth import CurrentUserResult, LoginRequest, RegisterRequest
from polly.schemas.common import ActionResult, CsrfTokenResponse
from polly.schemas.poll import (
    PollDetailResult,
    PollEditPage,
    PollListResult,
    PollOut,
    PollResult,
)
from polly.schemas.vote import PollResults, PollResultsResult

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "CurrentUserResult",
    "ActionResult",
    "CsrfTokenResponse",
    "PollOut",
    "PollResult",
    "PollDetailResult",
    "PollListResult",
    "PollEditPage",
    "PollResults",
    "PollResultsResult",
]
