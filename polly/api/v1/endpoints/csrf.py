"""CSRF token endpoint."""
from fastapi import APIRouter, Depends

from polly.api.deps import get_token_guard
from polly.core.csrf import TokenGuard
from polly.schemas import CsrfTokenResponse

router = APIRouter()


@router.get("/csrf-token", response_model=CsrfTokenResponse)
async def issue_csrf_token(tokens: TokenGuard = Depends(get_token_guard)) -> CsrfTokenResponse:
    """
    Issue a fresh anti-forgery token for a form about to be rendered.

    The value goes in the form's ``csrf_token`` field; the same value is
    stored in an HTTP-only cookie (or server-side, per CSRF_TOKEN_STORE).
    Issuing replaces any previous token of this session.
    """
    return CsrfTokenResponse(csrf_token=tokens.issue())
