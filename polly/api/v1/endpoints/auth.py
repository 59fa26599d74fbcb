"""Authentication endpoints."""
from fastapi import APIRouter, Depends, Request

from polly.api.deps import get_context
from polly.core.rate_limit import limiter, RATE_LIMITS
from polly.schemas import ActionResult, CurrentUserResult, LoginRequest, RegisterRequest
from polly.services import auth as auth_service
from polly.services.context import RequestContext

router = APIRouter()


@router.post("/login", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["login"])
async def login(
    request: Request,
    credentials: LoginRequest,
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """
    Sign in with email and password.

    On success the session cookie is set on the response. Failures return
    ``{"error": "Invalid login credentials"}`` whether the email or the
    password was wrong.
    """
    return ActionResult(**auth_service.login(ctx, credentials.email, credentials.password))


@router.post("/register", response_model=ActionResult)
@limiter.limit(RATE_LIMITS["register"])
async def register(
    request: Request,
    payload: RegisterRequest,
    ctx: RequestContext = Depends(get_context),
) -> ActionResult:
    """
    Create an account and sign it in.

    Only ``name`` is stored as profile metadata; role flags cannot be set
    through this endpoint.
    """
    return ActionResult(**auth_service.register(ctx, payload.name, payload.email, payload.password))


@router.post("/logout", response_model=ActionResult)
async def logout(ctx: RequestContext = Depends(get_context)) -> ActionResult:
    """Clear the session cookie. Safe to call without a session."""
    return ActionResult(**auth_service.logout(ctx))


@router.get("/me", response_model=CurrentUserResult)
async def me(ctx: RequestContext = Depends(get_context)) -> CurrentUserResult:
    """The signed-in user, or ``{"user": null}``."""
    return CurrentUserResult(**auth_service.get_current_user(ctx))
