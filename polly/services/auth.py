"""Account actions: login, registration, logout."""
from typing import Any, Dict, Optional

from polly.auth.identity import current_user
from polly.core.sanitization import escape_markup
from polly.services.context import RequestContext
from polly.services.results import returns_result

MAX_NAME_LENGTH = 100


@returns_result("Login failed. Please try again.")
def login(ctx: RequestContext, email: str, password: str) -> Dict[str, Any]:
    return ctx.identity.sign_in(email, password)


@returns_result("Registration failed. Please try again.")
def register(ctx: RequestContext, name: Optional[str], email: str, password: str) -> Dict[str, Any]:
    """Create an account; ``name`` goes into user-editable profile metadata."""
    metadata = {}
    if name:
        metadata["name"] = escape_markup(name)[:MAX_NAME_LENGTH]
    return ctx.identity.sign_up(email, password, metadata)


@returns_result("Logout failed. Please try again.")
def logout(ctx: RequestContext) -> Dict[str, Any]:
    return ctx.identity.sign_out()


@returns_result(user=None)
def get_current_user(ctx: RequestContext) -> Dict[str, Any]:
    user = current_user(ctx.identity)
    return {"user": user.model_dump() if user else None, "error": None}
