"""Session/identity accessor.

Authorization decisions use the Identity returned here and nothing else. A
``user_id`` arriving in a form or JSON body is never trusted for that purpose.
"""
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, Field

from polly.core.errors import AuthenticationError

if TYPE_CHECKING:
    from polly.auth.provider import IdentityProvider


class Identity(BaseModel):
    id: str
    email: str
    is_admin: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


def current_user(provider: "IdentityProvider") -> Optional[Identity]:
    """Resolve the caller from the provider's session; None when anonymous."""
    return provider.get_user()


def require_user(provider: "IdentityProvider", message: Optional[str] = None) -> Identity:
    """Resolve the caller or fail closed.

    Raises:
        AuthenticationError: No session, or the session's user no longer exists
    """
    user = current_user(provider)
    if user is None:
        raise AuthenticationError(message)
    return user
