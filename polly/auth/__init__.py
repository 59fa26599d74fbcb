"""Identity: who is calling, resolved from the trusted session only."""
from polly.auth.identity import Identity, current_user, require_user
from polly.auth.provider import DatabaseIdentityProvider, IdentityProvider

__all__ = [
    "Identity",
    "current_user",
    "require_user",
    "IdentityProvider",
    "DatabaseIdentityProvider",
]
