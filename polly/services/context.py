"""Per-request collaborators handed to every service operation."""
from dataclasses import dataclass

from polly.auth.provider import IdentityProvider
from polly.core.cache import TTLCache
from polly.core.csrf import TokenGuard
from polly.store.base import RowStore


@dataclass
class RequestContext:
    store: RowStore
    identity: IdentityProvider
    tokens: TokenGuard
    cache: TTLCache
