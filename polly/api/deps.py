"""Shared API dependencies."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from polly.auth.identity import current_user
from polly.auth.provider import DatabaseIdentityProvider, IdentityProvider
from polly.core.cache import TTLCache, global_cache
from polly.core.config import settings
from polly.core.csrf import CookieTokenStore, ServerTokenStore, TokenGuard, server_token_cache
from polly.core.errors import RedirectRequired
from polly.db import get_db
from polly.middleware.session import get_cookie_jar
from polly.services.context import RequestContext
from polly.store import RowStore, SqlRowStore


def get_cache() -> TTLCache:
    return global_cache


def get_token_cache() -> TTLCache:
    return server_token_cache


def get_store(db: Session = Depends(get_db)) -> RowStore:
    return SqlRowStore(db)


def get_identity_provider(
    request: Request,
    store: RowStore = Depends(get_store),
) -> IdentityProvider:
    """One provider per request, bound to the request's cookie jar."""
    provider = getattr(request.state, "identity_provider", None)
    if provider is None:
        provider = DatabaseIdentityProvider(store, get_cookie_jar(request))
        request.state.identity_provider = provider
    return provider


def get_token_guard(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
    token_cache: TTLCache = Depends(get_token_cache),
) -> TokenGuard:
    if settings.CSRF_TOKEN_STORE == "server":
        store = ServerTokenStore(token_cache, identity.session_id())
    else:
        store = CookieTokenStore(get_cookie_jar(request))
    return TokenGuard(store)


def get_context(
    store: RowStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    tokens: TokenGuard = Depends(get_token_guard),
    cache: TTLCache = Depends(get_cache),
) -> RequestContext:
    return RequestContext(store=store, identity=identity, tokens=tokens, cache=cache)


def enforce_login(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
) -> None:
    """Protected-route policy: anonymous callers go to the login page.

    Paths under a public prefix are let through.
    """
    if settings.is_public_path(request.url.path):
        return
    if current_user(identity) is None:
        raise RedirectRequired(settings.LOGIN_PATH, reason="anonymous")


__all__ = [
    "get_db",
    "get_cache",
    "get_token_cache",
    "get_store",
    "get_identity_provider",
    "get_token_guard",
    "get_context",
    "enforce_login",
]
