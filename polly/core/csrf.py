"""Anti-forgery tokens for state-changing form submissions.

One live token per session. ``validate`` consumes the token and immediately
stores a replacement, so a rendered token works exactly once. Two forms
submitted concurrently from one page will race: whichever arrives second
sees the rotated token and is rejected. That is a known limitation of
rotate-on-success and is left as is.
"""
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from polly.core.cache import TTLCache
from polly.core.config import settings
from polly.core.cookies import CookieJar
from polly.core.errors import PollyError, SecurityTokenError
from polly.core.security import generate_csrf_token, tokens_match

logger = structlog.get_logger(__name__)

MISSING_TOKEN_MESSAGE = "Missing security token"
VALIDATION_FAILED_MESSAGE = "Security validation failed. Please try again."


class TokenStore(ABC):
    """Where the current token of one session lives."""

    @abstractmethod
    def load(self) -> Optional[str]:
        ...

    @abstractmethod
    def save(self, token: str, ttl_seconds: int) -> None:
        ...


class CookieTokenStore(TokenStore):
    """Token kept in an HTTP-only, SameSite=Strict cookie scoped to ``/``.

    Expiry is enforced by the cookie's max-age.
    """

    def __init__(self, jar: CookieJar, cookie_name: Optional[str] = None, secure: Optional[bool] = None):
        self.jar = jar
        self.cookie_name = cookie_name or settings.CSRF_COOKIE_NAME
        self.secure = settings.cookie_secure if secure is None else secure

    def load(self) -> Optional[str]:
        return self.jar.get(self.cookie_name)

    def save(self, token: str, ttl_seconds: int) -> None:
        self.jar.set(
            self.cookie_name,
            token,
            max_age=ttl_seconds,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="strict",
        )


class ServerTokenStore(TokenStore):
    """Token kept server-side, keyed by the caller's session id.

    Lives in ``server_token_cache``, never in the view cache: page views
    must not evict a token that is still within its lifetime.
    """

    def __init__(self, cache: TTLCache, session_key: Optional[str]):
        self.cache = cache
        self.session_key = session_key

    def _key(self) -> str:
        return f"csrf:{self.session_key}"

    def load(self) -> Optional[str]:
        if not self.session_key:
            return None
        return self.cache.get(self._key())

    def save(self, token: str, ttl_seconds: int) -> None:
        if not self.session_key:
            raise SecurityTokenError("A session is required to issue a security token.")
        self.cache.set(self._key(), token, ttl=ttl_seconds)


class TokenGuard:
    def __init__(self, store: TokenStore, ttl_seconds: Optional[int] = None):
        self.store = store
        self.ttl_seconds = ttl_seconds or settings.CSRF_TOKEN_TTL_SECONDS

    def issue(self) -> str:
        """Generate a fresh token, make it the session's current one, return it."""
        token = generate_csrf_token()
        self.store.save(token, self.ttl_seconds)
        return token

    def validate(self, candidate: Optional[str]) -> bool:
        """Check candidate against the stored token; rotate on success."""
        stored = self.store.load()
        if not stored or not candidate:
            return False
        if not tokens_match(candidate, stored):
            return False

        self.issue()
        return True

    def require(self, candidate: Optional[str]) -> None:
        """Precondition for every mutating operation.

        Raises:
            SecurityTokenError: token missing, wrong, expired, or the store failed
        """
        if not candidate:
            logger.warning("csrf_token_rejected", reason="missing")
            raise SecurityTokenError(MISSING_TOKEN_MESSAGE)

        try:
            valid = self.validate(candidate)
        except PollyError:
            raise
        except Exception as e:
            logger.error("csrf_validation_error", error=str(e), error_type=type(e).__name__)
            raise SecurityTokenError(VALIDATION_FAILED_MESSAGE)

        if not valid:
            logger.warning("csrf_token_rejected", reason="mismatch")
            raise SecurityTokenError()


# Server-side tokens, one per session, apart from the view cache
server_token_cache = TTLCache(
    max_size=settings.CSRF_SERVER_STORE_MAX_SIZE,
    default_ttl=settings.CSRF_TOKEN_TTL_SECONDS,
)
