"""Security and authentication utilities."""
import hmac
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import argon2
import jwt

from polly.core import config
from polly.core.constants import CSRF_TOKEN_BYTES

# Argon2 hasher for account passwords
ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def generate_csrf_token() -> str:
    """Generate a 256-bit random token, hex encoded (64 chars)."""
    return secrets.token_hex(CSRF_TOKEN_BYTES)


def tokens_match(candidate: str, stored: str) -> bool:
    """Constant-time comparison of two token strings."""
    return hmac.compare_digest(candidate.encode(), stored.encode())


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its Argon2 hash."""
    try:
        ph.verify(password_hash, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def create_session_token(
    user_id: str,
    session_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed session JWT for user_id.

    ``sid`` identifies the login session and survives refreshes, so state
    keyed on it (the server-side CSRF token) is not lost when the cookie is
    re-issued.
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.settings.SESSION_EXPIRE_MINUTES)

    payload = {
        "sub": user_id,
        "sid": session_id or uuid.uuid4().hex,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Decode a session JWT. Returns None for expired or tampered tokens."""
    try:
        payload = jwt.decode(
            token,
            config.settings.SECRET_KEY,
            algorithms=[config.settings.ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.PyJWTError:
        return None

    if not payload.get("sub") or not payload.get("sid"):
        return None
    return payload


def session_needs_refresh(payload: dict) -> bool:
    """True once a session has used up half of its lifetime."""
    issued_at = payload.get("iat")
    expires_at = payload.get("exp")
    if issued_at is None or expires_at is None:
        return False
    now = datetime.now(timezone.utc).timestamp()
    return now >= issued_at + (expires_at - issued_at) / 2
