"""Identity provider: credentials, sessions, user records."""
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import structlog

from polly.auth.identity import Identity
from polly.core.config import settings
from polly.core.constants import MIN_PASSWORD_LENGTH, USERS_TABLE
from polly.core.cookies import CookieJar
from polly.core.errors import ConflictError
from polly.core.security import (
    create_session_token,
    decode_session_token,
    get_password_hash,
    session_needs_refresh,
    verify_password,
)
from polly.store.base import Row, RowStore

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Keys a user may never set on their own record
RESERVED_METADATA_KEYS = {"isAdmin", "is_admin", "role", "roles"}

INVALID_CREDENTIALS_MESSAGE = "Invalid login credentials"


def normalize_email(email: Any) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


class IdentityProvider(ABC):
    """What the guard layer needs from an authentication service.

    Mutating calls return ``{"error": str | None}`` like every other action.
    """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Dict[str, Optional[str]]:
        ...

    @abstractmethod
    def sign_up(self, email: str, password: str, metadata: Optional[Mapping[str, Any]] = None) -> Dict[str, Optional[str]]:
        ...

    @abstractmethod
    def sign_out(self) -> Dict[str, Optional[str]]:
        ...

    @abstractmethod
    def get_user(self) -> Optional[Identity]:
        ...

    @abstractmethod
    def session_id(self) -> Optional[str]:
        """Stable id of the current login session, if any."""


def identity_from_row(row: Row) -> Identity:
    app_metadata = row.get("app_metadata") or {}
    return Identity(
        id=row["id"],
        email=row["email"],
        is_admin=bool(app_metadata.get("isAdmin", False)),
        metadata=dict(row.get("user_metadata") or {}),
    )


class DatabaseIdentityProvider(IdentityProvider):
    """Users in the ``users`` table, sessions in a signed cookie.

    One instance per request. Cookie changes (login, logout, sliding refresh)
    are queued on the request's CookieJar.
    """

    def __init__(self, store: RowStore, jar: CookieJar):
        self.store = store
        self.jar = jar
        self._resolved = False
        self._user: Optional[Identity] = None

    def _session_payload(self) -> Optional[dict]:
        token = self.jar.get(settings.SESSION_COOKIE_NAME)
        if not token:
            return None
        return decode_session_token(token)

    def _start_session(self, user_id: str, session_id: Optional[str] = None) -> None:
        token = create_session_token(user_id, session_id=session_id)
        self.jar.set(
            settings.SESSION_COOKIE_NAME,
            token,
            max_age=settings.SESSION_EXPIRE_MINUTES * 60,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
        self._resolved = False

    def session_id(self) -> Optional[str]:
        payload = self._session_payload()
        return payload["sid"] if payload else None

    def get_user(self) -> Optional[Identity]:
        if self._resolved:
            return self._user

        payload = self._session_payload()
        user = None
        if payload:
            rows = self.store.select(USERS_TABLE, {"id": payload["sub"]}, limit=1)
            if rows:
                user = identity_from_row(rows[0])
                if session_needs_refresh(payload):
                    self._start_session(user.id, session_id=payload["sid"])
            else:
                # Session for a user that no longer exists
                self.jar.delete(settings.SESSION_COOKIE_NAME)

        self._user = user
        self._resolved = True
        return user

    def sign_in(self, email: str, password: str) -> Dict[str, Optional[str]]:
        email = normalize_email(email)
        if not email or not password:
            return {"error": INVALID_CREDENTIALS_MESSAGE}

        rows = self.store.select(USERS_TABLE, {"email": email}, limit=1)
        if not rows or not verify_password(password, rows[0]["password_hash"]):
            logger.info("sign_in_failed")
            return {"error": INVALID_CREDENTIALS_MESSAGE}

        self._start_session(rows[0]["id"])
        logger.info("sign_in_succeeded", user_id=rows[0]["id"])
        return {"error": None}

    def sign_up(self, email: str, password: str, metadata: Optional[Mapping[str, Any]] = None) -> Dict[str, Optional[str]]:
        email = normalize_email(email)
        if not EMAIL_PATTERN.match(email):
            return {"error": "Unable to validate email address: invalid format"}
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            return {"error": f"Password should be at least {MIN_PASSWORD_LENGTH} characters."}

        user_metadata = {
            key: value
            for key, value in (metadata or {}).items()
            if key not in RESERVED_METADATA_KEYS
        }

        try:
            inserted = self.store.insert(USERS_TABLE, [{
                "email": email,
                "password_hash": get_password_hash(password),
                "user_metadata": user_metadata,
                "app_metadata": {},
            }])
        except ConflictError:
            return {"error": "User already registered"}

        self._start_session(inserted[0]["id"])
        logger.info("sign_up_succeeded", user_id=inserted[0]["id"])
        return {"error": None}

    def sign_out(self) -> Dict[str, Optional[str]]:
        self.jar.delete(settings.SESSION_COOKIE_NAME)
        self._user = None
        self._resolved = True
        return {"error": None}


def set_admin_flag(store: RowStore, email: str, is_admin: bool) -> Identity:
    """Operator-only: grant or revoke the admin role.

    The flag lives in app_metadata, which no request handler writes.

    Raises:
        NotFoundError: No user with that email
    """
    row = store.single(USERS_TABLE, {"email": normalize_email(email)})
    app_metadata = dict(row.get("app_metadata") or {})
    app_metadata["isAdmin"] = is_admin
    store.update(USERS_TABLE, {"app_metadata": app_metadata}, {"id": row["id"]})
    row["app_metadata"] = app_metadata
    logger.info("admin_flag_changed", user_id=row["id"], is_admin=is_admin)
    return identity_from_row(row)

