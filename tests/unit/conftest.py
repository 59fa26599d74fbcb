"""In-memory stand-ins for the row store and identity provider."""
import itertools
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from polly.auth.identity import Identity
from polly.auth.provider import IdentityProvider
from polly.core.cache import TTLCache
from polly.core.cookies import CookieJar
from polly.core.csrf import CookieTokenStore, TokenGuard
from polly.core.errors import ConflictError, StoreError
from polly.services.context import RequestContext
from polly.store.base import RowStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

UNIQUE_KEYS = {
    "users": [("email",)],
    "votes": [("poll_id", "user_id")],
}


class InMemoryRowStore(RowStore):
    """Dict-backed RowStore with the same uniqueness rules as the database."""

    def __init__(self):
        self.tables = {"users": [], "polls": [], "votes": []}
        self.writes = []
        self._clock = itertools.count()

    def _table(self, table):
        if table not in self.tables:
            raise StoreError(f"Unknown table: {table}")
        return self.tables[table]

    @staticmethod
    def _matches(row, filters):
        return all(row.get(key) == value for key, value in (filters or {}).items())

    def select(self, table, filters=None, *, columns=None, order_by=None, descending=False, limit=None):
        rows = [dict(row) for row in self._table(table) if self._matches(row, filters)]
        if order_by:
            rows.sort(key=lambda row: row[order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        if columns:
            rows = [{name: row[name] for name in columns} for row in rows]
        return rows

    def insert(self, table, rows):
        inserted = []
        for row in rows:
            new = {
                "id": str(uuid.uuid4()),
                "created_at": BASE_TIME + timedelta(seconds=next(self._clock)),
                **row,
            }
            for key in UNIQUE_KEYS.get(table, []):
                if any(all(existing.get(k) == new.get(k) for k in key) for existing in self._table(table)):
                    raise ConflictError(f"Duplicate {table} row")
            self._table(table).append(new)
            inserted.append(dict(new))
        self.writes.append(("insert", table))
        return inserted

    def update(self, table, patch, filters):
        count = 0
        for row in self._table(table):
            if self._matches(row, filters):
                row.update(patch)
                count += 1
        self.writes.append(("update", table))
        return count

    def delete(self, table, filters):
        rows = self._table(table)
        keep = [row for row in rows if not self._matches(row, filters)]
        count = len(rows) - len(keep)
        self.tables[table] = keep
        if table == "polls":
            # votes.poll_id ON DELETE CASCADE
            gone = {row["id"] for row in rows} - {row["id"] for row in keep}
            self.tables["votes"] = [vote for vote in self.tables["votes"] if vote["poll_id"] not in gone]
        self.writes.append(("delete", table))
        return count


class FakeIdentityProvider(IdentityProvider):
    """Provider whose signed-in user is whatever the test puts in ``user``."""

    def __init__(self, user=None):
        self.user = user

    def sign_in(self, email, password):
        return {"error": None}

    def sign_up(self, email, password, metadata=None):
        return {"error": None}

    def sign_out(self):
        self.user = None
        return {"error": None}

    def get_user(self):
        return self.user

    def session_id(self):
        return f"session-{self.user.id}" if self.user else None


@pytest.fixture
def store():
    return InMemoryRowStore()


@pytest.fixture
def jar():
    return CookieJar()


@pytest.fixture
def tokens(jar):
    return TokenGuard(CookieTokenStore(jar, secure=False))


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def cache():
    return TTLCache(max_size=100, default_ttl=60)


@pytest.fixture
def ctx(store, identity, tokens, cache):
    return RequestContext(store=store, identity=identity, tokens=tokens, cache=cache)


@pytest.fixture
def alice():
    return Identity(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(id="user-bob", email="bob@example.com")


@pytest.fixture
def admin():
    return Identity(id="user-admin", email="admin@example.com", is_admin=True)


@pytest.fixture
def make_poll(store):
    """Insert a poll row directly and return it."""
    def _make(owner, question="Favourite colour?", options=("Red", "Green", "Blue")):
        return store.insert("polls", [{
            "user_id": owner.id,
            "question": question,
            "options": list(options),
        }])[0]

    return _make
