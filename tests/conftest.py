"""Shared test fixtures and configuration."""
import os

# Must be set before polly.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from polly.api.deps import get_db
from polly.auth.provider import set_admin_flag
from polly.core.cache import global_cache
from polly.core.csrf import server_token_cache
from polly.db.base import Base
from polly.db.session import enable_sqlite_foreign_keys
from polly.main import app
from polly.store import SqlRowStore
from tests.utils import register


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    from polly.core.rate_limit import limiter

    limiter.reset()
    # Rate limit tests are marked with @pytest.mark.rate_limit
    limiter.enabled = "rate_limit" in request.keywords
    yield
    limiter.enabled = True
    limiter.reset()


@pytest.fixture(autouse=True)
def clear_caches():
    """The process-wide caches must not leak entries between tests."""
    global_cache.clear()
    server_token_cache.clear()
    yield
    global_cache.clear()
    server_token_cache.clear()


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def sql_store(db_session):
    return SqlRowStore(db_session)


@pytest.fixture(scope="function")
def make_client(db_session):
    """Factory for test clients; each one keeps its own cookies (its own browser)."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def _make():
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(make_client):
    """Anonymous test client."""
    return make_client()


@pytest.fixture
def alice(make_client):
    """Client signed in as alice@example.com."""
    return register(make_client(), "alice@example.com", name="Alice")


@pytest.fixture
def bob(make_client):
    """Client signed in as bob@example.com."""
    return register(make_client(), "bob@example.com", name="Bob")


@pytest.fixture
def admin_client(make_client, sql_store):
    """Client signed in as a user holding the admin flag."""
    admin = register(make_client(), "admin@example.com", name="Admin")
    set_admin_flag(sql_store, "admin@example.com", True)
    return admin
