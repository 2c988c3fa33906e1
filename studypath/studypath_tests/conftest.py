"""
Pytest configuration for account service tests.

Settings are read at import time, so the environment is pinned here before
any test module imports the service.
"""
import os
import tempfile
from unittest.mock import MagicMock

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///./test_studypath.db"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["REDIS_SOCKET_TIMEOUT"] = "0.2"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="studypath-logs-")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
import redis
from fastapi.testclient import TestClient

from studypath.studypath.account_service.db import Base, engine, SessionLocal
from studypath.studypath.account_service.main import app
from studypath.studypath.account_service.session_cache import SessionCache
from studypath.studypath.account_service.tokens import TokenIssuer


class InMemoryRedis:
    """The handful of Redis commands the session cache uses, kept in a dict."""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    def ping(self):
        return True

    def setex(self, name, time_, value):
        seconds = time_.total_seconds() if hasattr(time_, "total_seconds") else time_
        self.data[name] = value
        self.expiry[name] = seconds
        return True

    def get(self, name):
        return self.data.get(name)

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.expiry.pop(name, None)
        return removed

    def close(self):
        pass


def unreachable_redis():
    client = MagicMock()
    for command in ("ping", "setex", "get", "delete"):
        getattr(client, command).side_effect = redis.exceptions.ConnectionError("Connection refused")
    return client


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def session_cache(fake_redis):
    cache = SessionCache(fake_redis)
    cache.connect()
    return cache


@pytest.fixture
def down_cache():
    cache = SessionCache(unreachable_redis(), retry_interval=3600)
    cache.connect()
    return cache


@pytest.fixture
def token_issuer():
    return TokenIssuer("test-secret")


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api(client, session_cache):
    """Client whose app uses the in-memory session cache."""
    app.state.session_cache = session_cache
    return client


@pytest.fixture
def api_without_cache(client, down_cache):
    app.state.session_cache = down_cache
    return client
