"""
Shared fixtures for the test suite.

Tests run against a throwaway SQLite database (through aiosqlite). The
environment is configured here, before any ``app`` module is imported,
because settings and the database engine are created at import time.
"""

import asyncio
import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="taskflow_tests_"))
os.environ["TASKFLOW_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "10"
os.environ["BROADCAST_SCOPE"] = "owner"
os.environ["LOG_DIR"] = str(_TEST_DIR / "logs")

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db import reset_db  # noqa: E402

from .helpers import register  # noqa: E402


@pytest.fixture(autouse=True)
def clean_database():
    """Drop and recreate every table so each test starts empty."""
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(reset_db())
    finally:
        loop.close()
    yield


@pytest.fixture
def app() -> FastAPI:
    """A fresh application instance with owner-scoped broadcasting."""
    from main import create_app

    return create_app()


@pytest.fixture
def client(app: FastAPI):
    """
    Test client for API requests. Entering the context runs the lifespan
    (schema init and connectivity check).
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture
def broadcast_all_client():
    """Test client whose app fans every event out to every session."""
    from main import create_app

    with TestClient(create_app(broadcast_scope="all")) as c:
        yield c


@pytest.fixture
def alice_token(client: TestClient) -> str:
    return register(client, "Alice", "alice@x.com")


@pytest.fixture
def bob_token(client: TestClient) -> str:
    return register(client, "Bob", "bob@x.com")
