"""
Shared pytest fixtures and configuration for all tests.
"""

import os
import sys
import uuid
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

# Settings are read at import time, so the test environment is fixed first
os.environ.setdefault("CHATTER_ENVIRONMENT", "test")
os.environ.setdefault("CHATTER_AUTH_PROVIDER", "none")
os.environ.setdefault("CHATTER_PUSH_ENABLED", "true")

# Add src directory to path so imports work without an installed package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
import strawberry  # noqa: E402
from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from psycopg import Connection  # noqa: E402

from chatter.auth.context import AuthContext  # noqa: E402
from chatter.auth.factory import get_auth_adapter_cached  # noqa: E402
from chatter.database.connection import dispose_database, init_database  # noqa: E402
from chatter.pubsub import InMemoryPubSub  # noqa: E402


@pytest.fixture(autouse=True)
def clear_auth_adapter_cache():
    """Each test builds its auth adapter from the current settings."""
    get_auth_adapter_cached.cache_clear()
    yield
    get_auth_adapter_cached.cache_clear()


@pytest.fixture
def pubsub():
    """A fresh, isolated in-memory broker per test."""
    return InMemoryPubSub()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_context(user_id):
    """Create an authenticated context."""
    return AuthContext(
        user_id=user_id,
        principal={"provider": "none", "subject": "test-user"},
        token="test-token",
    )


@pytest.fixture
def mock_info(pubsub):
    """Create a mock GraphQL info object with request context."""
    headers = {"authorization": "Bearer test-token", "accept-language": "en-US,en;q=0.9"}
    info = MagicMock(spec=strawberry.Info)
    info.context = {
        "request": MagicMock(headers=MagicMock(get=MagicMock(side_effect=headers.get))),
        "pubsub": pubsub,
        "push_dispatcher": MagicMock(),
    }
    return info


@pytest.fixture
def test_database(postgresql: Connection[Any]) -> str:
    """Return the DSN for the running pytest-postgresql database."""
    info = postgresql.info
    return (
        f"postgresql://{info.user}:{getattr(info, 'password', None) or ''}"
        f"@{info.host}:{info.port}/{info.dbname}"
    )


@pytest.fixture
def alembic_migrate(test_database: str, monkeypatch) -> Generator[None, None, None]:
    """Run Alembic upgrade to head against the pytest-postgresql instance."""
    monkeypatch.setenv("CHATTER_DATABASE_URL", test_database)
    cfg = Config(str(Path(__file__).parent.parent / "alembic.ini"))
    command.upgrade(cfg, "head")
    yield
    command.downgrade(cfg, "base")


@pytest_asyncio.fixture
async def db(alembic_migrate: None, test_database: str) -> AsyncGenerator[None, None]:
    """Point the shared connection pool at the migrated test database."""
    init_database(test_database, force_reinit=True)
    yield
    await dispose_database()


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: test against a real PostgreSQL server")
