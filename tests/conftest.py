"""Shared test fixtures."""

import pytest
import pytest_asyncio

from azanbot.db.migrations import run_migrations
from azanbot.db.repository import Repository
from azanbot.engine.conversation import ChatIdentity, Conversation
from tests.helpers import DEFAULT_TIMES, FakeCalculator, FakeResolver


@pytest_asyncio.fixture
async def repo(tmp_path):
    """Repository on a fresh SQLite file."""
    db_path = tmp_path / "test.db"
    await run_migrations(db_path)
    repository = Repository(db_path)
    await repository.connect()
    yield repository
    await repository.close()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def calculator():
    return FakeCalculator(DEFAULT_TIMES)


@pytest.fixture
def conversation(repo, resolver, calculator):
    return Conversation(repo, resolver, calculator)  # type: ignore[arg-type]


@pytest.fixture
def identity():
    return ChatIdentity(telegram_id=1001, first_name="Amina", last_name="Khan", username="amina")
