import os
import sys
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tasknotes.core.database import build_engine, build_session_factory
from tasknotes.services.schema import schema_manager


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def db_path(tmp_path):
    """Location of a throwaway SQLite file for one test."""
    return tmp_path / "test_tasknotes.db"


@pytest.fixture
async def engine(db_path) -> AsyncEngine:
    """Engine on a fresh, fully migrated database."""
    engine = build_engine(sqlite_url(db_path), echo=False)
    await schema_manager.initialize(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncSession:
    """Create a fresh database session for each test."""
    async_session = build_session_factory(engine)

    async with async_session() as session:
        yield session


@pytest.fixture
def mock_datetime():
    """Mock datetime for consistent testing."""
    return datetime(2024, 1, 15, 10, 30, 0)


# Import all note fixtures to make them available
pytest_plugins = ["tests.fixtures.note_fixtures"]
