import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tasknotes.core import database
from tasknotes.core.database import build_session_factory, get_db
from tasknotes.models.category import Category


@pytest.fixture
def session_factory(engine: AsyncEngine, monkeypatch):
    """Point get_db at the test database."""
    factory = build_session_factory(engine)
    monkeypatch.setattr(database, "AsyncSessionLocal", factory)
    return factory


async def count_categories(factory) -> int:
    async with factory() as session:
        return (await session.execute(select(func.count(Category.id)))).scalar_one()


class TestGetDb:
    """Test the default session dependency."""

    async def test_yields_working_session(self, session_factory):
        sessions = get_db()
        session = await sessions.__anext__()

        assert isinstance(session, AsyncSession)
        session.add(Category(name="Work", color="#FF5733"))
        await session.commit()

        await sessions.aclose()
        assert await count_categories(session_factory) == 1

    async def test_error_rolls_back_and_reraises(self, session_factory):
        """Test an error inside the caller discards uncommitted work."""
        sessions = get_db()
        session = await sessions.__anext__()
        session.add(Category(name="Scratch"))
        await session.flush()

        with pytest.raises(RuntimeError, match="boom"):
            await sessions.athrow(RuntimeError("boom"))

        assert await count_categories(session_factory) == 0
