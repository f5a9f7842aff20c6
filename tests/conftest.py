import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cubedraft.db.store import DatabaseStore
from cubedraft.models import failure as failure_module
from cubedraft.models.card import CardRecord
from cubedraft.models.db import Base
from cubedraft.services.cube import Cube


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    This prevents test isolation issues where Python reuses memory
    addresses for new objects, causing id() collisions with previously
    finalized responses.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


def make_records(count: int) -> list[CardRecord]:
    """Synthetic cube rows named "Card 000", "Card 001", ..."""
    return [
        CardRecord(
            name=f"Card {i:03d}",
            set_code="tst",
            collector_number=str(i + 1),
            mana_value=i % 9,
        )
        for i in range(count)
    ]


@pytest.fixture
def records() -> list[CardRecord]:
    return make_records(400)


@pytest.fixture
def cube(records: list[CardRecord]) -> Cube:
    """A cube large enough for an 8-seat, 3x15 draft."""
    return Cube(records)


@pytest.fixture
def bolt_cube() -> Cube:
    """A small cube of real card names."""
    return Cube(
        [
            CardRecord("Shock", "m19", "156", 1),
            CardRecord("Lightning Strike", "m19", "152", 2),
            CardRecord("Lightning Bolt", "lea", "161", 1),
            CardRecord("Counterspell", "lea", "54", 2),
            CardRecord("Emrakul, the Aeons Torn", "roe", "4", 15),
        ]
    )


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> DatabaseStore:
    """A key-value store on the in-memory database."""
    return DatabaseStore(session_factory)
