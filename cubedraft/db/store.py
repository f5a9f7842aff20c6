"""
Key-value store for draft state.

The draft only ever needs whole-value reads and writes, so the store
exposes get/set/clear over JSON-compatible values.
"""

import copy
from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cubedraft.models.db import KeyValueDB

JsonValue = Any


class Store(Protocol):
    """Interface the draft persists through."""

    async def get(self, key: str) -> JsonValue | None: ...

    async def set(self, key: str, value: JsonValue) -> None: ...

    async def clear(self) -> None: ...


class DatabaseStore:
    """
    Store backed by the key_values table.

    Each call runs in its own committed transaction, so a value is either
    fully written or not at all.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> JsonValue | None:
        """Return a copy of the stored value, or None if the key is unset."""
        async with self._session_factory() as session:
            result = await session.execute(select(KeyValueDB.value).where(KeyValueDB.key == key))
            value = result.scalar_one_or_none()
        return copy.deepcopy(value)

    async def set(self, key: str, value: JsonValue) -> None:
        """Insert or replace the value stored under key."""
        async with self._session_factory() as session:
            row = await session.get(KeyValueDB, key)
            if row is None:
                session.add(KeyValueDB(key=key, value=copy.deepcopy(value)))
            else:
                row.value = copy.deepcopy(value)
            await session.commit()

    async def clear(self) -> None:
        """Delete every stored value."""
        async with self._session_factory() as session:
            await session.execute(delete(KeyValueDB))
            await session.commit()
