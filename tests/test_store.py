"""Tests for the database-backed key-value store."""

from cubedraft.db.store import DatabaseStore


class TestDatabaseStore:
    async def test_missing_key(self, store: DatabaseStore) -> None:
        assert await store.get("seats") is None

    async def test_set_and_get(self, store: DatabaseStore) -> None:
        value = [{"drafted": ["Shock"], "lastShown": None}]

        await store.set("seats", value)

        assert await store.get("seats") == value

    async def test_overwrite(self, store: DatabaseStore) -> None:
        await store.set("digest", "abc")
        await store.set("digest", "def")

        assert await store.get("digest") == "def"

    async def test_keys_are_independent(self, store: DatabaseStore) -> None:
        await store.set("digest", "abc")
        await store.set("seats", [])

        assert await store.get("digest") == "abc"
        assert await store.get("seats") == []

    async def test_clear(self, store: DatabaseStore) -> None:
        await store.set("digest", "abc")
        await store.set("seats", [1, 2])

        await store.clear()

        assert await store.get("digest") is None
        assert await store.get("seats") is None

    async def test_values_are_copied(self, store: DatabaseStore) -> None:
        """Mutating a value after writing or reading it doesn't touch the stored copy."""
        value = {"packs": [["Shock"]]}
        await store.set("seats", value)
        value["packs"].append(["Counterspell"])

        loaded = await store.get("seats")
        loaded["packs"].clear()

        assert await store.get("seats") == {"packs": [["Shock"]]}

    async def test_shared_between_instances(self, session_factory) -> None:
        await DatabaseStore(session_factory).set("digest", "abc")

        assert await DatabaseStore(session_factory).get("digest") == "abc"
