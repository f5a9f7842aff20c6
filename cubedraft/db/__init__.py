from cubedraft.db.database import async_session_factory, get_session, init_db
from cubedraft.db.store import DatabaseStore, JsonValue, Store

__all__ = [
    "DatabaseStore",
    "JsonValue",
    "Store",
    "async_session_factory",
    "get_session",
    "init_db",
]
