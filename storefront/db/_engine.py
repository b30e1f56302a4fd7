"""
Database setup.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.db._tables import Base

log = logging.getLogger("storefront.db")


def _in_memory(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _sqlite_pragmas(dbapi_connection: Any, _record: Any) -> None:
    # WAL: readers see the last commit and never block the writer
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
    *,
    echo: bool = False,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """
    Create schema and return (session_factory, engine).

    Every session gets its own connection, so an open transaction is
    invisible to other sessions until it commits. An in-memory SQLite URL
    would force one connection shared by every session; it is backed by a
    private temporary file instead, removed when the engine is disposed.
    """
    target = make_url(url)
    scratch: tempfile.TemporaryDirectory[str] | None = None
    if _in_memory(target):
        scratch = tempfile.TemporaryDirectory(prefix="storefront-")
        target = target.set(database=str(Path(scratch.name) / "storefront.db"))

    engine = create_async_engine(target, echo=echo)
    if target.get_backend_name() == "sqlite":
        event.listen(engine.sync_engine, "connect", _sqlite_pragmas)
    if scratch is not None:
        event.listen(engine.sync_engine, "engine_disposed", lambda _engine: scratch.cleanup())

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    log.info("schema ready on %s", engine.url.render_as_string(hide_password=True))
    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("create_database",)
