"""
Database manager for the scoring engine.

Single-writer admin workloads are light, so sqlite (WAL) is the default; any
SQLAlchemy async URL can be configured instead.
"""
from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from scoreline.config import Settings


# Enable WAL mode for aiosqlite connections
# This is a per-connection pragma, so we need to set it on each connect.
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any):
    # Covers both sqlite3.Connection and SQLAlchemy's aiosqlite adapter
    if not isinstance(dbapi_connection, sqlite3.Connection) and "sqlite" not in type(dbapi_connection).__module__:
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class DBM:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.url = settings.database_url()

        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=settings.database.echo,
            future=True,
        )

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
