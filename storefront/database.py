from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import Request
from sqlalchemy import event, inspect, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_conn) -> None:
    """Replace SQLite's ASCII-only ``lower`` (used by ILIKE) with str.lower."""
    dbapi_conn.create_function("lower", 1, _unicode_lower)


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()
    register_sqlite_functions(dbapi_conn)


def _ensure_sqlite_dir(database_url: str) -> None:
    database = make_url(database_url).database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for *database_url*.

    PostgreSQL gets connection pool settings; SQLite gets WAL mode and a
    busy timeout for concurrent access.
    """
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        _ensure_sqlite_dir(database_url)

    engine_kwargs: dict = {"echo": False}
    if not is_sqlite:
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,  # Recycle connections every 30 min (prevent stale connections)
        })

    engine = create_async_engine(database_url, **engine_kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""
    async with request.app.state.session_factory() as session:
        yield session


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (and their declared indexes)."""
    import storefront.models  # noqa: F401  ensure all models are registered

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    """Drop all tables."""
    import storefront.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def create_indexes(engine: AsyncEngine) -> list[str]:
    """Create any declared table or index missing from an existing database.

    Returns the sorted names of the indexes that did not exist before.
    """
    import storefront.models  # noqa: F401

    def _existing(sync_conn) -> set[str]:
        inspector = inspect(sync_conn)
        names: set[str] = set()
        for table in Base.metadata.sorted_tables:
            if inspector.has_table(table.name):
                names.update(ix["name"] for ix in inspector.get_indexes(table.name))
        return names

    def _ensure(sync_conn) -> None:
        for table in Base.metadata.sorted_tables:
            for index in table.indexes:
                index.create(sync_conn, checkfirst=True)

    async with engine.begin() as conn:
        before = await conn.run_sync(_existing)
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(_ensure)
        after = await conn.run_sync(_existing)
    return sorted(after - before)
