"""Engine construction, schema creation and index maintenance."""

from sqlalchemy import inspect

from storefront.database import build_engine, create_indexes, drop_db, init_db

ALL_INDEXES = [
    "idx_craftsmen_specialty",
    "idx_craftsmen_status_join",
    "idx_orders_order_date",
    "idx_orders_status_date",
    "idx_products_category",
    "idx_products_listing",
    "idx_products_slug",
]


def _url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'data' / 'shop.db'}"


async def test_sqlite_directory_created(tmp_path):
    engine = build_engine(_url(tmp_path))
    try:
        assert (tmp_path / "data").is_dir()
    finally:
        await engine.dispose()


async def test_init_and_drop(tmp_path):
    engine = build_engine(_url(tmp_path))
    try:
        await init_db(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda c: set(inspect(c).get_table_names()))
        assert {"products", "orders", "craftsmen"} <= tables

        await drop_db(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda c: set(inspect(c).get_table_names()))
        assert tables == set()
    finally:
        await engine.dispose()


async def test_create_indexes_is_idempotent(tmp_path):
    engine = build_engine(_url(tmp_path))
    try:
        assert await create_indexes(engine) == ALL_INDEXES
        assert await create_indexes(engine) == []
    finally:
        await engine.dispose()


async def test_create_indexes_after_init_reports_nothing_new(tmp_path):
    engine = build_engine(_url(tmp_path))
    try:
        await init_db(engine)
        assert await create_indexes(engine) == []
    finally:
        await engine.dispose()
