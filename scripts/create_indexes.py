"""Create any missing table indexes on an existing storefront database."""

from __future__ import annotations

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.config import Settings
from storefront.database import build_engine, create_indexes


async def _create_indexes(database_url: str) -> None:
    engine = build_engine(database_url)
    try:
        created = await create_indexes(engine)
    finally:
        await engine.dispose()

    if created:
        for name in created:
            print(f"Created index: {name}")
    else:
        print("All indexes already exist.")


def main() -> int:
    asyncio.run(_create_indexes(Settings().database_url))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
