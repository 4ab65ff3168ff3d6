"""Drop and recreate all storefront tables, optionally reseeding sample data."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.config import Settings
from storefront.database import build_engine, build_session_factory, drop_db, init_db
from storefront.models import Craftsman, Product

SAMPLE_PRODUCTS = [
    {"name": "Portlandsement M400", "category": "sement", "price": 65000, "unit": "qop", "stock": 120},
    {"name": "Gazoblok 600x300x200", "category": "blok", "price": 11500, "unit": "dona", "stock": 4000},
    {"name": "Armatura 12 mm", "category": "metall", "price": 9800, "unit": "metr", "stock": 2500},
    {"name": "Suvoq gips Knauf Rotband", "category": "gips", "price": 78000, "unit": "qop", "stock": 60},
]

SAMPLE_CRAFTSMEN = [
    {"name": "Akmal Karimov", "specialty": "Elektrik", "phone": "+998901112233"},
    {"name": "Jasur Toshmatov", "specialty": "Santexnik", "phone": "+998935556677"},
]


async def _reset_db(database_url: str, seed: bool) -> None:
    engine = build_engine(database_url)
    try:
        print("Dropping all tables...")
        await drop_db(engine)
        print("Creating all tables...")
        await init_db(engine)
        if seed:
            async with build_session_factory(engine)() as db:
                db.add_all(Product(**p) for p in SAMPLE_PRODUCTS)
                db.add_all(Craftsman(**c) for c in SAMPLE_CRAFTSMEN)
                await db.commit()
            print(f"Seeded {len(SAMPLE_PRODUCTS)} products and {len(SAMPLE_CRAFTSMEN)} craftsmen.")
        print("Database reset complete.")
    finally:
        await engine.dispose()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reset the storefront database.")
    parser.add_argument("--seed", action="store_true", help="Insert a few sample products and craftsmen.")
    parser.add_argument("--yes", action="store_true", help="Required when ENVIRONMENT=production.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    settings = Settings()
    if settings.is_production and not args.yes:
        print("Refusing to reset a production database without --yes.")
        return 1
    asyncio.run(_reset_db(settings.database_url, args.seed))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
