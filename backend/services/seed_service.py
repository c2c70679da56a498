"""
Seed Service — loads the restaurants collection once, at first boot.

If the restaurants table already has rows the seed is skipped, so restarts
never duplicate data.
"""
import json
import logging
import os

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings

logger = logging.getLogger(__name__)


def _seed_path(path: str) -> str:
    if not os.path.isabs(path):
        path = os.path.join(os.path.dirname(os.path.dirname(__file__)), path)
    return path


def load_seed_file(path: str | None = None) -> list[dict]:
    """Read the restaurant seed JSON (a list of restaurant objects)."""
    path = _seed_path(path or settings.restaurants_seed_file)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Seed file {path} must contain a JSON list")
    return data


async def seed_restaurants(db: AsyncSession, path: str | None = None) -> int:
    """
    Insert the seed restaurants if the table is empty.

    Returns:
        Number of restaurants inserted (0 when already initialized).
    """
    from db_models import Restaurant

    existing = (await db.execute(select(func.count(Restaurant.id)))).scalar()
    if existing:
        logger.info("Restaurants already exist. Skipping initialization.")
        return 0

    rows = [
        Restaurant(
            name=item["name"],
            cuisine=item.get("cuisine"),
            address=item.get("address"),
            menu=item.get("menu", []),
        )
        for item in load_seed_file(path)
    ]
    db.add_all(rows)
    await db.commit()

    logger.info(f"Initialized {len(rows)} restaurants")
    for row in rows:
        logger.info(f"  Inserted restaurant {row.name} with id {row.id}")
    return len(rows)
