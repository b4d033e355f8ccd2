"""
database.py – the process-wide Motor pool plus the indexes the
services depend on
"""

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from ..core.config import get_settings

settings = get_settings()


@lru_cache
def get_client() -> AsyncIOMotorClient:
    # tz_aware: due dates and timestamps come back as UTC-aware datetimes
    return AsyncIOMotorClient(
        str(settings.mongo_uri), uuidRepresentation="standard", tz_aware=True,
    )


def get_db() -> AsyncIOMotorDatabase:
    """Database named in MONGO_URI; overridden with a fake in tests."""
    return get_client().get_default_database()


async def ensure_indexes(db) -> None:
    """
    • users.email unique – the store-level guarantee behind 409 on register
    • tasks (user_id, created_at) – every task read is owner-scoped
    """
    await db.users.create_index("email", unique=True)
    await db.tasks.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
