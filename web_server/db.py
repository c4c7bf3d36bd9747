import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from config import Settings, get_settings

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient | None = None
db: AsyncIOMotorDatabase | None = None


async def connect_db(settings: Settings | None = None) -> AsyncIOMotorDatabase:
    global client, db
    settings = settings or get_settings()
    client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
    )
    db = client[settings.mongodb_db]

    # Lookups by id, plus "who teaches X" / "who wants X" over the multikey arrays
    await db.profiles.create_index([("id", ASCENDING)], unique=True)
    await db.profiles.create_index([("teach_skills", ASCENDING)])
    await db.profiles.create_index([("learn_skills", ASCENDING)])

    logger.info(f"Connected to MongoDB database '{settings.mongodb_db}'")
    return db


async def close_db() -> None:
    global client
    if client:
        client.close()
        client = None


def get_db() -> AsyncIOMotorDatabase:
    assert db is not None, "Database not connected. Call connect_db() first."
    return db
