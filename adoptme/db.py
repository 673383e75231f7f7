from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import get_settings

_settings = get_settings()
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db.users.create_index("email", unique=True)
    await db.users.create_index("user_name", unique=True)
    await db.users.create_index([("role", 1)])
    await db.pets.create_index([("status", 1)])
    await db.pets.create_index([("species", 1)])
    await db.pets.create_index([("liked_by", 1)])
    await db.adoptions.create_index([("user", 1), ("pet", 1), ("status", 1)])
    await db.adoptions.create_index([("status", 1), ("created_at", 1)])
    await db.notifications.create_index([("recipient", 1), ("created_at", -1)])
    await db.notifications.create_index([("recipient", 1), ("is_read", 1)])
    # Mongo drops the document once expires_at has passed
    await db.notifications.create_index("expires_at", expireAfterSeconds=0)


async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(_settings.mongodb_uri)
        _db = _client[_settings.db_name]
        await ensure_indexes(_db)
    return _db


def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None
