import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from .config import settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None


async def connect_to_mongo() -> bool:
    """Initialise the MongoDB client and verify the connection."""

    global _client, _database

    if _client is not None:
        return True
    if settings.use_memory_store:
        logger.info("In-memory store requested; skipping MongoDB")
        return False

    try:
        _client = AsyncIOMotorClient(
            settings.mongodb_uri,
            uuidRepresentation="standard",
            serverSelectionTimeoutMS=5000,
        )
        _database = _client[settings.mongodb_db_name]
        await _database.command("ping")
        logger.info("Connected to MongoDB database '%s'", settings.mongodb_db_name)
        return True
    except (ServerSelectionTimeoutError, PyMongoError) as exc:
        logger.warning("MongoDB connection failed: %s", exc)
        if _client is not None:
            _client.close()
        _client = None
        _database = None
        return False


async def close_mongo_connection() -> None:
    """Dispose of the MongoDB client if it exists."""

    global _client, _database

    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def get_database() -> AsyncIOMotorDatabase:
    """Return the active MongoDB database."""

    if _database is None:
        raise RuntimeError("Database connection has not been initialised")
    return _database


def is_database_ready() -> bool:
    return _database is not None
