# FastAPI dependencies (database, cache) and connection lifecycle
# magicstream/api/deps.py

import logging
from typing import AsyncGenerator, Optional

import redis.asyncio as redis
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError
from redis.exceptions import RedisError

from magicstream.core.config import settings
from magicstream.data_access.mongo_client import MovieRepository, UserRepository
from magicstream.data_access.redis_client import CacheRepository

logger = logging.getLogger(__name__)

# --- Global Clients (managed by the application lifespan) ---
mongo_client: Optional[AsyncIOMotorClient] = None
db_instance: Optional[AsyncIOMotorDatabase] = None
redis_client: Optional[redis.Redis] = None

async def initialize_connections():
    """
    Initializes MongoDB and (when configured) Redis connections.
    Called during FastAPI startup from the lifespan handler.
    """
    global mongo_client, db_instance, redis_client
    logger.info("Initializing external connections...")

    # --- MongoDB Initialization ---
    try:
        logger.info(f"Attempting to connect to MongoDB: {settings.MONGODB_URI.get_secret_value()[:15]}...") # Log partial URI safely
        mongo_client = AsyncIOMotorClient(
            settings.MONGODB_URI.get_secret_value(),
            serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        )
        # Ping the server to verify connection early
        await mongo_client.admin.command('ping')

        # Database named in the URI wins over DATABASE_NAME
        db_instance = mongo_client.get_default_database(default=settings.DATABASE_NAME)
        await MovieRepository(db_instance).ensure_indexes()
        await UserRepository(db_instance).ensure_indexes()
        logger.info(f"MongoDB client initialized successfully. Using database: '{db_instance.name}'")

    except ConnectionFailure as e:
        logger.error(f"MongoDB connection failed during initialization: {e}", exc_info=True)
        mongo_client = None
        db_instance = None
    except PyMongoError as e:
        logger.error(f"Unexpected error initializing MongoDB client: {e}", exc_info=True)
        mongo_client = None
        db_instance = None

    # --- Redis Initialization ---
    if settings.REDIS_URL is None:
        logger.info("REDIS_URL not set; movie cache disabled.")
        return
    try:
        logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL.get_secret_value()[:15]}...") # Log partial URL safely
        redis_client = redis.from_url(
            settings.REDIS_URL.get_secret_value(),
            encoding="utf-8",
            decode_responses=True,
        )
        await redis_client.ping()
        logger.info("Redis client initialized successfully.")

    except RedisError as e:
        logger.error(f"Redis connection failed during initialization: {e}", exc_info=True)
        redis_client = None

async def close_connections():
    """
    Closes MongoDB and Redis connections.
    Called during FastAPI shutdown from the lifespan handler.
    """
    global mongo_client, db_instance, redis_client
    logger.info("Closing external connections...")
    if mongo_client:
        mongo_client.close()
        logger.info("MongoDB client closed.")
    if redis_client:
        await redis_client.aclose()
        logger.info("Redis client closed.")
    mongo_client = None
    db_instance = None
    redis_client = None


# --- Database Dependency ---

async def get_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    FastAPI dependency that yields the application's MongoDB database instance.

    Raises:
        HTTPException 503: If the database instance is not available.
    """
    if db_instance is None:
        logger.critical("MongoDB database instance is not available. Check initialization.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available.",
        )
    yield db_instance


# --- Cache Dependency ---

async def get_cache() -> Optional[CacheRepository]:
    """
    FastAPI dependency returning the cache, or None when Redis is not configured
    or failed to connect. Callers fall back to the database.
    """
    if redis_client is None:
        return None
    return CacheRepository(redis_client)
