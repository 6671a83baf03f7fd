"""MongoDB connection for worksheet documents and the question image bucket."""

import logging

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
    AsyncIOMotorGridFSBucket,
)

from worksheet_studio.config import settings

logger = logging.getLogger(__name__)

# Global MongoDB client and database
mongodb_client: AsyncIOMotorClient | None = None
mongodb_database: AsyncIOMotorDatabase | None = None


async def init_mongodb() -> None:
    """Initialize MongoDB connection."""
    global mongodb_client, mongodb_database

    mongodb_client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb_database = mongodb_client[settings.MONGODB_DATABASE]

    # Index creation must not block startup
    try:
        await _create_indexes()
    except Exception as e:
        logger.warning(f"Could not create MongoDB indexes (non-fatal): {e}")


async def _create_indexes() -> None:
    """Create indexes backing the dashboard listing and title search."""
    if mongodb_database is None:
        return

    worksheets = mongodb_database.worksheets
    await worksheets.create_index([("user_id", 1), ("updated_at", -1)])
    await worksheets.create_index([("user_id", 1), ("title", 1)])


async def close_mongodb() -> None:
    """Close MongoDB connection."""
    global mongodb_client

    if mongodb_client:
        mongodb_client.close()


def get_mongodb() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance."""
    if mongodb_database is None:
        raise RuntimeError("MongoDB is not initialized")
    return mongodb_database


def get_worksheets_collection() -> AsyncIOMotorCollection:
    """Get worksheets collection."""
    return get_mongodb().worksheets


def get_image_bucket() -> AsyncIOMotorGridFSBucket:
    """Get the GridFS bucket holding question images."""
    return AsyncIOMotorGridFSBucket(get_mongodb(), bucket_name=settings.IMAGE_BUCKET)
