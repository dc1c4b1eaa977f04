import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

from auth_api.config import Settings

logger = logging.getLogger(__name__)


async def connect_db(settings: Settings) -> AsyncIOMotorClient:
    """Connect to MongoDB and verify the server answers"""
    client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
    )
    try:
        await client.admin.command('ping')
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB at {settings.safe_mongodb_uri}: {e}")
        client.close()
        raise
    logger.info(f"Connected to MongoDB: {settings.safe_mongodb_uri}")
    return client


async def close_db(client: Optional[AsyncIOMotorClient]) -> None:
    """Close MongoDB connection"""
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")


def get_database(client: AsyncIOMotorClient, settings: Settings) -> AsyncIOMotorDatabase:
    return client[settings.DATABASE_NAME]


# Collection shortcuts
def users_collection(database: AsyncIOMotorDatabase):
    return database.users


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """Create the unique indexes that guard username and email.

    The registration handler checks for an existing user before inserting, but
    two concurrent registrations can both pass that check; these indexes make
    the store reject the second insert.
    """
    indexes_to_create = [
        ('users', [('username', 1)], {'unique': True, 'name': 'username_unique'}, "users.username"),
        ('users', [('email', 1)], {'unique': True, 'name': 'email_unique'}, "users.email"),
    ]

    for collection_name, keys, options, description in indexes_to_create:
        try:
            await database[collection_name].create_index(keys, **options)
            logger.debug(f"Index ready: {description}")
        except OperationFailure as e:
            # Existing duplicates or a conflicting index definition
            logger.error(f"Could not create index {description}: {e}")
            raise
