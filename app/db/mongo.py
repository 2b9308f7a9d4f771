import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""
    
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]
    
    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    await db["users"].create_index("email", unique=True)
    await db["users"].create_index("verification_token", sparse=True)
    await db["users"].create_index("reset_password_token", sparse=True)
    
    await db["rooms"].create_index("name", unique=True)
    
    await db["entries"].create_index([("room", 1), ("date", -1)])
    await db["entries"].create_index([("room", 1), ("paid_by", 1), ("date", -1)])
    
    # One pair record per unordered pair of users in a room
    await db["ledgers"].create_index(
        [("room", 1), ("user_a", 1), ("user_b", 1)],
        unique=True
    )
    await db["ledgers"].create_index([("room", 1), ("user_b", 1)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db

@asynccontextmanager
async def transaction(
    db: AsyncIOMotorDatabase,
    enabled: bool = True
) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """
    Yield a session with an open transaction, or None when disabled.

    The transaction commits when the block exits normally and aborts when
    it raises.
    """
    if not enabled:
        yield None
        return
    
    async with await db.client.start_session() as session:
        async with session.start_transaction():
            yield session
