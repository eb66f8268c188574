"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from goal_tracker.config import settings
from goal_tracker.storage import InMemoryStorage, MongoStorage, StorageAdapter

logger = logging.getLogger(__name__)


class Database:
    """Connection manager owning the storage adapter shared by all requests."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None
    storage: StorageAdapter | None = None

    async def connect(self) -> None:
        """Connect to MongoDB, or set up in-memory storage."""
        if settings.storage_backend == "memory":
            self.storage = InMemoryStorage()
            logger.info("Using in-memory storage")
            return

        self.client = AsyncIOMotorClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
        self.db = self.client[settings.mongodb_db_name]
        self.storage = MongoStorage(self.db[settings.storage_collection])
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")
        self.storage = None


# Global database instance
database = Database()


async def get_storage() -> StorageAdapter:
    """Dependency to get the storage adapter."""
    if database.storage is None:
        raise RuntimeError("Storage not initialized")
    return database.storage
