"""Storage adapters - keyed persistence of whole collections."""
import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from pymongo.errors import PyMongoError

from goal_tracker.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

# Collection keys
GOALS_KEY = "goals"
DAILY_TASKS_KEY = "dailyTasks"
WEEKLY_TASKS_KEY = "weeklyTasks"
TASK_CONFIGURATIONS_KEY = "taskConfigurations"


class StorageAdapter(ABC):
    """
    Get/set of JSON-serializable lists by key.

    Callers always read the full collection, modify it and write it back.
    ``lock(key)`` serializes those read-modify-write cycles per key.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, key: str) -> asyncio.Lock:
        """Return the exclusive lock guarding a collection key."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @abstractmethod
    async def get(self, key: str) -> list[dict]:
        """Read the collection stored under key ([] when absent)."""

    @abstractmethod
    async def set(self, key: str, items: list[dict]) -> None:
        """Replace the collection stored under key."""


class InMemoryStorage(StorageAdapter):
    """Process-local storage, used for tests and the ``memory`` backend."""

    def __init__(self, initial: dict[str, list[dict]] | None = None):
        super().__init__()
        self._data: dict[str, list[dict]] = copy.deepcopy(initial or {})

    async def get(self, key: str) -> list[dict]:
        return copy.deepcopy(self._data.get(key, []))

    async def set(self, key: str, items: list[dict]) -> None:
        self._data[key] = copy.deepcopy(items)


class MongoStorage(StorageAdapter):
    """
    MongoDB-backed storage.

    Each key is one document: ``{"_id": key, "items": [...], "updated_at": ...}``.
    Storage failures are logged and degrade to an empty read or a skipped write.
    """

    def __init__(self, collection):
        """Initialize adapter with a Motor collection (None when unavailable)."""
        super().__init__()
        self.collection = collection

    def _get_collection(self):
        if self.collection is None:
            raise StorageUnavailableError("Storage collection not available")
        return self.collection

    async def get(self, key: str) -> list[dict]:
        try:
            doc = await self._get_collection().find_one({"_id": key})
        except (StorageUnavailableError, PyMongoError) as e:
            logger.warning("Error reading %s from storage: %s", key, e)
            return []

        if not doc:
            return []

        items = doc.get("items")
        if not isinstance(items, list):
            logger.warning("Ignoring malformed payload stored under %s", key)
            return []
        return items

    async def set(self, key: str, items: list[dict]) -> None:
        try:
            await self._get_collection().update_one(
                {"_id": key},
                {"$set": {"items": items, "updated_at": datetime.utcnow()}},
                upsert=True,
            )
        except (StorageUnavailableError, PyMongoError) as e:
            logger.warning("Error saving %s to storage: %s", key, e)
