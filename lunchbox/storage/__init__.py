"""Per-client key-value storage."""
from lunchbox.core.config import Settings
from lunchbox.storage.base import KeyValueStore, ClientStorage, StorageError
from lunchbox.storage.memory import MemoryKeyValueStore
from lunchbox.storage.redis_store import RedisKeyValueStore

def create_store(settings: Settings) -> KeyValueStore:
    """Build the storage backend selected by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "redis":
        return RedisKeyValueStore.from_url(settings.REDIS_URL)
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")

__all__ = [
    "KeyValueStore",
    "ClientStorage",
    "StorageError",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
]
