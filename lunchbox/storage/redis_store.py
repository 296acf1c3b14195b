"""Redis backed key-value storage."""

from typing import Optional
from redis import Redis
from redis.exceptions import RedisError

from lunchbox.storage.base import KeyValueStore, StorageError
from lunchbox.utils.logging import setup_logger

logger = setup_logger(__name__)

class RedisKeyValueStore(KeyValueStore):
    """Store values in Redis as plain strings."""

    def __init__(self, client: Redis):
        self.redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        return cls(Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5,
            retry_on_timeout=True
        ))

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis.get(key)
        except RedisError as e:
            logger.error(f"Redis get error for {key}: {str(e)}")
            raise StorageError(f"Failed to read {key}") from e

    def set(self, key: str, value: str) -> None:
        try:
            self.redis.set(key, value)
        except RedisError as e:
            logger.error(f"Redis set error for {key}: {str(e)}")
            raise StorageError(f"Failed to write {key}") from e

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except RedisError as e:
            logger.error(f"Redis delete error for {key}: {str(e)}")
            raise StorageError(f"Failed to delete {key}") from e

    def close(self) -> None:
        self.redis.close()
