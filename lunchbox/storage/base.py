"""Key-value storage interface for per-client data."""

from abc import ABC, abstractmethod
from typing import Optional

class StorageError(Exception):
    """The storage backend could not be reached or refused the operation."""

class KeyValueStore(ABC):
    """Base storage interface that all storage implementations must follow."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get a stored value.

        Args:
            key: Fully qualified key

        Returns:
            Stored string or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under a key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass

class ClientStorage:
    """View of a key-value store scoped to one browser client.

    Each client gets its own namespace, so the fixed keys used by the
    profile and auth layers never collide between clients.
    """

    def __init__(self, store: KeyValueStore, client_id: str):
        self.store = store
        self.client_id = client_id

    def _key(self, key: str) -> str:
        return f"client:{self.client_id}:{key}"

    def get(self, key: str) -> Optional[str]:
        return self.store.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.store.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.store.delete(self._key(key))
