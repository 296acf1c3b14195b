"""In-process key-value storage."""

from typing import Dict, Optional

from lunchbox.storage.base import KeyValueStore

class MemoryKeyValueStore(KeyValueStore):
    """Dictionary backed store. Contents are lost on restart."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
