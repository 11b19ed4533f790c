"""In-memory adapter, for tests and ephemeral databases."""

from typing import Dict, List, Optional

from .base import StorageAdapter


class MemoryAdapter(StorageAdapter):
    """Dict-backed raw store. Contents vanish with the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._storage: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._storage.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._storage[key] = value

    async def remove_item(self, key: str) -> None:
        self._storage.pop(key, None)

    async def clear(self) -> None:
        self._storage.clear()

    async def keys(self) -> List[str]:
        return list(self._storage.keys())

    async def length(self) -> int:
        return len(self._storage)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the raw contents."""
        return dict(self._storage)
