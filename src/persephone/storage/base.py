"""
Storage Adapters - Abstract interface for raw key-value stores

Provides plugin architecture for different storage media (memory, filesystem,
SQLite, KeyDB/Redis). Each adapter implements string-keyed get/set/remove,
clear, key listing and counting. All operations are asynchronous.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import StorageError


class StorageAdapter(ABC):
    """
    Abstract base class for raw stores

    All adapters must implement these methods. Values are opaque strings;
    encoding and versioning happen above this layer. Adapters wrap backend
    failures in StorageError and never retry.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Get the value stored under a key

        Args:
            key: Storage key

        Returns:
            Stored string, or None if the key doesn't exist

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any existing value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """
        Remove a key; removing a missing key is not an error

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """
        Remove every key in the store

        Raises:
            StorageError: If clearing fails
        """
        pass

    @abstractmethod
    async def keys(self) -> List[str]:
        """
        List all keys, including ledger records

        Raises:
            StorageError: If listing fails
        """
        pass

    @abstractmethod
    async def length(self) -> int:
        """
        Count all keys, including ledger records

        Raises:
            StorageError: If counting fails
        """
        pass

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


__all__ = ["StorageAdapter", "StorageError"]
