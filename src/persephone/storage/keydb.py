"""
KeyDB / Redis adapter

Wraps any async client speaking the Redis command set, such as
``redis.asyncio.Redis``. The client is supplied by the caller, which owns
its connection settings; this adapter only maps the raw store contract onto
GET / SET / DEL / KEYS / FLUSHDB / DBSIZE.
"""

import logging
from typing import Any, List, Optional

from .base import StorageAdapter, StorageError

logger = logging.getLogger(__name__)


def _decode(value: Any, encoding: str) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return value.decode(encoding)
    return value


class KeyDBAdapter(StorageAdapter):
    """
    Raw store on a KeyDB/Redis database.

    Note: clear() issues FLUSHDB, which wipes the whole logical database,
    not only keys written through this adapter.

    Example:
        import redis.asyncio as redis
        adapter = KeyDBAdapter(redis.Redis(host="localhost", port=6379))
    """

    def __init__(self, client: Any, encoding: str = "utf-8", close_client: bool = False):
        self.client = client
        self.encoding = encoding
        self._close_client = close_client

    async def get_item(self, key: str) -> Optional[str]:
        try:
            value = await self.client.get(key)
        except Exception as e:
            raise StorageError(str(e), key, "get_item", e) from e
        return _decode(value, self.encoding)

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self.client.set(key, value)
        except Exception as e:
            raise StorageError(str(e), key, "set_item", e) from e

    async def remove_item(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except Exception as e:
            raise StorageError(str(e), key, "remove_item", e) from e

    async def clear(self) -> None:
        try:
            await self.client.flushdb()
        except Exception as e:
            raise StorageError(str(e), None, "clear", e) from e

    async def keys(self) -> List[str]:
        try:
            keys = await self.client.keys("*")
        except Exception as e:
            raise StorageError(str(e), None, "keys", e) from e
        return [_decode(k, self.encoding) for k in keys]

    async def length(self) -> int:
        try:
            return int(await self.client.dbsize())
        except Exception as e:
            raise StorageError(str(e), None, "length", e) from e

    async def close(self) -> None:
        """Close the client only if this adapter was told it owns it."""
        if self._close_client:
            await self.client.aclose()
