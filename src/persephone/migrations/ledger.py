"""
Version Ledger for Persephone
Tracks the last committed schema version of every data key.

For a data key K the ledger keeps a companion record under
``VERSION_PREFIX + K`` holding JSON ``{"version": <int>}``. The record lives
in the same raw store as the data and is hidden from user-facing key
listing and counting.

Corrupt or unparseable records are treated exactly like missing ones and
never raise.
"""

import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

VERSION_PREFIX = "__persephone_version__"


def version_key_for(key: str) -> str:
    """Metadata key for a data key."""
    return f"{VERSION_PREFIX}{key}"


def is_version_key(key: str) -> bool:
    """True if ``key`` is a ledger record rather than user data."""
    return key.startswith(VERSION_PREFIX)


def _parse_version(raw: str, key: str) -> Optional[int]:
    try:
        metadata = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unparseable version metadata for key '{key}'")
        return None

    if not isinstance(metadata, dict):
        logger.warning(f"Ignoring malformed version metadata for key '{key}': {raw!r}")
        return None

    version = metadata.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        logger.warning(f"Ignoring non-integer version for key '{key}': {version!r}")
        return None

    return version


async def get_stored_version(store, key: str) -> Optional[int]:
    """
    Read the recorded version of ``key``.

    Args:
        store: Raw store (anything with async get_item)
        key: Data key

    Returns:
        The recorded version, or None if there is no usable record
    """
    raw = await store.get_item(version_key_for(key))
    if raw is None or raw == "":
        return None
    return _parse_version(raw, key)


async def set_stored_version(store, key: str, version: int) -> None:
    """Record ``version`` for ``key``, overwriting any previous record."""
    await store.set_item(version_key_for(key), json.dumps({"version": version}))
    logger.debug(f"Recorded version {version} for key '{key}'")


async def remove_stored_version(store, key: str) -> None:
    """Delete the record for ``key``; only done together with the data key."""
    await store.remove_item(version_key_for(key))


class VersionLedger:
    """
    Version Ledger - per-key version records in a raw store

    Pattern: Companion record per data key, prefixed key namespace
    Lifetime: Persistent, as durable as the store itself
    """

    def __init__(self, store):
        self.store = store

    async def get(self, key: str) -> Optional[int]:
        return await get_stored_version(self.store, key)

    async def set(self, key: str, version: int) -> None:
        if version < 0:
            raise ValueError(f"Version must be >= 0, got {version}")
        await set_stored_version(self.store, key, version)

    async def remove(self, key: str) -> None:
        await remove_stored_version(self.store, key)

    async def versioned_keys(self) -> list:
        """Data keys that currently have a ledger record."""
        return [
            k[len(VERSION_PREFIX):]
            for k in await self.store.keys()
            if is_version_key(k)
        ]
