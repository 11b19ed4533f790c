"""
Filesystem adapter

One ``<key>.json`` file per key under a base directory. Keys are sanitized
to ``[A-Za-z0-9_-]`` so they are safe file names; keys differing only in
other characters therefore share a file.

Writes go to a temporary file first and are moved into place, so a crash
mid-write never leaves a truncated value behind.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from .base import StorageAdapter, StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_SUFFIX = ".json"
_TMP_SUFFIX = ".tmp"


def sanitize_key(key: str) -> str:
    """Map a key to its file stem."""
    return _UNSAFE_CHARS.sub("_", key)


class FileSystemAdapter(StorageAdapter):
    """
    Directory-backed raw store using aiofiles for non-blocking I/O.

    Example:
        adapter = FileSystemAdapter(Path.home() / ".myapp" / "store")
        await adapter.set_item("settings", '{"theme": "dark"}')
    """

    def __init__(self, base_path: Union[str, Path], encoding: str = "utf-8"):
        self.base_path = Path(base_path)
        self.encoding = encoding

    def _file_path(self, key: str) -> Path:
        return self.base_path / f"{sanitize_key(key)}{_SUFFIX}"

    async def _ensure_directory(self) -> None:
        await aiofiles.os.makedirs(self.base_path, exist_ok=True)

    async def _data_files(self) -> List[str]:
        try:
            names = await aiofiles.os.listdir(self.base_path)
        except FileNotFoundError:
            return []
        return sorted(name for name in names if name.endswith(_SUFFIX))

    async def get_item(self, key: str) -> Optional[str]:
        path = self._file_path(key)
        try:
            async with aiofiles.open(path, "r", encoding=self.encoding) as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(str(e), key, "get_item", e) from e

    async def set_item(self, key: str, value: str) -> None:
        path = self._file_path(key)
        tmp_path = path.with_name(path.name + _TMP_SUFFIX)
        try:
            await self._ensure_directory()
            async with aiofiles.open(tmp_path, "w", encoding=self.encoding) as f:
                await f.write(value)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(str(e), key, "set_item", e) from e
        logger.debug(f"Wrote {path}")

    async def remove_item(self, key: str) -> None:
        try:
            await aiofiles.os.remove(self._file_path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(str(e), key, "remove_item", e) from e

    async def clear(self) -> None:
        try:
            for name in await self._data_files():
                await aiofiles.os.remove(self.base_path / name)
        except OSError as e:
            raise StorageError(str(e), None, "clear", e) from e

    async def keys(self) -> List[str]:
        try:
            return [name[:-len(_SUFFIX)] for name in await self._data_files()]
        except OSError as e:
            raise StorageError(str(e), None, "keys", e) from e

    async def length(self) -> int:
        try:
            return len(await self._data_files())
        except OSError as e:
            raise StorageError(str(e), None, "length", e) from e

    def __repr__(self) -> str:
        return f"<FileSystemAdapter {self.base_path}>"
