"""
Persephone Storage Adapters

Raw string-keyed stores behind a single async contract (StorageAdapter).

Adapters:
- MemoryAdapter: dict, for tests and ephemeral data
- FileSystemAdapter: one JSON file per key (aiofiles)
- SQLiteAdapter: single table in a SQLite file (aiosqlite)
- KeyDBAdapter: any async Redis-protocol client
"""

from .base import StorageAdapter
from .memory import MemoryAdapter
from .file_system import FileSystemAdapter
from .sqlite import SQLiteAdapter
from .keydb import KeyDBAdapter

__all__ = [
    "StorageAdapter",
    "MemoryAdapter",
    "FileSystemAdapter",
    "SQLiteAdapter",
    "KeyDBAdapter",
]
