"""
Persephone Migration System

Upgrades stored values to the schema version the application expects.

Key Features:
- Per-key version tracking in a companion ledger record
- Ordered, sequential migration steps (sync or async)
- Reconciliation when stored data is newer than the schema
- Rollback-based downgrades
- No write-back when a step fails
"""

from .migration_base import Migration
from .registry import MigrationRegistry
from .ledger import (
    VERSION_PREFIX,
    VersionLedger,
    get_stored_version,
    is_version_key,
    remove_stored_version,
    set_stored_version,
    version_key_for,
)

__all__ = [
    "Migration",
    "MigrationRegistry",
    "VERSION_PREFIX",
    "VersionLedger",
    "get_stored_version",
    "is_version_key",
    "remove_stored_version",
    "set_stored_version",
    "version_key_for",
]
