"""
Migration Registry for Persephone

Holds the migration steps declared for one schema.

Features:
- Duplicate version rejection at registration time
- Ordered migration sequencing regardless of declaration order
- Forward (pending) and backward (rollback) range selection
"""

from typing import Dict, Iterable, List, Optional

from ..errors import DuplicateMigrationError
from .migration_base import Migration


class MigrationRegistry:
    """
    Migration Registry - ordered, duplicate-free steps of a schema

    Pattern: Built once per schema at declaration time
    Lifetime: Immutable after the database opens

    Unlike database schema migrations, gaps between versions are allowed:
    a key may jump from v1 to v5 with only v2, v3 and v5 declared.

    Example:
        registry = MigrationRegistry([Migration(3, g), Migration(2, f)])
        pending = registry.get_pending_migrations(1, 3)  # [v2, v3]
    """

    def __init__(self, migrations: Optional[Iterable[Migration]] = None):
        self._migrations: Dict[int, Migration] = {}
        for migration in migrations or ():
            self.register(migration)

    def register(self, migration: Migration) -> None:
        """
        Register a migration step.

        Raises:
            TypeError: If migration is not a Migration
            DuplicateMigrationError: If the version is already registered
        """
        if not isinstance(migration, Migration):
            raise TypeError(f"Expected Migration, got {type(migration).__name__}")
        if migration.version in self._migrations:
            raise DuplicateMigrationError(migration.version)

        self._migrations[migration.version] = migration

    def get_migration(self, version: int) -> Optional[Migration]:
        """Get a specific migration by version, or None."""
        return self._migrations.get(version)

    def get_all_migrations(self) -> List[Migration]:
        """All registered migrations sorted by version (ascending)."""
        return [self._migrations[v] for v in sorted(self._migrations)]

    def get_pending_migrations(self, from_version: int, to_version: int) -> List[Migration]:
        """
        Steps to upgrade data from ``from_version`` to ``to_version``.

        Returns migrations with from_version < version <= to_version,
        ascending. Empty when from_version >= to_version.
        """
        return [
            m for m in self.get_all_migrations()
            if from_version < m.version <= to_version
        ]

    def get_rollback_migrations(self, from_version: int, to_version: int) -> List[Migration]:
        """
        Steps to undo when data at ``from_version`` goes down to ``to_version``.

        Returns migrations with to_version < version <= from_version,
        descending (newest step undone first).
        """
        return [
            m for m in reversed(self.get_all_migrations())
            if to_version < m.version <= from_version
        ]

    def get_latest_version(self) -> int:
        """Highest registered version, or 0 if there are none."""
        if not self._migrations:
            return 0
        return max(self._migrations)

    def has_migrations(self) -> bool:
        """True if any migrations are registered."""
        return len(self._migrations) > 0

    def __len__(self) -> int:
        return len(self._migrations)

    def __iter__(self):
        return iter(self.get_all_migrations())

    def __repr__(self) -> str:
        """String representation for debugging."""
        count = len(self._migrations)
        latest = self.get_latest_version()
        return f"<MigrationRegistry: {count} migrations, latest v{latest}>"
