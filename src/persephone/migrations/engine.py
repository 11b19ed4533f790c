"""
Migration Engine

Decides what a stored value should look like under the current schema and
commits the result:

- execute_migrations: fold forward steps from_version < v <= to_version
- execute_rollbacks: undo steps to_version < v <= from_version, newest first
- reconcile: dispatch on the schema's reconciliation policy when stored
  data is newer than the schema
- initialize_key: per-key orchestration run once at database open

A failed step aborts the run before anything is written back, so the
stored value and its ledger record stay exactly as they were.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..errors import DowngradeNotSupportedError, MigrationError, SchemaError
from ..schema import ReconciliationPolicy, Schema
from ..serialization import deserialize, serialize
from .ledger import get_stored_version, set_stored_version

logger = logging.getLogger(__name__)


class InitOutcome(str, Enum):
    """How initialize_key resolved a key."""

    DEFAULTED = "defaulted"      # nothing stored, default at target version
    UNCHANGED = "unchanged"      # already at target version, no writes
    MIGRATED = "migrated"        # forward migrations ran
    RESET = "reset"              # newer data replaced by default
    IGNORED = "ignored"          # newer data left untouched
    ROLLED_BACK = "rolled_back"  # newer data downgraded via rollbacks
    CUSTOM = "custom"            # newer data handled by custom reconciliation


@dataclass
class InitResult:
    """Value visible to the application plus how it was produced."""
    key: str
    value: Any
    outcome: InitOutcome
    from_version: int
    to_version: int

    @property
    def written(self) -> bool:
        """True if initialization wrote the data key back."""
        return self.outcome not in (
            InitOutcome.DEFAULTED, InitOutcome.UNCHANGED, InitOutcome.IGNORED
        )


async def execute_migrations(data: Any, schema: Schema, from_version: int,
                             to_version: int, key: str = "unknown") -> Any:
    """
    Upgrade ``data`` from ``from_version`` to ``to_version``.

    Args:
        data: Deserialized stored value
        schema: Schema holding the migration steps
        from_version: Recorded version (0 when none was recorded)
        to_version: Target version
        key: Data key, used to tag errors

    Returns:
        The upgraded value, or ``data`` unchanged when nothing applies

    Raises:
        MigrationError: If a step fails; later steps do not run
    """
    if from_version >= to_version:
        return data

    if not schema.registry.has_migrations():
        if from_version == 0:
            return schema.make_default()
        return data

    pending = schema.registry.get_pending_migrations(from_version, to_version)
    if not pending:
        return data

    logger.info(
        f"Migrating key '{key}' from v{from_version} to v{to_version} "
        f"({len(pending)} step(s))"
    )

    migrated = data
    for migration in pending:
        logger.debug(f"Applying {migration!r} to key '{key}'")
        try:
            migrated = await migration.apply(migrated)
        except Exception as e:
            raise MigrationError(str(e), key, from_version, migration.version, e) from e

    return migrated


async def execute_rollbacks(data: Any, schema: Schema, from_version: int,
                            to_version: int, key: str = "unknown") -> Any:
    """
    Downgrade ``data`` from a newer ``from_version`` to ``to_version``.

    Every version in to_version < version <= from_version must be declared
    by a step with a rollback; those steps are undone newest first. A
    version with no step, or a step without a rollback, refuses the
    downgrade before anything runs.

    Raises:
        MigrationError: If a rollback is missing or fails
    """
    if from_version <= to_version:
        return data

    steps = schema.registry.get_rollback_migrations(from_version, to_version)
    declared = {migration.version: migration for migration in steps}

    for version in range(from_version, to_version, -1):
        migration = declared.get(version)
        if migration is None or not migration.reversible:
            cause = DowngradeNotSupportedError(key, version)
            raise MigrationError(cause.message, key, from_version, version, cause)

    logger.info(
        f"Rolling back key '{key}' from v{from_version} to v{to_version} "
        f"({len(steps)} step(s))"
    )

    reverted = data
    for migration in steps:
        logger.debug(f"Reverting {migration!r} on key '{key}'")
        try:
            reverted = await migration.revert(reverted)
        except Exception as e:
            raise MigrationError(str(e), key, from_version, migration.version, e) from e

    return reverted


async def reconcile(data: Any, schema: Schema, from_version: int,
                    to_version: int, key: str = "unknown"):
    """
    Resolve stored data that is newer than the schema.

    Returns:
        (value, outcome). For IGNORE the value is None and nothing may be
        written.

    Raises:
        MigrationError: If the downgrade is refused or the custom handler fails
    """
    reconciliation = schema.reconciliation
    policy = reconciliation.policy

    if policy is ReconciliationPolicy.RESET:
        return schema.make_default(), InitOutcome.RESET
    elif policy is ReconciliationPolicy.IGNORE:
        return None, InitOutcome.IGNORED
    elif policy is ReconciliationPolicy.MIGRATE:
        value = await execute_rollbacks(data, schema, from_version, to_version, key)
        return value, InitOutcome.ROLLED_BACK
    elif policy is ReconciliationPolicy.CUSTOM:
        try:
            value = reconciliation.handler(data, from_version, to_version)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            raise MigrationError(str(e), key, from_version, to_version, e) from e
        return value, InitOutcome.CUSTOM

    raise SchemaError(f"Unhandled reconciliation policy: {policy!r}")


async def initialize_key_detailed(store, key: str, schema: Schema) -> InitResult:
    """
    Bring one key up to its schema version and commit the result.

    Args:
        store: Raw store adapter
        key: Data key
        schema: Schema declared for the key

    Returns:
        InitResult describing the visible value and what happened
    """
    stored_version = await get_stored_version(store, key)
    raw = await store.get_item(key)
    to_version = schema.version

    if raw is None or raw == "":
        await set_stored_version(store, key, to_version)
        logger.debug(f"Key '{key}' is empty, starting at v{to_version}")
        return InitResult(key, schema.make_default(), InitOutcome.DEFAULTED, 0, to_version)

    data = deserialize(raw, schema, key)
    from_version = stored_version if stored_version is not None else 0

    if from_version == to_version:
        return InitResult(key, data, InitOutcome.UNCHANGED, from_version, to_version)

    if from_version < to_version:
        value = await execute_migrations(data, schema, from_version, to_version, key)
        outcome = InitOutcome.MIGRATED
    else:
        logger.info(
            f"Key '{key}' stored at v{from_version} is newer than schema "
            f"v{to_version}; reconciling with '{schema.reconciliation.policy.value}'"
        )
        value, outcome = await reconcile(data, schema, from_version, to_version, key)
        if outcome is InitOutcome.IGNORED:
            return InitResult(key, None, outcome, from_version, to_version)

    await store.set_item(key, serialize(value, schema, key))
    await set_stored_version(store, key, to_version)
    logger.info(f"Committed key '{key}' at v{to_version} ({outcome.value})")

    return InitResult(key, value, outcome, from_version, to_version)


async def initialize_key(store, key: str, schema: Schema) -> Optional[Any]:
    """
    Initialize a key and return the value visible to the application.

    Returns None when reconciliation is IGNORE for newer stored data.
    """
    result = await initialize_key_detailed(store, key, schema)
    return result.value
