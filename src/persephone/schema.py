"""
Schema declarations

A Schema is the per-key contract between the application and the store:
the version the application expects, the default value, the ordered
migrations that reach that version, and what to do when stored data is
newer than the application (reconciliation).
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import SchemaError
from .migrations.migration_base import Migration
from .migrations.registry import MigrationRegistry


class ReconciliationPolicy(str, Enum):
    """What to do when the stored version is newer than the schema version."""

    MIGRATE = "migrate"  # undo newer steps via their rollbacks
    RESET = "reset"      # replace with the schema default
    IGNORE = "ignore"    # leave storage untouched, yield None
    CUSTOM = "custom"    # caller-supplied handler decides


ReconcileHandler = Callable[[Any, int, int], Any]


@dataclass(frozen=True)
class Reconciliation:
    """Tagged reconciliation policy; ``handler`` is set only for CUSTOM."""

    policy: ReconciliationPolicy
    handler: Optional[ReconcileHandler] = None

    @classmethod
    def coerce(cls, value: Any) -> "Reconciliation":
        """
        Normalize a user-supplied policy.

        Accepts a Reconciliation, a ReconciliationPolicy, one of the strings
        "migrate", "reset", "ignore", or a callable(data, from, to).
        """
        if isinstance(value, Reconciliation):
            return value
        if value is None:
            return cls(ReconciliationPolicy.MIGRATE)
        if isinstance(value, (ReconciliationPolicy, str)):
            try:
                policy = ReconciliationPolicy(value)
            except ValueError:
                raise SchemaError(f"Unknown reconciliation policy: {value!r}")
            if policy is ReconciliationPolicy.CUSTOM:
                raise SchemaError("Custom reconciliation requires a handler function")
            return cls(policy)
        if callable(value):
            return cls(ReconciliationPolicy.CUSTOM, value)
        raise SchemaError(f"Invalid reconciliation: {value!r}")

    def __post_init__(self):
        if self.policy is ReconciliationPolicy.CUSTOM and not callable(self.handler):
            raise SchemaError("Custom reconciliation requires a handler function")


@dataclass
class Schema:
    """
    Per-key configuration.

    Example:
        Schema(
            version=3,
            default=[],
            migrations=[Migration(2, add_ids), Migration(3, add_owner)],
            reconciliation="reset",
        )
    """

    version: int
    default: Any = None
    migrations: List[Migration] = field(default_factory=list)
    reconciliation: Union[Reconciliation, ReconciliationPolicy, str, ReconcileHandler, None] = None
    serialize: Optional[Callable[[Any], str]] = None
    deserialize: Optional[Callable[[str], Any]] = None
    validator: Any = None
    description: str = ""

    def __post_init__(self):
        if not isinstance(self.version, int) or isinstance(self.version, bool):
            raise SchemaError(f"Schema version must be an integer, got {self.version!r}")
        if self.version < 1:
            raise SchemaError(f"Schema version must be >= 1, got {self.version}")
        if self.serialize is not None and not callable(self.serialize):
            raise SchemaError("serialize must be callable")
        if self.deserialize is not None and not callable(self.deserialize):
            raise SchemaError("deserialize must be callable")

        self.registry = MigrationRegistry(self.migrations)
        self.migrations = self.registry.get_all_migrations()
        self.reconciliation = Reconciliation.coerce(self.reconciliation)

    def make_default(self) -> Any:
        """A fresh copy of the default so callers never share one instance."""
        return copy.deepcopy(self.default)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """Build a Schema from a plain mapping of its fields."""
        if "version" not in data:
            raise SchemaError("Schema mapping requires a 'version'")
        migrations = [
            m if isinstance(m, Migration) else Migration(**m)
            for m in data.get("migrations", [])
        ]
        fields = {k: v for k, v in data.items() if k != "migrations"}
        return cls(migrations=migrations, **fields)


Schemas = Dict[str, Schema]
