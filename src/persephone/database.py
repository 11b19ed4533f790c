"""
Persephone database facade

Composes a raw store, per-key schemas, codecs, validators and the migration
engine behind get/set/remove/clear/keys/length.

Lifecycle:
    db = Persephone("MyApp")             # CREATED
    db.version(2).schema({...})          # schemas declared
    db.use_sqlite("app.db")              # CONFIGURED once both are set
    await db.open()                      # OPEN: every key migrated eagerly
    await db.get("todos")
    await db.close()                     # CLOSED

Migrations run once per key inside open(), one key at a time in declaration
order. get()/set() afterwards assume stored values are current.
"""

import logging
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import PersephoneConfig, configure_logging, create_adapter
from .errors import (
    AdapterNotSetError,
    ConfigurationError,
    DatabaseNotOpenError,
    SchemaError,
    SchemaNotFoundError,
    SchemaNotSetError,
)
from .migrations.engine import InitResult, initialize_key_detailed
from .migrations.ledger import (
    is_version_key,
    remove_stored_version,
    set_stored_version,
)
from .schema import Schema
from .serialization import deserialize, serialize
from .storage import FileSystemAdapter, KeyDBAdapter, MemoryAdapter, SQLiteAdapter, StorageAdapter
from .validation import validate

logger = logging.getLogger(__name__)


class DatabasePhase(str, Enum):
    """Where a database is in its lifecycle."""

    CREATED = "created"          # adapter and/or schemas missing
    CONFIGURED = "configured"    # ready for open()
    OPEN = "open"                # keys initialized, reads/writes allowed
    CLOSED = "closed"            # adapter released


class VersionBuilder:
    """Returned by Persephone.version(); declares that version's schemas."""

    def __init__(self, database: "Persephone", version: int):
        self._database = database
        self._version = version

    @property
    def version(self) -> int:
        return self._version

    def schema(self, schemas: Mapping[str, Union[Schema, Dict[str, Any]]]) -> "Persephone":
        self._database._set_schemas(schemas)
        return self._database


class Persephone:
    """
    Versioned key-value database.

    Example:
        db = Persephone("todos-app")
        db.version(2).schema({
            "todos": Schema(
                version=2,
                default=[],
                migrations=[Migration(2, lambda items: [{"title": t} for t in items])],
            ),
        })
        db.use_file_system("~/.todos")

        async with db:
            todos = await db.get("todos")
            await db.set("todos", todos + [{"title": "write docs"}])
    """

    def __init__(self, name: str):
        self._name = name
        self._adapter: Optional[StorageAdapter] = None
        self._schemas: Dict[str, Schema] = {}
        self._version = 1
        self._phase = DatabasePhase.CREATED
        self._last_open: List[InitResult] = []

    # ==================== Properties ====================

    @property
    def name(self) -> str:
        return self._name

    @property
    def adapter(self) -> Optional[StorageAdapter]:
        return self._adapter

    @property
    def schemas(self) -> Mapping[str, Schema]:
        """Read-only view of declared schemas."""
        return MappingProxyType(self._schemas)

    @property
    def current_version(self) -> int:
        """Database version passed to version()."""
        return self._version

    @property
    def phase(self) -> DatabasePhase:
        return self._phase

    @property
    def is_open(self) -> bool:
        return self._phase is DatabasePhase.OPEN

    @property
    def last_open_results(self) -> List[InitResult]:
        """Per-key results of the most recent successful open()."""
        return list(self._last_open)

    # ==================== Configuration ====================

    def version(self, version: int) -> VersionBuilder:
        """Set the database version; chain .schema({...}) to declare keys."""
        self._ensure_not_open("version()")
        if not isinstance(version, int) or version < 1:
            raise SchemaError(f"Database version must be an integer >= 1, got {version!r}")
        self._version = version
        return VersionBuilder(self, version)

    def _set_schemas(self, schemas: Mapping[str, Union[Schema, Dict[str, Any]]]) -> None:
        self._ensure_not_open("schema()")
        normalized: Dict[str, Schema] = {}
        for key, schema in schemas.items():
            if is_version_key(key):
                raise SchemaError(f"Key '{key}' collides with the version record namespace")
            if isinstance(schema, Mapping):
                schema = Schema.from_dict(dict(schema))
            if not isinstance(schema, Schema):
                raise SchemaError(f"Schema for key '{key}' must be a Schema or a mapping")
            normalized[key] = schema
        self._schemas = normalized
        self._refresh_phase()

    def use(self, adapter: StorageAdapter) -> "Persephone":
        """Use a custom storage adapter."""
        self._ensure_not_open("use()")
        if not isinstance(adapter, StorageAdapter):
            raise ConfigurationError(
                f"Adapter must be a StorageAdapter, got {type(adapter).__name__}"
            )
        self._adapter = adapter
        self._refresh_phase()
        return self

    def use_memory(self) -> "Persephone":
        """Use in-memory storage (for testing or fallback)."""
        return self.use(MemoryAdapter())

    def use_file_system(self, base_path: Union[str, Path]) -> "Persephone":
        return self.use(FileSystemAdapter(Path(base_path).expanduser()))

    def use_sqlite(self, db_path: Union[str, Path], table: str = "kv_store") -> "Persephone":
        return self.use(SQLiteAdapter(db_path, table=table))

    def use_keydb(self, client: Any) -> "Persephone":
        return self.use(KeyDBAdapter(client))

    def use_config(self, config: PersephoneConfig) -> "Persephone":
        """Use the adapter described by a PersephoneConfig and apply its log level."""
        configure_logging(config.log_level)
        return self.use(create_adapter(config))

    def _ensure_not_open(self, operation: str) -> None:
        if self._phase is DatabasePhase.OPEN:
            raise ConfigurationError(f"Cannot call {operation} on an open database")

    def _refresh_phase(self) -> None:
        if self._adapter is not None and self._schemas:
            self._phase = DatabasePhase.CONFIGURED
        else:
            self._phase = DatabasePhase.CREATED

    # ==================== Lifecycle ====================

    async def open(self) -> None:
        """
        Initialize every declared key (runs migrations).

        Keys are processed sequentially; a failure stops open() at that key,
        leaves earlier keys committed and the failing key untouched.

        Raises:
            AdapterNotSetError: No adapter configured
            SchemaNotSetError: No schemas declared
            MigrationError: A migration or rollback step failed
            SerializationError: A stored value could not be decoded
            StorageError: The adapter failed
        """
        if self._adapter is None:
            raise AdapterNotSetError()
        if not self._schemas:
            raise SchemaNotSetError()

        self._phase = DatabasePhase.CONFIGURED
        logger.info(f"Opening database '{self._name}' ({len(self._schemas)} key(s))")

        results = []
        for key, schema in self._schemas.items():
            results.append(await initialize_key_detailed(self._adapter, key, schema))

        self._last_open = results
        self._phase = DatabasePhase.OPEN

    async def close(self) -> None:
        """Release the adapter. The database can be reopened with open()."""
        if self._adapter is not None:
            await self._adapter.close()
        self._phase = DatabasePhase.CLOSED

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ==================== Data operations ====================

    def _require_open(self) -> StorageAdapter:
        if self._adapter is None:
            raise AdapterNotSetError()
        if self._phase is not DatabasePhase.OPEN:
            raise DatabaseNotOpenError(self._name)
        return self._adapter

    def _schema_for(self, key: str) -> Schema:
        schema = self._schemas.get(key)
        if schema is None:
            raise SchemaNotFoundError(key)
        return schema

    async def get(self, key: str) -> Any:
        """
        Get the value stored under a declared key.

        Returns:
            The stored value (validated if the schema has a validator),
            or a copy of the schema default when nothing (or an empty
            string) is stored

        Raises:
            DatabaseNotOpenError, SchemaNotFoundError: Before any I/O
            ValidationError: Stored value rejected by the validator
        """
        adapter = self._require_open()
        schema = self._schema_for(key)

        raw = await adapter.get_item(key)
        if raw is None or raw == "":
            return schema.make_default()

        data = deserialize(raw, schema, key)
        if schema.validator is not None:
            return validate(data, schema.validator, key)
        return data

    async def set(self, key: str, value: Any) -> None:
        """
        Store a value under a declared key.

        The value is validated before it is serialized; the ledger record is
        refreshed to the schema version after the data write.

        Raises:
            DatabaseNotOpenError, SchemaNotFoundError: Before any I/O
            ValidationError: Value rejected by the validator
        """
        adapter = self._require_open()
        schema = self._schema_for(key)

        if schema.validator is not None:
            value = validate(value, schema.validator, key)

        await adapter.set_item(key, serialize(value, schema, key))
        await set_stored_version(adapter, key, schema.version)

    async def remove(self, key: str) -> None:
        """Remove a declared key and its version record."""
        adapter = self._require_open()
        self._schema_for(key)

        await adapter.remove_item(key)
        await remove_stored_version(adapter, key)

    async def clear(self) -> None:
        """Remove everything in the underlying store."""
        adapter = self._require_open()
        await adapter.clear()

    async def keys(self) -> List[str]:
        """Stored data keys, excluding version records."""
        adapter = self._require_open()
        return [k for k in await adapter.keys() if not is_version_key(k)]

    async def length(self) -> int:
        """Number of stored data keys, excluding version records."""
        return len(await self.keys())

    def __repr__(self) -> str:
        return f"<Persephone '{self._name}' v{self._version} {self._phase.value}>"
