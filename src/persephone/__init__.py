"""
Persephone - versioned key-value persistence

Application data lives in a pluggable async store; every value is upgraded
to the schema version the application declares before it is handed out.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .errors import (
    PersephoneError,
    ConfigurationError,
    AdapterNotSetError,
    SchemaNotSetError,
    SchemaNotFoundError,
    DatabaseNotOpenError,
    SchemaError,
    DuplicateMigrationError,
    MigrationError,
    DowngradeNotSupportedError,
    ValidationError,
    SerializationError,
    StorageError,
)
from .migrations import Migration, MigrationRegistry, VersionLedger, VERSION_PREFIX
from .migrations.engine import InitOutcome, InitResult, execute_migrations, initialize_key
from .schema import Schema, Reconciliation, ReconciliationPolicy
from .serialization import JSONCodec
from .validation import PydanticValidator, SafeParseResult
from .storage import (
    StorageAdapter,
    MemoryAdapter,
    FileSystemAdapter,
    SQLiteAdapter,
    KeyDBAdapter,
)
from .config import PersephoneConfig, load_config
from .database import Persephone, DatabasePhase, VersionBuilder
from .callbacks import CallbackAdapter, with_callback

__all__ = [
    "Persephone",
    "DatabasePhase",
    "VersionBuilder",
    "Schema",
    "Migration",
    "MigrationRegistry",
    "Reconciliation",
    "ReconciliationPolicy",
    "VersionLedger",
    "VERSION_PREFIX",
    "InitOutcome",
    "InitResult",
    "execute_migrations",
    "initialize_key",
    "JSONCodec",
    "PydanticValidator",
    "SafeParseResult",
    "StorageAdapter",
    "MemoryAdapter",
    "FileSystemAdapter",
    "SQLiteAdapter",
    "KeyDBAdapter",
    "PersephoneConfig",
    "load_config",
    "CallbackAdapter",
    "with_callback",
    # Errors
    "PersephoneError",
    "ConfigurationError",
    "AdapterNotSetError",
    "SchemaNotSetError",
    "SchemaNotFoundError",
    "DatabaseNotOpenError",
    "SchemaError",
    "DuplicateMigrationError",
    "MigrationError",
    "DowngradeNotSupportedError",
    "ValidationError",
    "SerializationError",
    "StorageError",
]
