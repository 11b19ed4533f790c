"""
Persephone error hierarchy

Every error raised by the library derives from PersephoneError and carries a
stable ``code`` string. Configuration errors are raised before any storage I/O
and are always distinguishable from data-level errors (migration, validation,
serialization, storage).
"""

from typing import Any, Optional


class PersephoneError(Exception):
    """Base exception for all Persephone errors"""

    code: str = "PERSEPHONE_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(PersephoneError):
    """Database is not set up correctly for the requested operation"""

    code = "CONFIGURATION_ERROR"


class AdapterNotSetError(ConfigurationError):
    """No storage adapter configured"""

    def __init__(self):
        super().__init__(
            "Adapter is not set. Call use_memory(), use_file_system(), "
            "use_sqlite() or use() first."
        )


class SchemaNotSetError(ConfigurationError):
    """No schemas declared"""

    def __init__(self):
        super().__init__("Schemas are not set. Call version().schema() first.")


class SchemaNotFoundError(ConfigurationError):
    """A key was requested that has no declared schema"""

    def __init__(self, key: str):
        super().__init__(f'Schema for key "{key}" is not defined')
        self.key = key


class DatabaseNotOpenError(ConfigurationError):
    """Operation requires open() to have completed"""

    def __init__(self, name: str):
        super().__init__(f'Database "{name}" is not open. Call open() first.')
        self.name = name


class SchemaError(ConfigurationError):
    """A schema declaration is invalid"""


class DuplicateMigrationError(SchemaError):
    """Two migration steps of one schema share a version number"""

    def __init__(self, version: int):
        super().__init__(f"Duplicate migration version {version}")
        self.version = version


class MigrationError(PersephoneError):
    """
    A migration step, rollback or custom reconciliation failed.

    Attributes:
        key: Data key being initialized
        from_version: Version the run started from
        to_version: Version of the step that failed
    """

    code = "MIGRATION_ERROR"

    def __init__(self, message: str, key: str, from_version: int,
                 to_version: int, cause: Optional[BaseException] = None):
        super().__init__(
            f'migration failed for key "{key}" from version {from_version} '
            f"to {to_version}: {message}",
            cause,
        )
        self.key = key
        self.from_version = from_version
        self.to_version = to_version


class DowngradeNotSupportedError(PersephoneError):
    """A downgrade crosses a version with no reversible migration step"""

    code = "MIGRATION_ERROR"

    def __init__(self, key: str, version: int):
        super().__init__(
            f'key "{key}": no rollback declared for v{version}, cannot downgrade'
        )
        self.key = key
        self.version = version


class ValidationError(PersephoneError):
    """A value was rejected by the schema's validator"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, key: str, data: Any,
                 cause: Optional[BaseException] = None):
        super().__init__(f'Validation failed for key "{key}": {message}', cause)
        self.key = key
        self.data = data


class SerializationError(PersephoneError):
    """A value could not be encoded or a stored string could not be decoded"""

    code = "SERIALIZATION_ERROR"

    def __init__(self, message: str, key: str,
                 cause: Optional[BaseException] = None):
        super().__init__(f'Serialization failed for key "{key}": {message}', cause)
        self.key = key


class StorageError(PersephoneError):
    """Raised by storage adapters when the backend fails"""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, key: Optional[str] = None,
                 operation: Optional[str] = None,
                 cause: Optional[BaseException] = None):
        detail = "Storage error"
        if key is not None:
            detail += f' for key "{key}"'
        if operation:
            detail += f" during {operation}"
        super().__init__(f"{detail}: {message}", cause)
        self.key = key
        self.operation = operation
