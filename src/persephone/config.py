"""
Configuration for Persephone

Settings come from an optional YAML file, then environment variables:

    # persephone.yaml
    adapter: sqlite          # memory | file | sqlite
    path: ~/.myapp/store.db
    table: kv_store
    log_level: INFO

Environment overrides: PERSEPHONE_ADAPTER, PERSEPHONE_PATH,
PERSEPHONE_TABLE, PERSEPHONE_LOG_LEVEL.
"""

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigurationError
from .storage import FileSystemAdapter, MemoryAdapter, SQLiteAdapter, StorageAdapter

ADAPTER_TYPES = ("memory", "file", "sqlite")

ENV_ADAPTER = "PERSEPHONE_ADAPTER"
ENV_PATH = "PERSEPHONE_PATH"
ENV_TABLE = "PERSEPHONE_TABLE"
ENV_LOG_LEVEL = "PERSEPHONE_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class PersephoneConfig:
    """Storage and logging settings."""
    adapter: str = "memory"
    path: Optional[Path] = None
    table: str = "kv_store"
    log_level: str = "WARNING"

    def __post_init__(self):
        self.adapter = str(self.adapter).lower()
        if self.adapter not in ADAPTER_TYPES:
            raise ConfigurationError(
                f"Unknown adapter '{self.adapter}'. Must be one of: {', '.join(ADAPTER_TYPES)}"
            )
        if self.path is not None:
            self.path = Path(self.path).expanduser()
        if self.adapter in ("file", "sqlite") and self.path is None:
            raise ConfigurationError(f"Adapter '{self.adapter}' requires a path")
        self.log_level = str(self.log_level).upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        data = asdict(self)
        data["path"] = str(self.path) if self.path else None
        return data


def load_config(config_path: Optional[Union[str, Path]] = None,
                overrides: Optional[Dict[str, Any]] = None) -> PersephoneConfig:
    """
    Load configuration.

    Priority: overrides > environment variables > YAML file > defaults.

    Args:
        config_path: YAML file; a missing file means defaults
        overrides: Explicit values (e.g. from CLI flags); None entries are skipped

    Raises:
        ConfigurationError: If the file is unreadable or values are invalid
    """
    data: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path).expanduser()
        if path.exists():
            try:
                loaded = yaml.safe_load(path.read_text()) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
            if not isinstance(loaded, dict):
                raise ConfigurationError(f"Config file {path} must contain a mapping")
            data.update(loaded)

    env_map = {
        "adapter": ENV_ADAPTER,
        "path": ENV_PATH,
        "table": ENV_TABLE,
        "log_level": ENV_LOG_LEVEL,
    }
    for field_name, env_var in env_map.items():
        value = os.getenv(env_var)
        if value:
            data[field_name] = value

    for field_name, value in (overrides or {}).items():
        if value is not None:
            data[field_name] = value

    unknown = set(data) - set(env_map)
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    return PersephoneConfig(**data)


def create_adapter(config: PersephoneConfig) -> StorageAdapter:
    """Build the storage adapter a config describes."""
    if config.adapter == "memory":
        return MemoryAdapter()
    elif config.adapter == "file":
        return FileSystemAdapter(config.path)
    elif config.adapter == "sqlite":
        return SQLiteAdapter(config.path, table=config.table)
    raise ConfigurationError(f"Unknown adapter '{config.adapter}'")


def configure_logging(level: Union[str, int] = "WARNING") -> None:
    """Set the level of the persephone logger and attach a stderr handler once."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("persephone").setLevel(
        level.upper() if isinstance(level, str) else level
    )
