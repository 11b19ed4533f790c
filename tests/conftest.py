"""Pytest fixtures for Persephone tests"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def store_dir(tmp_path):
    """Empty directory for filesystem-backed stores."""
    path = tmp_path / "store"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def sqlite_path(tmp_path):
    """Path for a fresh SQLite store."""
    return tmp_path / "persephone.sqlite"


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML config and return its path."""
    def _write(content: str) -> Path:
        path = tmp_path / "persephone.yaml"
        path.write_text(content)
        return path
    return _write
