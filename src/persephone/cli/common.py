"""Shared utilities for Persephone CLI commands."""
import asyncio
import sys
from typing import Any

import click

from ..config import configure_logging, create_adapter, load_config
from ..errors import PersephoneError
from ..storage import StorageAdapter

# Verbosity levels
VERBOSITY_QUIET = 0
VERBOSITY_NORMAL = 1
VERBOSITY_VERBOSE = 2


def should_print(verbosity: int, message_level: int) -> bool:
    """Determine if a message should be printed based on verbosity settings.

    Args:
        verbosity: Current verbosity level (0=quiet, 1=normal, 2=verbose).
        message_level: Minimum verbosity level required for this message.
    """
    return verbosity >= message_level


def echo(message: str, verbosity: int, level: int = VERBOSITY_NORMAL) -> None:
    """Print a status message when ``verbosity`` reaches ``level``.

    Command results (values, key listings, counts) go straight to
    ``click.echo`` so that --quiet never hides them.
    """
    if should_print(verbosity, level):
        click.echo(message)


def fail(message: str) -> None:
    """Print an error in red to stderr and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def get_adapter(ctx: click.Context) -> StorageAdapter:
    """Build the storage adapter from --config/--adapter/--path and env vars."""
    obj = ctx.obj or {}
    try:
        config = load_config(
            obj.get("config_path"),
            overrides={"adapter": obj.get("adapter"), "path": obj.get("path")},
        )
    except PersephoneError as e:
        fail(str(e))
    # -v/-q take precedence over the configured log level
    if obj.get("verbosity", VERBOSITY_NORMAL) == VERBOSITY_NORMAL:
        configure_logging(config.log_level)
    return create_adapter(config)


def run_with_adapter(ctx: click.Context, operation) -> Any:
    """Run ``operation(adapter)`` on a fresh adapter and close it afterwards."""
    adapter = get_adapter(ctx)

    async def _run() -> Any:
        try:
            return await operation(adapter)
        finally:
            await adapter.close()

    try:
        return asyncio.run(_run())
    except PersephoneError as e:
        fail(str(e))
