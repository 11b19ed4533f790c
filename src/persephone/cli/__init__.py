"""Persephone CLI - inspect and repair versioned key-value stores

Command modules:
- store.py: keys, get, version, set-version, remove, stats, clear
- common.py: shared utilities
"""
import click

from .. import __version__
from ..config import ADAPTER_TYPES, configure_logging
from .common import VERBOSITY_NORMAL, VERBOSITY_QUIET, VERBOSITY_VERBOSE
from .store import store_group


@click.group()
@click.version_option(version=__version__, prog_name="persephone")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              envvar='PERSEPHONE_CONFIG', help='YAML configuration file')
@click.option('--adapter', type=click.Choice(ADAPTER_TYPES), default=None,
              help='Storage adapter (default: from config or env)')
@click.option('--path', type=click.Path(), default=None,
              help='Store location for file/sqlite adapters')
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, default=False,
              help='Suppress non-essential output')
@click.pass_context
def cli(ctx, config_path, adapter, path, verbose, quiet):
    """Persephone - versioned key-value persistence

    \b
    Examples:
        persephone --adapter sqlite --path app.db keys
        persephone --adapter file --path ./store version todos
        persephone --config persephone.yaml stats
    """
    ctx.ensure_object(dict)

    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")

    if quiet:
        ctx.obj['verbosity'] = VERBOSITY_QUIET
    elif verbose:
        ctx.obj['verbosity'] = VERBOSITY_VERBOSE
        configure_logging("DEBUG")
    else:
        ctx.obj['verbosity'] = VERBOSITY_NORMAL

    ctx.obj['config_path'] = config_path
    ctx.obj['adapter'] = adapter
    ctx.obj['path'] = path


for _name, _command in store_group.commands.items():
    cli.add_command(_command, name=_name)


def main():
    """Entry point for the CLI."""
    cli()


__all__ = ['cli', 'main']
