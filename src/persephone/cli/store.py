"""Raw store inspection and repair commands.

These work without schemas: they read and write the store and its version
ledger directly, which makes them useful for debugging a database whose
application code is not at hand.
"""
import click

from ..migrations.ledger import VersionLedger, is_version_key
from .common import VERBOSITY_NORMAL, VERBOSITY_VERBOSE, echo, fail, run_with_adapter


@click.group()
def store_group():
    """Raw store commands."""
    pass


@store_group.command('keys')
@click.option('--all', 'show_all', is_flag=True, default=False,
              help='Include version ledger records')
@click.pass_context
def keys_cmd(ctx, show_all: bool) -> None:
    """List stored keys.

    Examples:
        persephone --adapter sqlite --path app.db keys
        persephone keys --all
    """
    async def _keys(adapter):
        return sorted(await adapter.keys())

    for key in run_with_adapter(ctx, _keys):
        if is_version_key(key) and not show_all:
            continue
        click.echo(key)


@store_group.command('get')
@click.argument('key')
@click.pass_context
def get_cmd(ctx, key: str) -> None:
    """Print the raw stored text of KEY."""
    async def _get(adapter):
        return await adapter.get_item(key)

    value = run_with_adapter(ctx, _get)
    if value is None:
        fail(f"Key '{key}' not found")
    click.echo(value)


@store_group.command('version')
@click.argument('key')
@click.pass_context
def version_cmd(ctx, key: str) -> None:
    """Print the recorded schema version of KEY."""
    async def _version(adapter):
        return await VersionLedger(adapter).get(key)

    version = run_with_adapter(ctx, _version)
    click.echo("unversioned" if version is None else str(version))


@store_group.command('set-version')
@click.argument('key')
@click.argument('version', type=click.IntRange(min=0))
@click.pass_context
def set_version_cmd(ctx, key: str, version: int) -> None:
    """Overwrite the recorded version of KEY.

    The next open() treats the stored value as being at VERSION, so
    migrations above it will run again.
    """
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)

    async def _set(adapter):
        await VersionLedger(adapter).set(key, version)

    run_with_adapter(ctx, _set)
    echo(click.style(f"✓ {key} recorded at v{version}", fg="green"), verbosity)


@store_group.command('remove')
@click.argument('key')
@click.pass_context
def remove_cmd(ctx, key: str) -> None:
    """Remove KEY and its version record."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)

    async def _remove(adapter):
        await adapter.remove_item(key)
        await VersionLedger(adapter).remove(key)

    run_with_adapter(ctx, _remove)
    echo(click.style(f"✓ Removed {key}", fg="green"), verbosity)


@store_group.command('stats')
@click.pass_context
def stats_cmd(ctx) -> None:
    """Show key counts."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)

    async def _stats(adapter):
        keys = await adapter.keys()
        versioned = await VersionLedger(adapter).versioned_keys()
        return keys, versioned

    keys, versioned_keys = run_with_adapter(ctx, _stats)
    data_keys = {k for k in keys if not is_version_key(k)}
    versioned = set(versioned_keys)

    click.echo(f"keys: {len(data_keys)}")
    click.echo(f"versioned: {len(versioned & data_keys)}")
    echo(f"ledger records: {len(versioned)}", verbosity, VERBOSITY_VERBOSE)
    orphaned = sorted(versioned - data_keys)
    if orphaned:
        echo(f"records without data: {', '.join(orphaned)}", verbosity, VERBOSITY_VERBOSE)


@store_group.command('clear')
@click.option('--yes', is_flag=True, default=False, help='Confirm wiping the store')
@click.pass_context
def clear_cmd(ctx, yes: bool) -> None:
    """Remove every key, version records included."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    if not yes:
        fail("Refusing to clear without --yes")

    async def _clear(adapter):
        await adapter.clear()

    run_with_adapter(ctx, _clear)
    echo(click.style("✓ Store cleared", fg="green"), verbosity)
