"""Command line interface for torrconf.

Adds commands:
- show
- reset
- apply
- get / ls / rm / clear (raw bucket access)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import toml
from rich.console import Console
from rich.table import Table

from torrconf import __version__
from torrconf.config.manager import SettingsManager, init_settings, shutdown_settings
from torrconf.exceptions import SerializationError
from torrconf.logging_config import setup_logging
from torrconf.models import LoggingOptions, LogLevel, RuntimeOptions, Settings, StoreOptions
from torrconf.storage.store import SettingsStore, open_store

logger = logging.getLogger(__name__)

PROBE_WAIT_SECONDS = 5.0


def _options(ctx: click.Context) -> RuntimeOptions:
    return ctx.obj["options"]


def _manager(ctx: click.Context) -> SettingsManager:
    return init_settings(_options(ctx))


def _store(ctx: click.Context) -> SettingsStore:
    store = open_store(_options(ctx).store)
    if store is None:
        msg = f"Cannot open settings database in {_options(ctx).store.data_dir}"
        raise click.ClickException(msg)
    return store


def _refuse_read_only(ctx: click.Context) -> None:
    if _options(ctx).read_only:
        msg = "Refusing to modify the database in read-only mode"
        raise click.ClickException(msg)


def _dump(sets: Settings, format_: str) -> str:
    data = sets.model_dump(mode="json", by_alias=True)
    if format_ == "toml":
        return toml.dumps(data)
    return json.dumps(data, indent=2)


@click.group()
@click.version_option(__version__, prog_name="torrconf")
@click.option(
    "--data-dir",
    "-D",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Runtime data directory holding config.db",
)
@click.option("--read-only", is_flag=True, help="Never write settings to the database")
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel]),
    default=LogLevel.WARNING.value,
    show_default=True,
)
@click.option("--log-file", type=click.Path(), default=None, help="Write logs next to this path")
@click.pass_context
def cli(ctx, data_dir, read_only, log_level, log_file):
    """Inspect and manage the torrent server settings database."""
    ctx.ensure_object(dict)
    options = RuntimeOptions(
        store=StoreOptions(data_dir=data_dir),
        logging=LoggingOptions(log_level=LogLevel(log_level), log_file=log_file),
        read_only=read_only,
    )
    setup_logging(options.logging)
    ctx.obj["options"] = options
    ctx.call_on_close(shutdown_settings)


@cli.command("show")
@click.option(
    "--format",
    "format_",
    type=click.Choice(["json", "toml"]),
    default="json",
    show_default=True,
)
@click.pass_context
def show(ctx, format_):
    """Load the settings (migrating if needed) and print them."""
    manager = _manager(ctx)
    click.echo(_dump(manager.settings, format_))


@cli.command("reset")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx, yes):
    """Replace the stored settings with the factory defaults."""
    if not yes:
        click.confirm("Reset all settings to factory defaults?", abort=True)
    manager = _manager(ctx)
    manager.reset_defaults()
    if not manager.persistent:
        click.echo("Settings reset in memory only (not persisted)")
    else:
        click.echo("Settings reset to factory defaults")


@cli.command("apply")
@click.argument("settings_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "format_",
    type=click.Choice(["json", "toml"]),
    default="json",
    show_default=True,
)
@click.pass_context
def apply(ctx, settings_file, format_):
    """Replace the settings with a JSON record (stored field names)."""
    try:
        sets = Settings.from_json(settings_file.read_bytes())
    except SerializationError as e:
        raise click.ClickException(f"Invalid settings file: {e}") from e
    manager = _manager(ctx)
    manager.replace(sets)
    manager.wait_for_probe(PROBE_WAIT_SECONDS)
    click.echo(_dump(manager.settings, format_))


@cli.command("get")
@click.argument("path")
@click.argument("name")
@click.pass_context
def get_value(ctx, path, name):
    """Print the value stored under PATH/NAME."""
    value = _store(ctx).get(path, name)
    if value is None:
        raise click.ClickException(f"No value at {path}/{name}")
    try:
        click.echo(value.decode("utf-8"))
    except UnicodeDecodeError:
        click.echo(value.hex())


@cli.command("ls")
@click.argument("path")
@click.pass_context
def list_keys(ctx, path):
    """List the keys of the bucket at PATH."""
    store = _store(ctx)
    table = Table(title=f"Bucket {path}")
    table.add_column("Key", style="cyan")
    table.add_column("Size", style="green", justify="right")
    for name in store.list_keys(path):
        value = store.get(path, name)
        table.add_row(name, str(len(value) if value is not None else 0))
    Console().print(table)


@cli.command("rm")
@click.argument("path")
@click.argument("name")
@click.pass_context
def remove(ctx, path, name):
    """Delete the key NAME from the bucket at PATH."""
    _refuse_read_only(ctx)
    _store(ctx).remove(path, name)
    click.echo(f"Removed {path}/{name}")


@cli.command("clear")
@click.argument("path")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear(ctx, path, yes):
    """Delete every key of the bucket at PATH."""
    _refuse_read_only(ctx)
    if not yes:
        click.confirm(f"Delete every key in {path}?", abort=True)
    _store(ctx).clear(path)
    click.echo(f"Cleared {path}")


def main() -> None:
    """Console script entry point."""
    cli(obj={})
