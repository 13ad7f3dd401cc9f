"""Configuration commands — get, set, unset, validate, list, path."""

from __future__ import annotations

import json
import math

import click

from clawgate.cli.app import get_runtime
from clawgate.cli.formatters import build_table, flatten_document, format_value
from clawgate.config_file import (
    delete_value,
    get_value,
    read_config_snapshot,
    set_value,
    write_config_file,
)
from clawgate.errors import StorageError
from clawgate.privacy.redaction import is_secret_field
from clawgate.schema import validate_document
from clawgate.wizard.summary import format_issues, mask_document, mask_secret


def _load(ctx: click.Context):
    path = get_runtime(ctx).settings.config_path
    try:
        snapshot = read_config_snapshot(path)
    except StorageError as e:
        raise click.ClickException(str(e)) from None
    return path, snapshot


def _write(path, data) -> None:
    try:
        write_config_file(path, data)
    except StorageError as e:
        raise click.ClickException(str(e)) from None


@click.group("config", invoke_without_command=True)
@click.pass_context
def config_group(ctx: click.Context) -> None:
    """Inspect and edit the gateway document (clawgate.toml)."""
    if ctx.invoked_subcommand is None:
        # Default: list all config
        ctx.invoke(config_list)


@config_group.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Print where the gateway document lives."""
    click.echo(str(get_runtime(ctx).settings.config_path))


@config_group.command("get")
@click.argument("key")
@click.option("--reveal", is_flag=True, help="Print secret values unmasked")
@click.pass_context
def config_get(ctx: click.Context, key: str, reveal: bool) -> None:
    """Get a configuration value by dotted key."""
    path, snapshot = _load(ctx)
    if not snapshot.exists:
        raise click.ClickException(f"No config at {path}")
    try:
        value = get_value(snapshot.config, key)
    except ValueError as e:
        raise click.ClickException(str(e)) from None
    except KeyError:
        raise click.ClickException(f"Key not found: {key}") from None
    if not reveal:
        last = key.rsplit(".", 1)[-1]
        value = mask_secret(value) if is_secret_field(last) else mask_document(value)
    if isinstance(value, (dict, list)):
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(format_value(value))


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value by dotted key."""
    path, snapshot = _load(ctx)
    if snapshot.exists and not snapshot.valid and not snapshot.config:
        raise click.ClickException(f"Config at {path} cannot be parsed; run `clawgate doctor`")

    # Type coercion
    parsed = _parse_value(value)
    try:
        data = set_value(snapshot.config, key, parsed)
    except ValueError as e:
        raise click.ClickException(str(e)) from None

    # Issues the document already had do not block an unrelated edit.
    known = {str(issue) for issue in validate_document(snapshot.config)}
    added = [issue for issue in validate_document(data) if str(issue) not in known]
    if added:
        click.echo(format_issues(added), err=True)
        raise click.ClickException(f"Refusing to set {key}: {len(added)} new issue(s); {path} left unchanged")
    _write(path, data)
    shown = mask_secret(parsed) if is_secret_field(key.rsplit(".", 1)[-1]) else format_value(parsed)
    click.echo(f"Set {key} = {shown} in {path}")


@config_group.command("unset")
@click.argument("key")
@click.pass_context
def config_unset(ctx: click.Context, key: str) -> None:
    """Remove a configuration value."""
    path, snapshot = _load(ctx)
    if not snapshot.exists:
        raise click.ClickException(f"No config at {path}")
    try:
        data = delete_value(snapshot.config, key)
    except ValueError as e:
        raise click.ClickException(str(e)) from None
    except KeyError:
        raise click.ClickException(f"Key not found: {key}") from None
    _write(path, data)
    click.echo(f"Removed {key} from {path}")


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the gateway document against the schema."""
    path, snapshot = _load(ctx)
    if not snapshot.exists:
        click.echo(f"No config at {path} (defaults apply).")
        return
    if snapshot.valid:
        click.echo("Configuration is valid.")
        return
    click.echo(format_issues(snapshot.issues), err=True)
    raise click.ClickException(f"Invalid configuration: {len(snapshot.issues)} issue(s)")


@config_group.command("list")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.pass_context
def config_list(ctx: click.Context, json_output: bool = False) -> None:
    """List every value in the gateway document (secrets masked)."""
    path, snapshot = _load(ctx)
    data = mask_document(snapshot.config)
    if json_output:
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(f"TOML file: {path if snapshot.exists else '(none)'}")
    rows = [[key, format_value(value)] for key, value in flatten_document(data)]
    if not rows:
        click.echo("  (no settings)")
        return
    get_runtime(ctx).console.print(build_table("clawgate.toml", ["Key", "Value"], rows))


def _parse_value(raw: str):
    """Parse a string value into the appropriate Python type."""
    if raw.lower() == "true":
        return True
    if raw.lower() == "false":
        return False
    try:
        val = int(raw)
        return val
    except ValueError:
        pass
    try:
        val = float(raw)
        if not math.isfinite(val):
            raise click.ClickException(f"Invalid float value: {raw}")
        return val
    except ValueError:
        pass
    return raw
