"""CLI application — Click-based command hierarchy for clawgate.

The main CLI group and global flags. Subcommand modules register
themselves by importing and adding to the group.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any

import click
from pydantic import ValidationError

from clawgate.cli.formatters import get_console
from clawgate.config import OnboardSettings
from clawgate.main import configure_logging
from clawgate.runtime import RuntimeEnv


def async_cmd(func):
    """Decorator to run an async Click command via asyncio.run()."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(func(*args, **kwargs))

    return wrapper


def get_runtime(ctx: click.Context) -> RuntimeEnv:
    """The RuntimeEnv built by the group callback (or injected through ``obj``)."""
    return ctx.find_root().obj["runtime"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, no_color: bool) -> None:
    """clawgate - onboarding and configuration for the agent gateway."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["no_color"] = no_color

    runtime = ctx.obj.get("runtime")
    if runtime is None:
        try:
            settings = OnboardSettings()
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise click.ClickException(f"Invalid environment settings: {fields}") from None
        runtime = RuntimeEnv(settings=settings, console=get_console(no_color=no_color))
        ctx.obj["runtime"] = runtime

    configure_logging("DEBUG" if verbose else runtime.settings.log_level)


# ---------------------------------------------------------------------------
# Register subcommand modules
# ---------------------------------------------------------------------------

def _register_subcommands() -> None:
    """Import and register all subcommand groups/commands."""
    from clawgate.cli.config_cmd import config_group
    from clawgate.cli.doctor import doctor_cmd
    from clawgate.cli.onboard_cmd import onboard_cmd

    cli.add_command(onboard_cmd)
    cli.add_command(config_group)
    cli.add_command(doctor_cmd)


_register_subcommands()
