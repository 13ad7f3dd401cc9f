"""Onboarding command — the interactive setup wizard."""

from __future__ import annotations

from typing import Optional

import click
import structlog

from clawgate.cli.app import async_cmd, get_runtime
from clawgate.errors import ConfigValidationError, StorageError, WizardCancelledError
from clawgate.wizard.onboarding import OnboardOptions, run_onboarding_wizard
from clawgate.wizard.prompts import ConsolePrompter
from clawgate.wizard.types import (
    AuthMode,
    BindMode,
    GatewayOverride,
    TailscaleMode,
    WizardFlow,
)

logger = structlog.get_logger(__name__)


def _choice(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def _parse_optional(enum_cls, value: Optional[str]):
    return enum_cls(value) if value is not None else None


@click.command("onboard")
@click.option(
    "--flow",
    type=_choice(WizardFlow),
    default=WizardFlow.QUICKSTART.value,
    show_default=True,
    help="quickstart keeps current settings; advanced asks for the workspace",
)
@click.option("--workspace", default=None, help="Agent workspace directory")
@click.option("--provider", default=None, help="Model provider (anthropic, openai, openrouter)")
@click.option("--base-url", default=None, help="Provider base URL")
@click.option("--api-key", default=None, help="Provider API key (prefer the environment)")
@click.option("--skip-auth", is_flag=True, help="Leave model-provider settings unchanged")
@click.option("--telegram-user-id", default=None, help="Telegram user ID to allowlist")
@click.option("--telegram-bot-token", default=None, help="Telegram bot token (prefer TELEGRAM_BOT_TOKEN)")
@click.option("--gateway-port", type=click.IntRange(1, 65535), default=None)
@click.option("--gateway-bind", type=_choice(BindMode), default=None)
@click.option("--custom-bind-host", default=None, help="IPv4 address for --gateway-bind custom")
@click.option("--gateway-auth", type=_choice(AuthMode), default=None)
@click.option("--gateway-token", default=None)
@click.option("--gateway-password", default=None)
@click.option("--tailscale", type=_choice(TailscaleMode), default=None)
@click.option("--tailscale-reset-on-exit/--no-tailscale-reset-on-exit", default=None)
@click.pass_context
@async_cmd
async def onboard_cmd(
    ctx: click.Context,
    flow: str,
    workspace: Optional[str],
    provider: Optional[str],
    base_url: Optional[str],
    api_key: Optional[str],
    skip_auth: bool,
    telegram_user_id: Optional[str],
    telegram_bot_token: Optional[str],
    gateway_port: Optional[int],
    gateway_bind: Optional[str],
    custom_bind_host: Optional[str],
    gateway_auth: Optional[str],
    gateway_token: Optional[str],
    gateway_password: Optional[str],
    tailscale: Optional[str],
    tailscale_reset_on_exit: Optional[bool],
) -> None:
    """Set up the gateway: provider, Telegram channel and gateway exposure."""
    runtime = get_runtime(ctx)
    opts = OnboardOptions(
        flow=WizardFlow(flow),
        workspace=workspace,
        api_key=api_key,
        skip_auth=skip_auth,
        provider=provider,
        base_url=base_url,
        telegram_user_id=telegram_user_id,
        telegram_bot_token=telegram_bot_token,
        gateway=GatewayOverride(
            port=gateway_port,
            bind=_parse_optional(BindMode, gateway_bind),
            custom_bind_host=custom_bind_host,
            auth_mode=_parse_optional(AuthMode, gateway_auth),
            token=gateway_token,
            password=gateway_password,
            tailscale_mode=_parse_optional(TailscaleMode, tailscale),
            tailscale_reset_on_exit=tailscale_reset_on_exit,
        ),
    )
    prompter = ctx.find_root().obj.get("prompter") or ConsolePrompter(runtime.console)

    try:
        await run_onboarding_wizard(opts, runtime, prompter)
    except ConfigValidationError as e:
        logger.error("onboarding.aborted", reason="invalid_config", path=str(e.path))
        ctx.exit(1)
    except StorageError as e:
        logger.error("onboarding.aborted", reason="storage", path=str(e.path))
        raise click.ClickException(str(e)) from None
    except WizardCancelledError:
        logger.info("onboarding.cancelled")
        raise click.Abort() from None
