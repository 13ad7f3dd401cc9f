"""
Gateway settings for onboarding.

Resolution is a pure merge of the quickstart defaults and any explicit
override, followed by the exposure safety rules:

- Tailscale serve/funnel publishes the loopback listener, so bind is forced
  to loopback.
- Funnel is reachable from the public internet and requires password auth.
- ``custom`` bind without a host cannot be honoured and falls back to loopback.
- Token auth without a token gets a freshly generated one.

The gateway process consumes the returned ``GatewaySettings``; nothing here
opens a socket.
"""

from __future__ import annotations

import copy
import ipaddress
import secrets
from dataclasses import dataclass, replace
from typing import Callable, Optional

import structlog

from clawgate.config_file import Document, get_section
from clawgate.wizard.prompts import WizardPrompter, required
from clawgate.wizard.summary import format_bind, format_tailscale
from clawgate.wizard.types import (
    AuthMode,
    BindMode,
    GatewayOverride,
    GatewaySettings,
    QuickstartGatewayDefaults,
    TailscaleMode,
)

logger = structlog.get_logger(__name__)


def random_token() -> str:
    return secrets.token_hex(24)


@dataclass(frozen=True)
class GatewayConfigResult:
    next_config: Document
    settings: GatewaySettings


def _pick(override_value, default_value):
    return default_value if override_value is None else override_value


def resolve_gateway_settings(
    defaults: QuickstartGatewayDefaults,
    override: Optional[GatewayOverride] = None,
    *,
    token_factory: Callable[[], str] = random_token,
) -> GatewaySettings:
    override = override or GatewayOverride()

    port = override.port if override.port is not None and 0 < override.port <= 65535 else defaults.port
    bind = _pick(override.bind, defaults.bind)
    custom_bind_host = _pick(override.custom_bind_host, defaults.custom_bind_host)
    auth_mode = _pick(override.auth_mode, defaults.auth_mode)
    token = _pick(override.token, defaults.token)
    password = _pick(override.password, defaults.password)
    tailscale_mode = _pick(override.tailscale_mode, defaults.tailscale_mode)
    reset_on_exit = _pick(override.tailscale_reset_on_exit, defaults.tailscale_reset_on_exit)

    if tailscale_mode is not TailscaleMode.OFF and bind is not BindMode.LOOPBACK:
        logger.info("gateway.bind_forced_loopback", tailscale=tailscale_mode.value, bind=bind.value)
        bind = BindMode.LOOPBACK
    if tailscale_mode is TailscaleMode.FUNNEL and auth_mode is not AuthMode.PASSWORD:
        logger.info("gateway.auth_forced_password", tailscale=tailscale_mode.value)
        auth_mode = AuthMode.PASSWORD

    if bind is BindMode.CUSTOM:
        custom_bind_host = (custom_bind_host or "").strip() or None
        if custom_bind_host is None:
            logger.warning("gateway.custom_bind_without_host")
            bind = BindMode.LOOPBACK
    else:
        custom_bind_host = None

    if auth_mode is AuthMode.TOKEN and not token:
        token = token_factory()

    return GatewaySettings(
        port=port,
        bind=bind,
        auth_mode=auth_mode,
        tailscale_mode=tailscale_mode,
        tailscale_reset_on_exit=bool(reset_on_exit),
        custom_bind_host=custom_bind_host,
        token=token or None,
        password=password or None,
    )


def apply_gateway_settings(config: Document, settings: GatewaySettings) -> Document:
    """Fold *settings* into the ``gateway`` subtree of a new document."""
    gateway = copy.deepcopy(get_section(config, "gateway"))
    auth = get_section(gateway, "auth")
    tailscale = get_section(gateway, "tailscale")

    auth = {**auth, "mode": settings.auth_mode.value}
    if settings.auth_mode is AuthMode.TOKEN:
        auth["token"] = settings.token
    else:
        auth["password"] = settings.password

    gateway.update(
        {
            "mode": "local",
            "port": settings.port,
            "bind": settings.bind.value,
            "auth": auth,
            "tailscale": {
                **tailscale,
                "mode": settings.tailscale_mode.value,
                "resetOnExit": settings.tailscale_reset_on_exit,
            },
        }
    )
    if settings.bind is BindMode.CUSTOM:
        gateway["customBindHost"] = settings.custom_bind_host
    else:
        gateway.pop("customBindHost", None)

    next_config = copy.deepcopy(config)
    next_config["gateway"] = gateway
    return next_config


def validate_ipv4(value: str) -> Optional[str]:
    """Prompt validator for a custom bind host."""
    try:
        ipaddress.IPv4Address(value.strip())
    except ValueError:
        return "Enter a valid IPv4 address (e.g. 192.168.1.20)"
    return None


async def configure_gateway_for_onboarding(
    *,
    base_config: Document,
    next_config: Document,
    defaults: QuickstartGatewayDefaults,
    prompter: WizardPrompter,
    override: Optional[GatewayOverride] = None,
    token_factory: Callable[[], str] = random_token,
) -> GatewayConfigResult:
    """Resolve gateway settings, prompting only for values the rules make mandatory."""
    override = override or GatewayOverride()
    settings = resolve_gateway_settings(defaults, override, token_factory=token_factory)

    requested_bind = _pick(override.bind, defaults.bind)
    if (
        requested_bind is BindMode.CUSTOM
        and settings.tailscale_mode is TailscaleMode.OFF
        and settings.bind is not BindMode.CUSTOM
    ):
        host = await prompter.text(
            "Custom bind IP address",
            placeholder="192.168.1.20",
            validate=validate_ipv4,
        )
        override = replace(override, bind=BindMode.CUSTOM, custom_bind_host=host.strip())
        settings = resolve_gateway_settings(defaults, override, token_factory=token_factory)

    if settings.auth_mode is AuthMode.PASSWORD and not settings.password:
        password = await prompter.text("Gateway password", validate=required, secret=True)
        settings = replace(settings, password=password.strip())

    if settings.tailscale_mode is not TailscaleMode.OFF and requested_bind is not BindMode.LOOPBACK:
        await prompter.note(
            f"Tailscale {format_tailscale(settings.tailscale_mode)} publishes the loopback listener; "
            f"gateway bind switched from {format_bind(requested_bind)} to {format_bind(settings.bind)}.",
            "Gateway",
        )

    requested_auth = _pick(override.auth_mode, defaults.auth_mode)
    if settings.tailscale_mode is TailscaleMode.FUNNEL and requested_auth is not AuthMode.PASSWORD:
        await prompter.note(
            "Tailscale Funnel is public; gateway auth switched to password.",
            "Gateway",
        )

    had_gateway = bool(get_section(base_config, "gateway"))
    logger.info(
        "gateway.configured",
        port=settings.port,
        bind=settings.bind.value,
        auth_mode=settings.auth_mode.value,
        tailscale=settings.tailscale_mode.value,
        had_existing=had_gateway,
    )
    return GatewayConfigResult(
        next_config=apply_gateway_settings(next_config, settings),
        settings=settings,
    )
