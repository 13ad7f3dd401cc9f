"""Quickstart gateway defaults, derived from whatever the prior document holds."""

from __future__ import annotations

from typing import Any, Optional

from clawgate.config import DEFAULT_GATEWAY_PORT
from clawgate.config_file import Document, get_section
from clawgate.wizard.types import (
    AuthMode,
    BindMode,
    QuickstartGatewayDefaults,
    TailscaleMode,
)


def _is_port(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_gateway_port(config: Document, override: Optional[int] = None) -> int:
    """Port precedence: positive override, then positive ``gateway.port``, then the default."""
    if override is not None and 0 < override <= 65535:
        return override
    port = get_section(config, "gateway").get("port")
    if _is_port(port) and 0 < port <= 65535:
        return port
    return DEFAULT_GATEWAY_PORT


def resolve_auth_mode(auth: Document) -> AuthMode:
    """An explicit mode beats the mode inferred from which secret is present."""
    explicit = AuthMode.from_explicit(auth.get("mode"))
    if explicit is not None:
        return explicit
    if auth.get("token"):
        return AuthMode.TOKEN
    if auth.get("password"):
        return AuthMode.PASSWORD
    return AuthMode.TOKEN


def resolve_quickstart_defaults(
    config: Document,
    *,
    port_override: Optional[int] = None,
) -> QuickstartGatewayDefaults:
    gateway = get_section(config, "gateway")
    auth = get_section(gateway, "auth")
    tailscale = get_section(gateway, "tailscale")

    has_existing = (
        _is_port(gateway.get("port"))
        or gateway.get("bind") is not None
        or auth.get("mode") is not None
        or auth.get("token") is not None
        or auth.get("password") is not None
        or gateway.get("customBindHost") is not None
        or tailscale.get("mode") is not None
    )

    return QuickstartGatewayDefaults(
        has_existing=has_existing,
        port=resolve_gateway_port(config, port_override),
        bind=BindMode.resolve(gateway.get("bind")),
        auth_mode=resolve_auth_mode(auth),
        tailscale_mode=TailscaleMode.resolve(tailscale.get("mode")),
        token=auth.get("token"),
        password=auth.get("password"),
        custom_bind_host=gateway.get("customBindHost"),
        tailscale_reset_on_exit=tailscale.get("resetOnExit") is True,
    )
