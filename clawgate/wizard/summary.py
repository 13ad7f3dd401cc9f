"""Human-readable summaries shown by the wizard and the CLI."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from clawgate.config import DEFAULT_GATEWAY_PORT
from clawgate.config_file import Document, get_section
from clawgate.errors import ConfigIssue
from clawgate.plugins import enabled_plugins
from clawgate.wizard.types import (
    AuthMode,
    BindMode,
    GatewaySettings,
    QuickstartGatewayDefaults,
    TailscaleMode,
)

DOCS_URL = "https://docs.clawgate.dev/gateway/configuration"

SECRET_KEYS = frozenset({"token", "password", "apiKey", "botToken"})

_BIND_LABELS = {
    BindMode.LOOPBACK: "Loopback (127.0.0.1)",
    BindMode.LAN: "LAN",
    BindMode.AUTO: "Auto",
    BindMode.CUSTOM: "Custom IP",
    BindMode.TAILNET: "Tailnet (Tailscale IP)",
}
_AUTH_LABELS = {AuthMode.TOKEN: "Token (default)", AuthMode.PASSWORD: "Password"}
_TAILSCALE_LABELS = {
    TailscaleMode.OFF: "Off",
    TailscaleMode.SERVE: "Serve",
    TailscaleMode.FUNNEL: "Funnel",
}


def format_bind(value: BindMode) -> str:
    return _BIND_LABELS[value]


def format_auth(value: AuthMode) -> str:
    return _AUTH_LABELS[value]


def format_tailscale(value: TailscaleMode) -> str:
    return _TAILSCALE_LABELS[value]


def mask_secret(value: Any) -> str:
    text = str(value or "")
    if len(text) <= 8:
        return "*" * len(text)
    return f"{text[:4]}...{text[-2:]}"


def mask_document(value: Any) -> Any:
    """Copy of a document with every secret field masked."""
    if isinstance(value, dict):
        return {
            k: mask_secret(v) if k in SECRET_KEYS and isinstance(v, str) else mask_document(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [mask_document(v) for v in value]
    return value


def quickstart_lines(defaults: QuickstartGatewayDefaults) -> list[str]:
    if not defaults.has_existing:
        return [
            f"Gateway port: {DEFAULT_GATEWAY_PORT}",
            f"Gateway bind: {format_bind(BindMode.LOOPBACK)}",
            f"Gateway auth: {format_auth(AuthMode.TOKEN)}",
            f"Tailscale exposure: {format_tailscale(TailscaleMode.OFF)}",
            "Direct to chat channels.",
        ]
    lines = [
        "Keeping your current gateway settings:",
        f"Gateway port: {defaults.port}",
        f"Gateway bind: {format_bind(defaults.bind)}",
    ]
    if defaults.bind is BindMode.CUSTOM and defaults.custom_bind_host:
        lines.append(f"Gateway custom IP: {defaults.custom_bind_host}")
    lines.extend(
        [
            f"Gateway auth: {format_auth(defaults.auth_mode)}",
            f"Tailscale exposure: {format_tailscale(defaults.tailscale_mode)}",
            "Direct to chat channels.",
        ]
    )
    return lines


def settings_lines(settings: GatewaySettings) -> list[str]:
    lines = [
        f"Gateway port: {settings.port}",
        f"Gateway bind: {format_bind(settings.bind)}",
    ]
    if settings.custom_bind_host:
        lines.append(f"Gateway custom IP: {settings.custom_bind_host}")
    lines.append(f"Gateway auth: {format_auth(settings.auth_mode)}")
    if settings.auth_mode is AuthMode.TOKEN and settings.token:
        lines.append(f"Gateway token: {mask_secret(settings.token)}")
    lines.append(f"Tailscale exposure: {format_tailscale(settings.tailscale_mode)}")
    return lines


def summarize_existing_config(config: Document) -> str:
    """Short overview of a document, used when it turned out to be invalid."""
    if not config:
        return "No readable settings."
    lines: list[str] = []
    workspace = get_section(config, "agents", "defaults").get("workspace")
    if workspace:
        lines.append(f"workspace: {workspace}")
    model = get_section(config, "agents", "defaults", "model").get("primary")
    if model:
        lines.append(f"model: {model}")
    gateway = get_section(config, "gateway")
    for key in ("mode", "port", "bind"):
        if key in gateway:
            lines.append(f"gateway.{key}: {gateway[key]}")
    channels = get_section(config, "channels")
    if channels:
        lines.append(f"channels: {', '.join(sorted(channels))}")
    plugins = enabled_plugins(config)
    if plugins:
        lines.append(f"plugins: {', '.join(plugins)}")
    return "\n".join(lines) if lines else "No recognised settings."


def format_issues(issues: Iterable[ConfigIssue], *, docs_url: Optional[str] = DOCS_URL) -> str:
    lines = [f"- {issue.path}: {issue.message}" for issue in issues]
    if docs_url:
        lines.extend(["", f"Docs: {docs_url}"])
    return "\n".join(lines)
