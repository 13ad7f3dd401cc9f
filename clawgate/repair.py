"""
Document repair used by ``clawgate doctor``.

Two passes. ``drop_invalid_keys`` removes whatever the schema rejects, one
issue at a time, until the document validates. ``repair_document`` then
normalizes values the schema accepts but the gateway would misread. Both
return new documents; ``repair_document`` on its own output finds nothing.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Callable

import structlog

from clawgate.config_file import Document, delete_value, get_section
from clawgate.errors import ConfigIssue
from clawgate.plugins import enable_plugin_in_config, enabled_plugins
from clawgate.schema import ROOT_ISSUE_PATH, validate_document
from clawgate.wizard.channels import normalize_allow_from
from clawgate.wizard.defaults import resolve_auth_mode
from clawgate.wizard.gateway_config import random_token
from clawgate.wizard.types import AuthMode, BindMode, DmPolicy, TailscaleMode

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Finding:
    path: str
    message: str
    fixable: bool = True

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def drop_invalid_keys(config: Document) -> tuple[Document, list[ConfigIssue]]:
    """Delete schema-invalid values until the document validates.

    Returns the cleaned document and the issues that were removed. A
    missing-field issue removes the table that lacks the field.
    """
    data = copy.deepcopy(config)
    removed: list[ConfigIssue] = []
    # Every round deletes one key, so this is bounded by the document size.
    while True:
        issues = validate_document(data)
        if not issues:
            return data, removed
        issue = issues[0]
        if issue.path == ROOT_ISSUE_PATH:
            return data, removed
        try:
            data = delete_value(data, issue.path)
        except KeyError:
            parent = issue.path.rpartition(".")[0]
            if not parent:
                return data, removed
            data = delete_value(data, parent)
        removed.append(issue)
        logger.info("repair.dropped_key", path=issue.path)


def _fix_gateway(
    config: Document,
    findings: list[Finding],
    token_factory: Callable[[], str],
) -> Document:
    gateway = get_section(config, "gateway")
    if not gateway:
        return config
    gateway = copy.deepcopy(gateway)

    bind = gateway.get("bind")
    if bind is not None and BindMode.parse(bind, None) is None:
        findings.append(Finding("gateway.bind", f"unknown bind mode {bind!r}, using loopback"))
        gateway["bind"] = BindMode.LOOPBACK.value
    if gateway.get("bind") == BindMode.CUSTOM.value and not str(gateway.get("customBindHost") or "").strip():
        findings.append(Finding("gateway.bind", "custom bind without customBindHost, using loopback"))
        gateway["bind"] = BindMode.LOOPBACK.value
    if "customBindHost" in gateway and gateway.get("bind") != BindMode.CUSTOM.value:
        findings.append(Finding("gateway.customBindHost", "only used with custom bind, removed"))
        gateway.pop("customBindHost")

    tailscale = get_section(gateway, "tailscale")
    ts_mode = tailscale.get("mode")
    if ts_mode is not None and TailscaleMode.parse(ts_mode, None) is None:
        findings.append(Finding("gateway.tailscale.mode", f"unknown Tailscale mode {ts_mode!r}, using off"))
        gateway["tailscale"] = {**tailscale, "mode": TailscaleMode.OFF.value}

    auth = get_section(gateway, "auth")
    if auth:
        auth = dict(auth)
        mode = auth.get("mode")
        if mode is not None and AuthMode.from_explicit(mode) is None:
            inferred = resolve_auth_mode({k: v for k, v in auth.items() if k != "mode"})
            findings.append(
                Finding("gateway.auth.mode", f"unknown auth mode {mode!r}, using {inferred.value}")
            )
            auth["mode"] = inferred.value
        if resolve_auth_mode(auth) is AuthMode.TOKEN and not auth.get("token"):
            findings.append(Finding("gateway.auth.token", "token auth without a token, generated one"))
            auth["token"] = token_factory()
        gateway["auth"] = auth

    next_config = copy.deepcopy(config)
    next_config["gateway"] = gateway
    return next_config


def _fix_channels(config: Document, findings: list[Finding]) -> Document:
    next_config = copy.deepcopy(config)
    channels = get_section(next_config, "channels")
    for name, channel in channels.items():
        if not isinstance(channel, dict):
            continue
        policy = channel.get("dmPolicy")
        if policy is not None and DmPolicy.parse(policy, None) is None:
            findings.append(
                Finding(f"channels.{name}.dmPolicy", f"unknown DM policy {policy!r}, using allowlist")
            )
            channel["dmPolicy"] = DmPolicy.ALLOWLIST.value
        allow_from = channel.get("allowFrom")
        if isinstance(allow_from, list):
            normalized = normalize_allow_from(allow_from)
            if normalized != allow_from:
                findings.append(Finding(f"channels.{name}.allowFrom", "entries normalized and de-duplicated"))
                channel["allowFrom"] = normalized
    return next_config


def _fix_plugins(config: Document, findings: list[Finding]) -> Document:
    next_config = copy.deepcopy(config)
    plugins = enabled_plugins(next_config)
    if "plugins" in next_config and plugins != next_config.get("plugins"):
        findings.append(Finding("plugins", "entries trimmed and de-duplicated"))
        next_config["plugins"] = plugins
    for name, channel in get_section(next_config, "channels").items():
        if isinstance(channel, dict) and channel.get("enabled") is True and name not in plugins:
            findings.append(Finding("plugins", f"channel {name!r} is enabled but its plugin is not"))
            next_config = enable_plugin_in_config(next_config, name).config
            plugins = enabled_plugins(next_config)
    return next_config


def find_unfixable(config: Document) -> list[Finding]:
    """Problems doctor can report but only onboarding can resolve."""
    findings: list[Finding] = []
    auth = get_section(config, "gateway", "auth")
    if auth and resolve_auth_mode(auth) is AuthMode.PASSWORD and not auth.get("password"):
        findings.append(
            Finding("gateway.auth.password", "password auth without a password", fixable=False)
        )
    return findings


def repair_document(
    config: Document,
    *,
    token_factory: Callable[[], str] = random_token,
) -> tuple[Document, list[Finding]]:
    """Normalize a schema-valid document; return it with what was changed."""
    findings: list[Finding] = []
    next_config = _fix_gateway(config, findings, token_factory)
    next_config = _fix_channels(next_config, findings)
    next_config = _fix_plugins(next_config, findings)
    return next_config, findings
