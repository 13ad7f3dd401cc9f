"""
Channel enablement — one chat platform at a time.

Owns the ``channels.<name>`` subtree and, through the plugin registry, the
channel's entry in ``plugins``. Running ``enable_channel`` twice with the same
patch yields the same document as running it once.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import structlog

from clawgate.config_file import Document, get_section
from clawgate.plugins import enable_plugin_in_config
from clawgate.wizard.types import DmPolicy

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChannelPatch:
    """Settings for one channel. ``bot_token`` is only used when none is configured."""

    name: str
    allow_from: Optional[str] = None
    bot_token: Optional[str] = None
    dm_policy: DmPolicy = DmPolicy.ALLOWLIST

    def __repr__(self) -> str:
        return (
            f"ChannelPatch(name={self.name!r}, allow_from={self.allow_from!r}, "
            f"dm_policy={self.dm_policy.value})"
        )


def normalize_allow_from(entries: Iterable[Any]) -> list[str]:
    """Trim every entry, drop blanks and later duplicates; keep order."""
    result: list[str] = []
    for entry in entries:
        value = str(entry).strip()
        if value and value not in result:
            result.append(value)
    return result


def merge_allow_from(existing: Any, identifier: Optional[str]) -> list[str]:
    """Append *identifier* to the allowlist unless it is already present."""
    entries = normalize_allow_from(existing if isinstance(existing, list) else [])
    candidate = (identifier or "").strip()
    if candidate and candidate not in entries:
        entries.append(candidate)
    return entries


def enable_channel(config: Document, patch: ChannelPatch) -> Document:
    """Return a new document with *patch.name* enabled and its plugin active."""
    current = get_section(config, "channels", patch.name)
    channel = copy.deepcopy(current)
    channel["enabled"] = True
    channel["dmPolicy"] = patch.dm_policy.value
    channel["allowFrom"] = merge_allow_from(current.get("allowFrom"), patch.allow_from)
    if not current.get("botToken") and patch.bot_token:
        channel["botToken"] = patch.bot_token.strip()

    next_config = copy.deepcopy(config)
    channels = get_section(next_config, "channels")
    next_config["channels"] = {**channels, patch.name: channel}

    result = enable_plugin_in_config(next_config, patch.name)
    logger.info(
        "channels.enabled",
        channel=patch.name,
        allow_from_count=len(channel["allowFrom"]),
        plugin_already_enabled=result.already_enabled,
    )
    return result.config
