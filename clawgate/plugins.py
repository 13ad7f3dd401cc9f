"""Plugin activation in the gateway document.

``plugins`` is an ordered, duplicate-free list of plugin identifiers; the
gateway loads exactly those plugins at startup.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

import structlog

from clawgate.config_file import Document

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PluginEnableResult:
    config: Document
    enabled: bool
    already_enabled: bool = False


def enabled_plugins(config: Document) -> list[str]:
    """Current plugin ids, trimmed and de-duplicated in order."""
    raw: Any = config.get("plugins")
    if not isinstance(raw, list):
        return []
    plugins: list[str] = []
    for item in raw:
        plugin_id = str(item).strip()
        if plugin_id and plugin_id not in plugins:
            plugins.append(plugin_id)
    return plugins


def enable_plugin_in_config(config: Document, plugin_id: str) -> PluginEnableResult:
    """Add *plugin_id* to ``plugins``. Adding an already-enabled plugin is a no-op."""
    plugin_id = plugin_id.strip()
    if not plugin_id:
        return PluginEnableResult(config=copy.deepcopy(config), enabled=False)
    plugins = enabled_plugins(config)
    already = plugin_id in plugins
    if not already:
        plugins.append(plugin_id)
        logger.debug("plugins.enabled", plugin=plugin_id)
    next_config = copy.deepcopy(config)
    next_config["plugins"] = plugins
    return PluginEnableResult(config=next_config, enabled=True, already_enabled=already)
