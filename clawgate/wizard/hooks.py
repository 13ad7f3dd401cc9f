"""Built-in internal hooks enabled during onboarding."""

from __future__ import annotations

import copy

import structlog

from clawgate.config_file import Document, get_section
from clawgate.wizard.prompts import WizardPrompter

logger = structlog.get_logger(__name__)

SESSION_MEMORY_HOOK = "session-memory"


def enable_session_memory_hook(config: Document) -> tuple[Document, bool]:
    """Enable the session-memory hook unless the operator already configured it.

    Returns the new document and whether anything changed. An explicit entry,
    including ``enabled = false``, is left alone.
    """
    internal = get_section(config, "hooks", "internal")
    entries = get_section(internal, "entries")
    if SESSION_MEMORY_HOOK in entries:
        return copy.deepcopy(config), False

    next_config = copy.deepcopy(config)
    hooks = get_section(next_config, "hooks")
    internal = get_section(hooks, "internal")
    next_config["hooks"] = {
        **hooks,
        "internal": {
            **internal,
            "enabled": True,
            "entries": {**entries, SESSION_MEMORY_HOOK: {"enabled": True}},
        },
    }
    return next_config, True


async def setup_internal_hooks(config: Document, prompter: WizardPrompter) -> Document:
    next_config, changed = enable_session_memory_hook(config)
    if changed:
        logger.info("hooks.enabled", hook=SESSION_MEMORY_HOOK)
        await prompter.note(
            "Session memory enabled: context is saved when you send /new.",
            "Hooks",
        )
    return next_config
