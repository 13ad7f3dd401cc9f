"""Wizard metadata stamp — which command and mode last wrote the document."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Optional

from clawgate import __version__
from clawgate.config_file import Document


def apply_wizard_metadata(
    config: Document,
    *,
    command: str,
    mode: str,
    now: Optional[datetime] = None,
) -> Document:
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    next_config = copy.deepcopy(config)
    next_config["wizard"] = {
        "command": command,
        "mode": mode,
        "timestamp": stamp.isoformat().replace("+00:00", "Z"),
        "version": __version__,
    }
    return next_config
