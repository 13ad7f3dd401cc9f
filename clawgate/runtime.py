"""Explicit runtime environment for an onboarding run.

Built once by the entry point and passed down; nothing below the CLI reaches
for process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from rich.console import Console

from clawgate.config import OnboardSettings
from clawgate.wizard.gateway_config import random_token


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RuntimeEnv:
    settings: OnboardSettings
    console: Console = field(default_factory=Console)
    clock: Callable[[], datetime] = _utcnow
    token_factory: Callable[[], str] = random_token

    def log_config_updated(self) -> None:
        self.console.print(f"[green]Updated[/green] {self.settings.config_path}")
