"""
Shared fixtures for the clawgate test suite.

Provides isolated settings, a deterministic runtime (fixed clock and token
factory) and a scripted prompter so wizard tests can focus on behavior rather
than setup.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Optional

import pytest
from rich.console import Console

from clawgate.config import OnboardSettings
from clawgate.errors import WizardCancelledError
from clawgate.runtime import RuntimeEnv

FIXED_NOW = datetime(2026, 1, 15, 9, 30, 0, tzinfo=timezone.utc)
FIXED_TOKEN = "generated-gateway-token"

_ENV_VARS = (
    "CLAWGATE_STATE_DIR",
    "CLAWGATE_CONFIG_PATH",
    "CLAWGATE_WORKSPACE",
    "CLAWGATE_GATEWAY_PORT",
    "CLAWGATE_PROVIDER",
    "CLAWGATE_PROVIDER_BASE_URL",
    "CLAWGATE_PROVIDER_API_KEY",
    "ANTHROPIC_API_KEY",
    "TELEGRAM_BOT_TOKEN",
    "CLAWGATE_LOG_LEVEL",
)

CANCEL = object()


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------

class FakePrompter:
    """WizardPrompter that answers from a script and records what it was shown.

    Answers are consumed in order. The ``CANCEL`` sentinel makes that prompt
    behave like an interrupted console read.
    """

    def __init__(self, answers: Optional[list] = None) -> None:
        self.answers = list(answers or [])
        self.intros: list[str] = []
        self.notes: list[tuple[Optional[str], str]] = []
        self.prompts: list[str] = []
        self.outros: list[str] = []

    async def intro(self, text: str) -> None:
        self.intros.append(text)

    async def note(self, text: str, title: Optional[str] = None) -> None:
        self.notes.append((title, text))

    async def text(
        self,
        message: str,
        *,
        placeholder: Optional[str] = None,
        initial_value: Optional[str] = None,
        validate=None,
        secret: bool = False,
    ) -> str:
        self.prompts.append(message)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {message!r}")
        answer = self.answers.pop(0)
        if answer is CANCEL:
            raise WizardCancelledError("prompt interrupted")
        if validate is not None:
            error = validate(answer)
            assert error is None, f"scripted answer for {message!r} rejected: {error}"
        return answer

    async def outro(self, text: str) -> None:
        self.outros.append(text)

    def note_titles(self) -> list[Optional[str]]:
        return [title for title, _ in self.notes]


# ---------------------------------------------------------------------------
# Settings / runtime fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and any .env file out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def state_dir(tmp_path):
    return tmp_path / "state"


@pytest.fixture()
def settings(state_dir) -> OnboardSettings:
    return OnboardSettings(state_dir=state_dir)


@pytest.fixture()
def console() -> Console:
    return Console(file=io.StringIO(), width=120, no_color=True)


@pytest.fixture()
def runtime(settings, console) -> RuntimeEnv:
    return RuntimeEnv(
        settings=settings,
        console=console,
        clock=lambda: FIXED_NOW,
        token_factory=lambda: FIXED_TOKEN,
    )


@pytest.fixture()
def config_path(settings):
    return settings.config_path
