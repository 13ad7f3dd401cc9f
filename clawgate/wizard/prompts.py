"""
Prompt surface for the onboarding wizard.

The wizard only talks to a ``WizardPrompter``. ``ConsolePrompter`` renders
with rich and reads input on a worker thread so the event loop never blocks.
``text`` keeps asking until the validator accepts the answer; an interrupted
prompt raises ``WizardCancelledError``.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.markup import escape as markup_escape
from rich.panel import Panel
from rich.prompt import Prompt

from clawgate.errors import WizardCancelledError

Validator = Callable[[str], Optional[str]]


class WizardPrompter(Protocol):
    async def intro(self, text: str) -> None: ...

    async def note(self, text: str, title: Optional[str] = None) -> None: ...

    async def text(
        self,
        message: str,
        *,
        placeholder: Optional[str] = None,
        initial_value: Optional[str] = None,
        validate: Optional[Validator] = None,
        secret: bool = False,
    ) -> str: ...

    async def outro(self, text: str) -> None: ...


def required(value: str) -> Optional[str]:
    return None if value.strip() else "Required"


class ConsolePrompter:
    """Interactive prompter on a rich console."""

    def __init__(self, console: Console) -> None:
        self._console = console

    async def intro(self, text: str) -> None:
        self._console.print()
        self._console.print(f"[bold cyan]{markup_escape(text)}[/bold cyan]")

    async def note(self, text: str, title: Optional[str] = None) -> None:
        self._console.print(
            Panel(markup_escape(text), title=title, border_style="cyan", expand=False)
        )

    async def text(
        self,
        message: str,
        *,
        placeholder: Optional[str] = None,
        initial_value: Optional[str] = None,
        validate: Optional[Validator] = None,
        secret: bool = False,
    ) -> str:
        label = markup_escape(message)
        if placeholder:
            label += f" [dim]({markup_escape(placeholder)})[/dim]"
        while True:
            try:
                value = await asyncio.to_thread(
                    Prompt.ask,
                    label,
                    console=self._console,
                    password=secret,
                    default=initial_value or "",
                    show_default=bool(initial_value) and not secret,
                )
            except (EOFError, KeyboardInterrupt):
                raise WizardCancelledError("prompt interrupted") from None
            value = value or ""
            error = validate(value) if validate is not None else None
            if error is None:
                return value
            self._console.print(f"  [red]{markup_escape(error)}[/red]")

    async def outro(self, text: str) -> None:
        self._console.print(f"[bold]{markup_escape(text)}[/bold]")
        self._console.print()
