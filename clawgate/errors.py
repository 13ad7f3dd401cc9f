"""Error taxonomy for onboarding runs.

Only the snapshot read and the final writes can fail; every merge stage is
total over well-formed input. None of these errors carry secret values.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConfigIssue:
    """One schema problem, addressed by dotted path."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ClawgateError(Exception):
    """Base class for errors that end an onboarding run."""


class ConfigValidationError(ClawgateError):
    """The persisted document exists but does not pass schema validation."""

    def __init__(self, path: Path, issues: list[ConfigIssue]) -> None:
        self.path = path
        self.issues = list(issues)
        super().__init__(f"Config at {path} is invalid ({len(self.issues)} issue(s))")


class StorageError(ClawgateError):
    """Reading or writing the config document (or workspace) failed."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        reason = getattr(cause, "strerror", None) or type(cause).__name__
        super().__init__(f"Failed to access {path}: {reason}")


class WizardCancelledError(ClawgateError):
    """The operator interrupted a prompt; nothing was written."""
