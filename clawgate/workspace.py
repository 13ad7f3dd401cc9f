"""Agent workspace bootstrap.

Creates the workspace directory, the main agent's sessions directory and the
bootstrap files the agent reads on its first turn. Existing files are never
overwritten.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from clawgate.errors import StorageError

logger = structlog.get_logger(__name__)

BOOTSTRAP_FILES: dict[str, str] = {
    "AGENTS.md": (
        "# Agent workspace\n\n"
        "This directory is the agent's home. Files placed here are available to\n"
        "the agent across sessions.\n"
    ),
    "USER.md": (
        "# About the user\n\n"
        "Fill in how you want to be addressed and anything the agent should\n"
        "always keep in mind.\n"
    ),
}


def resolve_user_path(raw: str | Path) -> Path:
    """Expand ``~`` and make *raw* absolute against the current directory."""
    return Path(str(raw).strip()).expanduser().resolve()


def ensure_workspace_and_sessions(
    workspace_dir: Path,
    sessions_dir: Path,
    *,
    skip_bootstrap: bool = False,
) -> list[Path]:
    """Create the workspace and sessions directories; return bootstrap files written."""
    written: list[Path] = []
    for directory in (workspace_dir, sessions_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(directory, e) from e

    if skip_bootstrap:
        logger.info("workspace.bootstrap_skipped", workspace=str(workspace_dir))
        return written

    for name, content in BOOTSTRAP_FILES.items():
        target = workspace_dir / name
        if target.exists():
            continue
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(target, e) from e
        written.append(target)

    logger.info(
        "workspace.ready",
        workspace=str(workspace_dir),
        sessions=str(sessions_dir),
        bootstrap_written=len(written),
    )
    return written
