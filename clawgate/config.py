# clawgate/config.py
"""
Runtime settings for clawgate.

These are the knobs that live outside the persisted gateway document: where
the document and state directory are, which port override applies, and which
secrets may be supplied through the environment instead of a prompt. Values
are loaded from environment variables (optionally via a ``.env`` file in the
working directory) and validated with Pydantic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)

DEFAULT_STATE_DIR = Path("~/.clawgate")
CONFIG_FILENAME = "clawgate.toml"
DEFAULT_GATEWAY_PORT = 18789

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _clean_secret(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    token = value.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in {"'", '"'}:
        token = token[1:-1].strip()
    return token or None


class OnboardSettings(BaseSettings):
    """Environment-driven settings for an onboarding run."""

    state_dir: Path = Field(DEFAULT_STATE_DIR, alias="CLAWGATE_STATE_DIR")
    config_path: Optional[Path] = Field(None, alias="CLAWGATE_CONFIG_PATH")
    workspace: Optional[Path] = Field(None, alias="CLAWGATE_WORKSPACE")
    gateway_port: Optional[int] = Field(None, alias="CLAWGATE_GATEWAY_PORT")
    provider: str = Field("anthropic", alias="CLAWGATE_PROVIDER")
    provider_base_url: Optional[str] = Field(None, alias="CLAWGATE_PROVIDER_BASE_URL")
    provider_api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("CLAWGATE_PROVIDER_API_KEY", "ANTHROPIC_API_KEY"),
    )
    telegram_bot_token: Optional[str] = Field(None, alias="TELEGRAM_BOT_TOKEN")
    log_level: str = Field("WARNING", alias="CLAWGATE_LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
        "env_ignore_empty": True,
    }

    @model_validator(mode="after")
    def normalize(self) -> "OnboardSettings":
        self.state_dir = self.state_dir.expanduser()
        if self.config_path is None:
            self.config_path = self.state_dir / CONFIG_FILENAME
        self.config_path = self.config_path.expanduser()
        if self.workspace is not None:
            self.workspace = self.workspace.expanduser()

        # Non-positive ports mean "no override"; the document or default applies.
        if self.gateway_port is not None and not 0 < self.gateway_port <= 65535:
            logger.warning("settings.gateway_port_ignored", value=self.gateway_port)
            self.gateway_port = None

        self.provider = self.provider.strip().lower() or "anthropic"
        self.provider_api_key = _clean_secret(self.provider_api_key)
        self.telegram_bot_token = _clean_secret(self.telegram_bot_token)
        if isinstance(self.provider_base_url, str):
            self.provider_base_url = self.provider_base_url.strip().rstrip("/") or None

        level = self.log_level.strip().upper()
        self.log_level = level if level in _VALID_LOG_LEVELS else "WARNING"
        return self

    @property
    def default_workspace(self) -> Path:
        return self.state_dir / "workspace"

    @property
    def sessions_dir(self) -> Path:
        return self.state_dir / "agents" / "main" / "sessions"

    def __repr__(self) -> str:
        return (
            f"OnboardSettings(config_path={self.config_path}, "
            f"state_dir={self.state_dir}, provider={self.provider})"
        )
