"""
Schema for the persisted gateway document.

The models only describe shape and types; enumerated modes (bind, auth mode,
Tailscale mode, DM policy) are plain strings here so that an unknown value is
normalized by the defaults resolver instead of failing the whole document.
Unknown keys are allowed everywhere and survive every merge.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clawgate.errors import ConfigIssue

ROOT_ISSUE_PATH = "<root>"


class _Section(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ModelCost(_Section):
    input: float = 0
    output: float = 0
    cache_read: float = Field(0, alias="cacheRead")
    cache_write: float = Field(0, alias="cacheWrite")


class ModelDefinition(_Section):
    id: str
    name: Optional[str] = None
    reasoning: bool = False
    input: list[str] = Field(default_factory=lambda: ["text"])
    cost: Optional[ModelCost] = None
    context_window: Optional[int] = Field(None, alias="contextWindow", gt=0)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0)


class ProviderConfig(_Section):
    api: Optional[str] = None
    base_url: Optional[str] = Field(None, alias="baseUrl")
    api_key: Optional[str] = Field(None, alias="apiKey")
    models: list[ModelDefinition] = Field(default_factory=list)


class ModelsConfig(_Section):
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)


class AgentModelConfig(_Section):
    primary: Optional[str] = None


class AgentDefaults(_Section):
    workspace: Optional[str] = None
    skip_bootstrap: Optional[bool] = Field(None, alias="skipBootstrap")
    model: Optional[AgentModelConfig] = None


class AgentsConfig(_Section):
    defaults: Optional[AgentDefaults] = None


class GatewayAuthConfig(_Section):
    mode: Optional[str] = None
    token: Optional[str] = None
    password: Optional[str] = None


class TailscaleConfig(_Section):
    mode: Optional[str] = None
    reset_on_exit: Optional[bool] = Field(None, alias="resetOnExit")


class GatewayConfig(_Section):
    mode: Optional[str] = None
    port: Optional[int] = Field(None, ge=1, le=65535)
    bind: Optional[str] = None
    custom_bind_host: Optional[str] = Field(None, alias="customBindHost")
    auth: Optional[GatewayAuthConfig] = None
    tailscale: Optional[TailscaleConfig] = None


class ChannelConfig(_Section):
    enabled: Optional[bool] = None
    bot_token: Optional[str] = Field(None, alias="botToken")
    dm_policy: Optional[str] = Field(None, alias="dmPolicy")
    allow_from: list[Union[str, int]] = Field(default_factory=list, alias="allowFrom")


class HookEntry(_Section):
    enabled: Optional[bool] = None


class InternalHooksConfig(_Section):
    enabled: Optional[bool] = None
    entries: dict[str, HookEntry] = Field(default_factory=dict)


class HooksConfig(_Section):
    internal: Optional[InternalHooksConfig] = None


class WizardMetadata(_Section):
    command: Optional[str] = None
    mode: Optional[str] = None
    timestamp: Optional[str] = None
    version: Optional[str] = None


class ClawgateDocument(_Section):
    """Root of ``clawgate.toml``."""

    agents: Optional[AgentsConfig] = None
    gateway: Optional[GatewayConfig] = None
    models: Optional[ModelsConfig] = None
    channels: dict[str, ChannelConfig] = Field(default_factory=dict)
    plugins: list[str] = Field(default_factory=list)
    hooks: Optional[HooksConfig] = None
    wizard: Optional[WizardMetadata] = None


def _issue_path(data: Any, loc: tuple[Any, ...], error_type: str) -> str:
    """Dotted path for an error location.

    Union validation appends member tags (``str``, ``int``) to the location;
    those are cut by stopping at the deepest key that exists in the data.
    Missing-field errors keep the missing key.
    """
    parts: list[str] = []
    current = data
    for part in loc:
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and isinstance(part, int) and 0 <= part < len(current):
            current = current[part]
        else:
            if error_type == "missing":
                parts.append(str(part))
            break
        parts.append(str(part))
    return ".".join(parts) if parts else ROOT_ISSUE_PATH


def validate_document(data: Any) -> list[ConfigIssue]:
    """Validate a parsed document; return one issue per failing field."""
    if not isinstance(data, dict):
        return [ConfigIssue(path=ROOT_ISSUE_PATH, message="expected a table")]
    try:
        ClawgateDocument.model_validate(data)
    except ValidationError as exc:
        issues: list[ConfigIssue] = []
        seen: set[str] = set()
        for err in exc.errors(include_url=False, include_input=False):
            path = _issue_path(data, tuple(err["loc"]), err["type"])
            # One issue per field, even when several union members failed.
            if path in seen:
                continue
            seen.add(path)
            issues.append(ConfigIssue(path=path, message=err["msg"]))
        return issues
    return []
