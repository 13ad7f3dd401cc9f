"""
Model-provider wiring.

Owns ``models.providers`` and ``agents.defaults.model``. Existing provider
entries are never dropped; only missing fields are filled, except for an API
key the operator just entered, which replaces the stored one. Skipping auth
still seeds a keyless entry for a provider that has none.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from clawgate.config_file import Document, get_section

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderPreset:
    api: str
    base_url: str
    default_model: dict[str, Any]


def _model(model_id: str, name: str, *, context_window: int, max_tokens: int) -> dict[str, Any]:
    return {
        "id": model_id,
        "name": name,
        "reasoning": False,
        "input": ["text"],
        "cost": {"input": 0, "output": 0, "cacheRead": 0, "cacheWrite": 0},
        "contextWindow": context_window,
        "maxTokens": max_tokens,
    }


PROVIDER_PRESETS: dict[str, ProviderPreset] = {
    "anthropic": ProviderPreset(
        api="anthropic-messages",
        base_url="https://api.anthropic.com",
        default_model=_model(
            "claude-opus-4-5-20251101",
            "Claude Opus 4.5",
            context_window=200000,
            max_tokens=8192,
        ),
    ),
    "openai": ProviderPreset(
        api="openai-completions",
        base_url="https://api.openai.com/v1",
        default_model=_model("gpt-4o", "GPT-4o", context_window=128000, max_tokens=16384),
    ),
    "openrouter": ProviderPreset(
        api="openai-completions",
        base_url="https://openrouter.ai/api/v1",
        default_model=_model(
            "anthropic/claude-sonnet-4.5",
            "Claude Sonnet 4.5 via OpenRouter",
            context_window=200000,
            max_tokens=8192,
        ),
    ),
}

DEFAULT_PROVIDER = "anthropic"


class AuthChoiceKind(str, Enum):
    SKIP = "skip"
    API_KEY = "apiKey"


@dataclass(frozen=True)
class AuthChoice:
    kind: AuthChoiceKind
    provider: str = DEFAULT_PROVIDER
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    @classmethod
    def skip(
        cls,
        provider: str = DEFAULT_PROVIDER,
        *,
        base_url: Optional[str] = None,
    ) -> "AuthChoice":
        return cls(kind=AuthChoiceKind.SKIP, provider=provider, base_url=base_url)

    @classmethod
    def with_api_key(
        cls,
        api_key: str,
        *,
        provider: str = DEFAULT_PROVIDER,
        base_url: Optional[str] = None,
    ) -> "AuthChoice":
        return cls(
            kind=AuthChoiceKind.API_KEY,
            provider=provider,
            api_key=api_key.strip(),
            base_url=base_url,
        )

    def __repr__(self) -> str:
        return f"AuthChoice(kind={self.kind.value}, provider={self.provider!r})"


def _seed_provider(existing: Document, choice: AuthChoice) -> Document:
    preset = PROVIDER_PRESETS.get(choice.provider)
    entry = copy.deepcopy(existing)
    if not entry.get("api") and preset is not None:
        entry["api"] = preset.api
    if not entry.get("baseUrl"):
        base_url = choice.base_url or (preset.base_url if preset is not None else None)
        if base_url:
            entry["baseUrl"] = base_url
    if choice.api_key:
        entry["apiKey"] = choice.api_key
    models = entry.get("models")
    if not isinstance(models, list) or not models:
        entry["models"] = [copy.deepcopy(preset.default_model)] if preset is not None else []
    return entry


def _first_model_ref(config: Document, preferred: str) -> Optional[str]:
    providers = get_section(config, "models", "providers")
    ordered = [preferred] + [key for key in providers if key != preferred]
    for key in ordered:
        models = get_section(providers, key).get("models")
        if isinstance(models, list):
            for model in models:
                if isinstance(model, dict) and model.get("id"):
                    return f"{key}/{model['id']}"
    return None


def apply_auth_choice(
    config: Document,
    choice: AuthChoice,
    *,
    set_default_model: bool = False,
) -> Document:
    next_config = copy.deepcopy(config)
    providers = get_section(next_config, "models", "providers")

    if choice.kind is AuthChoiceKind.API_KEY or choice.provider not in providers:
        # Skipping auth still seeds a keyless entry for an absent provider.
        entry = _seed_provider(get_section(providers, choice.provider), choice)
        models = get_section(next_config, "models")
        next_config["models"] = {**models, "providers": {**providers, choice.provider: entry}}
        logger.info(
            "auth_choice.provider_configured",
            provider=choice.provider,
            kind=choice.kind.value,
            model_count=len(entry.get("models", [])),
        )

    if set_default_model:
        defaults = get_section(next_config, "agents", "defaults")
        model = get_section(defaults, "model")
        if not model.get("primary"):
            primary = _first_model_ref(next_config, choice.provider)
            if primary is not None:
                agents = get_section(next_config, "agents")
                next_config["agents"] = {
                    **agents,
                    "defaults": {**defaults, "model": {**model, "primary": primary}},
                }
                logger.info("auth_choice.default_model_set", model=primary)

    return next_config
