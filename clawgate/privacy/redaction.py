"""
Secret Redaction — keeping credentials out of logs and error output.

Onboarding handles three kinds of secrets: model-provider API keys, chat
platform bot tokens and the gateway's own token/password. This module detects
them in free text and replaces them with category tokens, and masks any log
field whose name marks it as a secret.
"""

from __future__ import annotations

import re
from typing import Any

# Field names whose values are always masked, regardless of content.
SECRET_FIELD_NAMES = frozenset(
    {
        "token",
        "password",
        "api_key",
        "apikey",
        "bot_token",
        "bottoken",
        "auth_token",
        "secret",
    }
)

REDACTED_FIELD = "[REDACTED]"


# Order matters: the specific key formats must run before the generic hex rule.
SECRET_PATTERNS: list[tuple[str, re.Pattern, str]] = [
    (
        "telegram_bot_token",
        re.compile(r"(?<![0-9])\d{6,12}:[A-Za-z0-9_-]{30,}(?![A-Za-z0-9_-])"),
        "[REDACTED_BOT_TOKEN]",
    ),
    (
        "api_key",
        re.compile(r"\bsk-[A-Za-z0-9][A-Za-z0-9_-]{15,}"),
        "[REDACTED_API_KEY]",
    ),
    (
        "bearer",
        re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]{8,}"),
        "Bearer [REDACTED]",
    ),
    (
        "hex_secret",
        re.compile(r"\b[0-9a-fA-F]{32,}\b"),
        "[REDACTED_HEX]",
    ),
]


def is_secret_field(name: str) -> bool:
    """True for field names like ``token``, ``apiKey`` or ``bot-token``."""
    return name.replace("-", "_").lower() in SECRET_FIELD_NAMES


class SecretRedactor:
    """Detects and redacts secrets from text content and structured log fields."""

    def redact(self, text: str) -> str:
        """Redact secrets from the given text and return the result."""
        if not text:
            return text
        result = text
        for _name, pattern, replacement in SECRET_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    def redact_value(self, key: str, value: Any) -> Any:
        """Redact a single structured field: mask by name, otherwise scan strings."""
        if is_secret_field(key) and value:
            return REDACTED_FIELD
        if isinstance(value, str):
            return self.redact(value)
        return value
