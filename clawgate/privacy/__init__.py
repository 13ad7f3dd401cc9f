"""Privacy module — keeping credentials out of logs and terminal output."""

from clawgate.privacy.redaction import SecretRedactor

__all__ = ["SecretRedactor"]
