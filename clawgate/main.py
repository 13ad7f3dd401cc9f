"""
Main — clawgate's entry point.

Running ``clawgate`` (or ``python -m clawgate.main``) configures logging and
hands control to the Click command group in :mod:`clawgate.cli.app`.

Logging is structlog over the standard library. Every event passes through a
redaction processor first, so provider keys, bot tokens and gateway
credentials never reach a log line even when a caller passes one by mistake.
"""

from __future__ import annotations

import functools
import logging

import structlog

from clawgate.privacy.redaction import SecretRedactor


@functools.lru_cache(maxsize=1)
def _get_log_redactor() -> SecretRedactor:
    return SecretRedactor()


def _redact_sensitive_fields(logger, method_name, event_dict):
    """
    Structlog processor that redacts secrets from log output.

    Fields named like a credential are masked outright; every other string
    field, the event name included, is scanned for known secret formats.
    """
    redactor = _get_log_redactor()
    for key, value in list(event_dict.items()):
        event_dict[key] = redactor.redact_value(key, value)
    return event_dict


_logging_configured = False


def configure_logging(level: str = "warning") -> None:
    """Configure structlog and standard-library logging for clawgate.

    Safe to call more than once. Later calls only adjust the level.
    """
    global _logging_configured  # noqa: PLW0603
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if _logging_configured:
        logging.getLogger().setLevel(numeric_level)
        return
    _logging_configured = True

    logging.basicConfig(format="%(message)s", level=numeric_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            _redact_sensitive_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def main():
    """Entry point for the clawgate command."""
    from clawgate.cli.app import cli

    cli()


if __name__ == "__main__":
    main()
