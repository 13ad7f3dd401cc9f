"""
clawgate — Onboarding and configuration reconciliation for a multi-channel agent gateway.

The gateway bridges chat platforms (Telegram, Discord, Slack, Signal, iMessage,
web) to an LLM-backed agent runtime. This package owns the setup-time side of
that: it reads the persisted ``clawgate.toml``, derives gateway defaults from
whatever is already there, layers the operator's answers on top and writes a
new, internally consistent document back.

Pipeline stages (leaves first):
    1. Config snapshot (read + schema validation)
    2. Quickstart defaults (port, bind, auth, Tailscale)
    3. Auth choice (model-provider wiring)
    4. Gateway settings
    5. Channel enablement (allowlists + plugins)
    6. Wizard metadata stamp
    7. Atomic config write
"""

__version__ = "0.1.0"
