"""
Closed enumerations and value types shared by the onboarding stages.

Each enumeration has exactly one fallback rule, applied by ``parse``; call
sites never compare raw strings against mode names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class _ParsableEnum(str, Enum):
    @classmethod
    def parse(cls, value: Any, default: "_ParsableEnum") -> Any:
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return default


class BindMode(_ParsableEnum):
    """Which interface the gateway listener binds to."""

    LOOPBACK = "loopback"
    LAN = "lan"
    AUTO = "auto"
    CUSTOM = "custom"
    TAILNET = "tailnet"

    @classmethod
    def resolve(cls, value: Any) -> "BindMode":
        return cls.parse(value, cls.LOOPBACK)


class AuthMode(_ParsableEnum):
    TOKEN = "token"
    PASSWORD = "password"

    @classmethod
    def from_explicit(cls, value: Any) -> Optional["AuthMode"]:
        return cls.parse(value, None)


class TailscaleMode(_ParsableEnum):
    """Tailscale exposure: none, tailnet-only (serve) or public (funnel)."""

    OFF = "off"
    SERVE = "serve"
    FUNNEL = "funnel"

    @classmethod
    def resolve(cls, value: Any) -> "TailscaleMode":
        return cls.parse(value, cls.OFF)


class DmPolicy(_ParsableEnum):
    PAIRING = "pairing"
    ALLOWLIST = "allowlist"
    OPEN = "open"
    DISABLED = "disabled"

    @classmethod
    def resolve(cls, value: Any) -> "DmPolicy":
        return cls.parse(value, cls.ALLOWLIST)


class WizardFlow(_ParsableEnum):
    QUICKSTART = "quickstart"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class QuickstartGatewayDefaults:
    """Gateway defaults derived from the prior document.

    ``has_existing`` only changes how the defaults are presented.
    """

    has_existing: bool
    port: int
    bind: BindMode
    auth_mode: AuthMode
    tailscale_mode: TailscaleMode
    token: Optional[str] = None
    password: Optional[str] = None
    custom_bind_host: Optional[str] = None
    tailscale_reset_on_exit: bool = False


@dataclass(frozen=True)
class GatewayOverride:
    """Explicit operator choices; ``None`` keeps the resolved default."""

    port: Optional[int] = None
    bind: Optional[BindMode] = None
    custom_bind_host: Optional[str] = None
    auth_mode: Optional[AuthMode] = None
    token: Optional[str] = None
    password: Optional[str] = None
    tailscale_mode: Optional[TailscaleMode] = None
    tailscale_reset_on_exit: Optional[bool] = None


@dataclass(frozen=True)
class GatewaySettings:
    """Runtime-facing gateway settings handed to the gateway process."""

    port: int
    bind: BindMode
    auth_mode: AuthMode
    tailscale_mode: TailscaleMode
    tailscale_reset_on_exit: bool = False
    custom_bind_host: Optional[str] = None
    token: Optional[str] = None
    password: Optional[str] = None

    def __repr__(self) -> str:
        # Never includes token or password.
        return (
            f"GatewaySettings(port={self.port}, bind={self.bind.value}, "
            f"auth_mode={self.auth_mode.value}, tailscale_mode={self.tailscale_mode.value})"
        )
