"""Tests for clawgate/wizard/gateway_config.py — gateway settings resolution and merge."""

from __future__ import annotations

import pytest

from conftest import CANCEL, FakePrompter
from clawgate.errors import WizardCancelledError
from clawgate.wizard.defaults import resolve_quickstart_defaults
from clawgate.wizard.gateway_config import (
    apply_gateway_settings,
    configure_gateway_for_onboarding,
    random_token,
    resolve_gateway_settings,
    validate_ipv4,
)
from clawgate.wizard.types import (
    AuthMode,
    BindMode,
    GatewayOverride,
    GatewaySettings,
    TailscaleMode,
)


def _token() -> str:
    return "fresh-token"


class TestRandomToken:
    def test_is_hex_and_unique(self):
        a, b = random_token(), random_token()
        assert len(a) == 48
        int(a, 16)
        assert a != b


class TestResolveGatewaySettings:
    def test_defaults_generate_token(self):
        s = resolve_gateway_settings(resolve_quickstart_defaults({}), token_factory=_token)
        assert s.port == 18789
        assert s.bind is BindMode.LOOPBACK
        assert s.auth_mode is AuthMode.TOKEN
        assert s.token == "fresh-token"
        assert s.tailscale_mode is TailscaleMode.OFF

    def test_existing_token_kept(self):
        defaults = resolve_quickstart_defaults({"gateway": {"auth": {"token": "kept"}}})
        assert resolve_gateway_settings(defaults, token_factory=_token).token == "kept"

    def test_override_beats_defaults(self):
        defaults = resolve_quickstart_defaults({"gateway": {"port": 19001, "bind": "lan"}})
        s = resolve_gateway_settings(
            defaults,
            GatewayOverride(port=20000, bind=BindMode.AUTO),
            token_factory=_token,
        )
        assert s.port == 20000
        assert s.bind is BindMode.AUTO

    def test_tailscale_forces_loopback(self):
        defaults = resolve_quickstart_defaults({"gateway": {"bind": "lan"}})
        s = resolve_gateway_settings(
            defaults, GatewayOverride(tailscale_mode=TailscaleMode.SERVE), token_factory=_token
        )
        assert s.bind is BindMode.LOOPBACK

    def test_funnel_forces_password(self):
        s = resolve_gateway_settings(
            resolve_quickstart_defaults({}),
            GatewayOverride(tailscale_mode=TailscaleMode.FUNNEL, password="pw"),
            token_factory=_token,
        )
        assert s.auth_mode is AuthMode.PASSWORD
        assert s.password == "pw"

    def test_custom_without_host_falls_back(self):
        s = resolve_gateway_settings(
            resolve_quickstart_defaults({}), GatewayOverride(bind=BindMode.CUSTOM), token_factory=_token
        )
        assert s.bind is BindMode.LOOPBACK
        assert s.custom_bind_host is None

    def test_custom_host_dropped_for_other_binds(self):
        defaults = resolve_quickstart_defaults({"gateway": {"bind": "lan", "customBindHost": "10.0.0.1"}})
        assert resolve_gateway_settings(defaults, token_factory=_token).custom_bind_host is None

    def test_password_mode_does_not_generate_token(self):
        defaults = resolve_quickstart_defaults({"gateway": {"auth": {"mode": "password", "password": "p"}}})
        s = resolve_gateway_settings(defaults, token_factory=_token)
        assert s.token is None

    def test_repr_hides_secrets(self):
        s = GatewaySettings(
            port=1, bind=BindMode.LOOPBACK, auth_mode=AuthMode.TOKEN,
            tailscale_mode=TailscaleMode.OFF, token="tok-secret", password="pw-secret",
        )
        assert "tok-secret" not in repr(s)
        assert "pw-secret" not in repr(s)


class TestApplyGatewaySettings:
    def _settings(self, **kw) -> GatewaySettings:
        base = dict(port=19001, bind=BindMode.LOOPBACK, auth_mode=AuthMode.TOKEN,
                    tailscale_mode=TailscaleMode.OFF, token="t")
        base.update(kw)
        return GatewaySettings(**base)

    def test_writes_gateway_subtree(self):
        doc = apply_gateway_settings({}, self._settings())
        assert doc["gateway"] == {
            "mode": "local",
            "port": 19001,
            "bind": "loopback",
            "auth": {"mode": "token", "token": "t"},
            "tailscale": {"mode": "off", "resetOnExit": False},
        }

    def test_unknown_gateway_keys_survive(self):
        base = {"gateway": {"controlUi": {"enabled": True}, "auth": {"allowTailscale": True}}}
        doc = apply_gateway_settings(base, self._settings())
        assert doc["gateway"]["controlUi"] == {"enabled": True}
        assert doc["gateway"]["auth"]["allowTailscale"] is True

    def test_custom_bind_host_written_only_for_custom(self):
        doc = apply_gateway_settings(
            {"gateway": {"customBindHost": "10.0.0.1"}},
            self._settings(bind=BindMode.LAN),
        )
        assert "customBindHost" not in doc["gateway"]
        doc = apply_gateway_settings({}, self._settings(bind=BindMode.CUSTOM, custom_bind_host="10.0.0.2"))
        assert doc["gateway"]["customBindHost"] == "10.0.0.2"

    def test_other_sections_untouched(self):
        base = {"channels": {"telegram": {"enabled": True}}}
        doc = apply_gateway_settings(base, self._settings())
        assert doc["channels"] == base["channels"]
        assert "gateway" not in base


class TestValidateIpv4:
    def test_valid(self):
        assert validate_ipv4("192.168.1.20") is None

    @pytest.mark.parametrize("value", ["", "localhost", "300.1.1.1", "::1"])
    def test_invalid(self, value):
        assert validate_ipv4(value) is not None


class TestConfigureGatewayForOnboarding:
    @pytest.mark.asyncio
    async def test_no_prompts_for_quickstart(self):
        prompter = FakePrompter()
        defaults = resolve_quickstart_defaults({})
        result = await configure_gateway_for_onboarding(
            base_config={}, next_config={}, defaults=defaults, prompter=prompter, token_factory=_token
        )
        assert prompter.prompts == []
        assert result.settings.token == "fresh-token"
        assert result.next_config["gateway"]["auth"]["token"] == "fresh-token"

    @pytest.mark.asyncio
    async def test_prompts_for_custom_host(self):
        prompter = FakePrompter(["10.1.2.3"])
        result = await configure_gateway_for_onboarding(
            base_config={},
            next_config={},
            defaults=resolve_quickstart_defaults({}),
            prompter=prompter,
            override=GatewayOverride(bind=BindMode.CUSTOM),
            token_factory=_token,
        )
        assert result.settings.bind is BindMode.CUSTOM
        assert result.next_config["gateway"]["customBindHost"] == "10.1.2.3"

    @pytest.mark.asyncio
    async def test_funnel_prompts_for_password_and_notes_switch(self):
        prompter = FakePrompter(["s3cret-pass"])
        result = await configure_gateway_for_onboarding(
            base_config={},
            next_config={},
            defaults=resolve_quickstart_defaults({}),
            prompter=prompter,
            override=GatewayOverride(tailscale_mode=TailscaleMode.FUNNEL),
            token_factory=_token,
        )
        assert result.settings.auth_mode is AuthMode.PASSWORD
        assert result.next_config["gateway"]["auth"]["password"] == "s3cret-pass"
        assert "Gateway" in prompter.note_titles()
        assert all("s3cret-pass" not in text for _, text in prompter.notes)

    @pytest.mark.asyncio
    async def test_tailscale_notes_forced_loopback(self):
        prompter = FakePrompter()
        defaults = resolve_quickstart_defaults(
            {"gateway": {"bind": "lan", "tailscale": {"mode": "serve"}, "auth": {"token": "t"}}}
        )
        result = await configure_gateway_for_onboarding(
            base_config={}, next_config={}, defaults=defaults, prompter=prompter, token_factory=_token
        )
        assert result.settings.bind is BindMode.LOOPBACK
        assert prompter.notes == [
            (
                "Gateway",
                "Tailscale Serve publishes the loopback listener; "
                "gateway bind switched from LAN to Loopback (127.0.0.1).",
            )
        ]

    @pytest.mark.asyncio
    async def test_no_bind_note_without_tailscale(self):
        prompter = FakePrompter()
        defaults = resolve_quickstart_defaults({"gateway": {"bind": "lan"}})
        await configure_gateway_for_onboarding(
            base_config={}, next_config={}, defaults=defaults, prompter=prompter, token_factory=_token
        )
        assert prompter.notes == []

    @pytest.mark.asyncio
    async def test_cancel_propagates(self):
        prompter = FakePrompter([CANCEL])
        with pytest.raises(WizardCancelledError):
            await configure_gateway_for_onboarding(
                base_config={},
                next_config={},
                defaults=resolve_quickstart_defaults({}),
                prompter=prompter,
                override=GatewayOverride(auth_mode=AuthMode.PASSWORD),
                token_factory=_token,
            )
