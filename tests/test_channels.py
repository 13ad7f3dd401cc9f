"""Tests for clawgate/wizard/channels.py and clawgate/plugins.py."""

from __future__ import annotations

from clawgate.plugins import enable_plugin_in_config, enabled_plugins
from clawgate.wizard.channels import (
    ChannelPatch,
    enable_channel,
    merge_allow_from,
    normalize_allow_from,
)
from clawgate.wizard.types import DmPolicy


class TestAllowFrom:
    def test_normalize_trims_and_dedupes(self):
        assert normalize_allow_from([" 1", "2", 1, "", "  ", "2"]) == ["1", "2"]

    def test_merge_appends(self):
        assert merge_allow_from(["1"], "2") == ["1", "2"]

    def test_merge_existing_is_noop(self):
        assert merge_allow_from(["1"], "1") == ["1"]

    def test_merge_blank_identifier(self):
        assert merge_allow_from(["1"], "  ") == ["1"]

    def test_merge_non_list_existing(self):
        assert merge_allow_from("oops", "5") == ["5"]

    def test_merge_is_idempotent(self):
        once = merge_allow_from([], "42")
        assert merge_allow_from(once, "42") == once


class TestEnableChannel:
    def test_empty_document(self):
        doc = enable_channel({}, ChannelPatch(name="telegram", allow_from="123456789"))
        assert doc["channels"]["telegram"] == {
            "enabled": True,
            "dmPolicy": "allowlist",
            "allowFrom": ["123456789"],
        }
        assert doc["plugins"] == ["telegram"]

    def test_duplicate_identifier_unchanged(self):
        base = {"channels": {"telegram": {"allowFrom": ["1"]}}}
        doc = enable_channel(base, ChannelPatch(name="telegram", allow_from="1"))
        assert doc["channels"]["telegram"]["allowFrom"] == ["1"]

    def test_idempotent(self):
        patch = ChannelPatch(name="telegram", allow_from="7", bot_token="bot-token-value")
        once = enable_channel({}, patch)
        assert enable_channel(once, patch) == once

    def test_bot_token_only_when_missing(self):
        base = {"channels": {"telegram": {"botToken": "existing"}}}
        doc = enable_channel(base, ChannelPatch(name="telegram", allow_from="1", bot_token="new"))
        assert doc["channels"]["telegram"]["botToken"] == "existing"

        doc = enable_channel({}, ChannelPatch(name="telegram", allow_from="1", bot_token=" new "))
        assert doc["channels"]["telegram"]["botToken"] == "new"

    def test_unknown_channel_keys_and_other_channels_survive(self):
        base = {
            "channels": {
                "telegram": {"groups": {"*": {"requireMention": True}}},
                "discord": {"enabled": True},
            },
            "plugins": ["discord"],
        }
        doc = enable_channel(base, ChannelPatch(name="telegram", allow_from="1"))
        assert doc["channels"]["telegram"]["groups"] == {"*": {"requireMention": True}}
        assert doc["channels"]["discord"] == {"enabled": True}
        assert doc["plugins"] == ["discord", "telegram"]

    def test_dm_policy_from_patch(self):
        doc = enable_channel({}, ChannelPatch(name="telegram", dm_policy=DmPolicy.PAIRING))
        assert doc["channels"]["telegram"]["dmPolicy"] == "pairing"
        assert doc["channels"]["telegram"]["allowFrom"] == []

    def test_input_not_mutated(self):
        base = {"channels": {"telegram": {"allowFrom": ["1"]}}}
        enable_channel(base, ChannelPatch(name="telegram", allow_from="2"))
        assert base == {"channels": {"telegram": {"allowFrom": ["1"]}}}

    def test_repr_hides_bot_token(self):
        assert "bot-token-value" not in repr(ChannelPatch(name="telegram", bot_token="bot-token-value"))


class TestPlugins:
    def test_enabled_plugins_cleans(self):
        assert enabled_plugins({"plugins": [" a", "b", "a", ""]}) == ["a", "b"]

    def test_enabled_plugins_non_list(self):
        assert enabled_plugins({"plugins": "telegram"}) == []

    def test_enable_adds_in_order(self):
        result = enable_plugin_in_config({"plugins": ["a"]}, "b")
        assert result.enabled and not result.already_enabled
        assert result.config["plugins"] == ["a", "b"]

    def test_enable_existing_is_noop(self):
        result = enable_plugin_in_config({"plugins": ["a"]}, "a")
        assert result.already_enabled
        assert result.config["plugins"] == ["a"]

    def test_blank_id_rejected(self):
        result = enable_plugin_in_config({}, "  ")
        assert result.enabled is False
        assert result.config == {}
