"""Tests for the BotConfig dataclass and config file loading."""

import dataclasses
import json

import pytest

from xtxtbot.config import DEFAULT_XMPP_PORT, BotConfig, ConfigError, load_config


VALID = {
    "Address": "xmpp.example.org",
    "BotJid": "bot@example.org",
    "Password": "secret",
    "ControlJid": "alice@example.org",
    "Twtxtnick": "alice",
    "TimelineEntries": 10,
    "MaxCharacters": 140,
}


def _with(**changes):
    raw = dict(VALID)
    for key, value in changes.items():
        if value is None:
            raw.pop(key, None)
        else:
            raw[key] = value
    return raw


class TestFromDict:
    def test_valid(self):
        c = BotConfig.from_dict(VALID)
        assert c.address == "xmpp.example.org"
        assert c.bot_jid == "bot@example.org"
        assert c.control_jid == "alice@example.org"
        assert c.twtxt_nick == "alice"
        assert c.timeline_entries == 10
        assert c.max_characters == 140
        assert c.twtxt_path == ""
        assert c.tool_timeout is None

    def test_optional_fields(self):
        c = BotConfig.from_dict(_with(Twtxtpath="/opt/bin/txtnish", ToolTimeout=30))
        assert c.twtxt_path == "/opt/bin/txtnish"
        assert c.tool_timeout == 30.0

    @pytest.mark.parametrize("key", ["Address", "BotJid", "Password", "ControlJid", "Twtxtnick"])
    def test_missing_string(self, key):
        with pytest.raises(ConfigError, match=key):
            BotConfig.from_dict(_with(**{key: None}))

    @pytest.mark.parametrize("key", ["Address", "ControlJid"])
    def test_blank_string(self, key):
        with pytest.raises(ConfigError, match=key):
            BotConfig.from_dict(_with(**{key: "   "}))

    @pytest.mark.parametrize("value", [0, -1, "10", True, 2.5])
    def test_bad_entries(self, value):
        with pytest.raises(ConfigError, match="TimelineEntries"):
            BotConfig.from_dict(_with(TimelineEntries=value))

    def test_missing_max_characters(self):
        with pytest.raises(ConfigError, match="MaxCharacters"):
            BotConfig.from_dict(_with(MaxCharacters=None))

    def test_bad_timeout(self):
        with pytest.raises(ConfigError, match="ToolTimeout"):
            BotConfig.from_dict(_with(ToolTimeout=0))

    def test_not_an_object(self):
        with pytest.raises(ConfigError):
            BotConfig.from_dict(["Address"])

    def test_immutable(self):
        c = BotConfig.from_dict(VALID)
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.max_characters = 1


class TestServer:
    def test_default_port(self):
        c = BotConfig.from_dict(VALID)
        assert c.server == ("xmpp.example.org", DEFAULT_XMPP_PORT)

    def test_explicit_port(self):
        c = BotConfig.from_dict(_with(Address="xmpp.example.org:5223"))
        assert c.server == ("xmpp.example.org", 5223)


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(VALID), encoding="utf-8")
        assert load_config(path) == BotConfig.from_dict(VALID)

    def test_missing_file_creates_directory(self, tmp_path):
        path = tmp_path / "xtxtbot" / "config.json"
        with pytest.raises(ConfigError, match="not found"):
            load_config(path)
        assert path.parent.is_dir()

    def test_malformed(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="malformed"):
            load_config(path)
