"""Configuration and environment settings."""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "xtxtbot"
CONFIG_PATH = Path(
    os.getenv("XTXTBOT_CONFIG", str(DEFAULT_CONFIG_DIR / "config.json"))
).expanduser()

LOG_LEVEL = os.getenv("XTXTBOT_LOG_LEVEL", "WARNING").strip().upper()
SOURCE_URL = os.getenv("XTXTBOT_SOURCE_URL", "https://github.com/mdosch/goxtxt/").strip()

DEFAULT_XMPP_PORT = 5222

TOOL_TIMEOUT: Optional[float] = None
_raw_timeout = os.getenv("XTXTBOT_TOOL_TIMEOUT", "").strip()
if _raw_timeout:
    try:
        TOOL_TIMEOUT = float(_raw_timeout)
    except ValueError:
        _stderr_print(f"Ignoring invalid XTXTBOT_TOOL_TIMEOUT={_raw_timeout!r}")
    else:
        if TOOL_TIMEOUT <= 0:
            _stderr_print(f"Ignoring non-positive XTXTBOT_TOOL_TIMEOUT={_raw_timeout!r}")
            TOOL_TIMEOUT = None

# JSON key -> BotConfig attribute
_REQUIRED_STRINGS = {
    "Address": "address",
    "BotJid": "bot_jid",
    "Password": "password",
    "ControlJid": "control_jid",
    "Twtxtnick": "twtxt_nick",
}
_REQUIRED_INTS = {
    "TimelineEntries": "timeline_entries",
    "MaxCharacters": "max_characters",
}


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""
    pass


@dataclass(frozen=True)
class BotConfig:
    """Validated bot configuration. Never mutated after startup."""

    address: str
    bot_jid: str
    password: str
    control_jid: str
    twtxt_nick: str
    timeline_entries: int
    max_characters: int
    twtxt_path: str = ""
    tool_timeout: Optional[float] = None

    @property
    def server(self) -> Tuple[str, int]:
        """Split ``address`` into host and port (default 5222)."""
        host, sep, port = self.address.rpartition(":")
        if not sep or not port.isdigit():
            return self.address, DEFAULT_XMPP_PORT
        return host, int(port)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "BotConfig":
        """Build a config from the decoded JSON object, validating every field."""
        if not isinstance(raw, dict):
            raise ConfigError("config must be a JSON object")

        values: Dict[str, Any] = {}
        for key, attr in _REQUIRED_STRINGS.items():
            value = raw.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{key} must be a non-empty string")
            values[attr] = value.strip()

        for key, attr in _REQUIRED_INTS.items():
            value = raw.get(key)
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{key} must be a positive integer")
            values[attr] = value

        twtxt_path = raw.get("Twtxtpath", "")
        if not isinstance(twtxt_path, str):
            raise ConfigError("Twtxtpath must be a string")
        values["twtxt_path"] = twtxt_path.strip()

        timeout = raw.get("ToolTimeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ConfigError("ToolTimeout must be a positive number")
            timeout = float(timeout)
        if TOOL_TIMEOUT is not None:
            timeout = TOOL_TIMEOUT
        values["tool_timeout"] = timeout

        return cls(**values)

    @classmethod
    def from_file(cls, path: Path) -> "BotConfig":
        """Read and validate a JSON config file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read {path}: {e}") from e
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"malformed config {path}: {e}") from e
        return cls.from_dict(raw)


def load_config(path: Optional[Path] = None) -> BotConfig:
    """Load the bot config, creating its directory (0700) on first run.

    A missing config file is an error; the directory is only bootstrapped so
    the user knows where to put it.
    """
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        try:
            path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"cannot create {path.parent}: {e}") from e
        raise ConfigError(f"config file not found: {path}")
    return BotConfig.from_file(path)
