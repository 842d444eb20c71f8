"""Launcher — validates config, connects and runs until a fatal error."""

import asyncio
import logging
import sys

from xtxtbot.adapters.twtxt.adapter import TwtxtAdapter
from xtxtbot.adapters.xmpp.bot import XmppBotAdapter
from xtxtbot.config import LOG_LEVEL, BotConfig, ConfigError, load_config
from xtxtbot.domain.commands import CommandDispatcher
from xtxtbot.domain.liveness import ActivityClock, ConnectionLost, LivenessMonitor


def _log(msg: str):
    print(msg, file=sys.stderr)


async def run_bot(config: BotConfig, twtxt: TwtxtAdapter):
    """Connect and serve commands. Only returns by raising.

    Raises ConnectionError when the session cannot be established or drops,
    and ConnectionLost when the liveness monitor gives up.
    """
    activity = ActivityClock()
    dispatcher = CommandDispatcher(config, twtxt)
    bot = XmppBotAdapter(config, dispatcher, activity)
    monitor = LivenessMonitor(activity, bot.send_probe)

    host, port = config.server
    _log(f"[launcher] connecting to {host}:{port} as {config.bot_jid}")
    bot.connect(host=host, port=port)

    monitor_task = monitor.start()
    failed_task = asyncio.ensure_future(bot.failure.wait())
    try:
        done, _ = await asyncio.wait(
            {monitor_task, failed_task}, return_when=asyncio.FIRST_COMPLETED,
        )
        if monitor_task in done:
            monitor_task.result()
        raise ConnectionError(bot.startup_error or "connection failed")
    finally:
        for task in (monitor_task, failed_task):
            if not task.done():
                task.cancel()


def _log_level(name: str) -> int:
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        _log(f"Warning: unknown XTXTBOT_LOG_LEVEL={name!r}, falling back to WARNING")
        return logging.WARNING
    return level


def main():
    logging.basicConfig(
        level=_log_level(LOG_LEVEL),
        format="%(levelname)-8s %(name)s %(message)s",
    )
    try:
        config = load_config()
        twtxt = TwtxtAdapter.discover(config.twtxt_path, timeout=config.tool_timeout)
        asyncio.run(run_bot(config, twtxt))
    except (ConfigError, ConnectionError, ConnectionLost) as e:
        # No graceful drain: in-flight replies are dropped
        _log(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
