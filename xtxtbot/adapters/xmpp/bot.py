"""XMPP adapter — bridges slixmpp.ClientXMPP to the CommandDispatcher.

Converts message stanzas to IncomingMessage, runs them through the
dispatcher one at a time and sends the reply back to the sender. Every
inbound stanza of any kind counts as activity for the liveness monitor.
"""

import asyncio
import sys
from typing import Optional

import slixmpp
from slixmpp.exceptions import IqError, IqTimeout

from xtxtbot.config import BotConfig
from xtxtbot.domain.commands import CommandDispatcher
from xtxtbot.domain.liveness import ActivityClock
from xtxtbot.ports.inbound import IncomingMessage

PROBE_TIMEOUT_SECONDS = 30


def _log(msg: str):
    print(msg, file=sys.stderr)


class XmppBotAdapter(slixmpp.ClientXMPP):
    """Thin slixmpp client that delegates commands to CommandDispatcher.

    Implements NotificationPort through send_reply().
    """

    def __init__(self, config: BotConfig, dispatcher: CommandDispatcher, activity: ActivityClock):
        super().__init__(config.bot_jid, config.password)
        self.bot_config = config
        self.dispatcher = dispatcher
        self.activity = activity
        self._dispatch_lock = asyncio.Lock()
        self._probe_tasks: set = set()
        self.startup_error: Optional[str] = None
        self.failure = asyncio.Event()

        self.register_plugin("xep_0199")  # XMPP Ping, used as liveness probe

        self.add_filter("in", self._on_inbound)
        self.add_event_handler("session_start", self.on_start)
        self.add_event_handler("message", self.on_message)
        self.add_event_handler("connection_failed", self.on_connection_failed)
        self.add_event_handler("no_auth", self.on_auth_failed)
        self.add_event_handler("failed_all_auth", self.on_auth_failed)
        self.add_event_handler("disconnected", self.on_disconnected)

    def _on_inbound(self, stanza):
        self.activity.touch()
        return stanza

    async def on_start(self, event):
        self.send_presence()
        try:
            await self.get_roster()
        except (IqError, IqTimeout) as e:
            _log(f"[xmpp] roster request failed: {e}")
        _log(f"[xmpp] session started as {self.boundjid}")

    def _mark_failed(self, reason: str):
        if not self.startup_error:
            self.startup_error = reason
        _log(f"[xmpp] {reason}")
        self.failure.set()

    def on_connection_failed(self, error):
        self._mark_failed(f"connection to {self.bot_config.address} failed: {error}")

    def on_auth_failed(self, event):
        self._mark_failed(f"authentication as {self.bot_config.bot_jid} failed")
        self.disconnect()

    def on_disconnected(self, event):
        self._mark_failed("disconnected from server")

    async def on_message(self, msg):
        if msg["type"] not in ("chat", "normal"):
            return
        body = msg["body"]
        # Chat state notifications arrive as messages without a body
        if not body or not body.strip():
            return
        await self.handle_incoming(IncomingMessage(sender=str(msg["from"]), body=body))

    async def handle_incoming(self, incoming: IncomingMessage):
        """Dispatch one message and reply. Messages are handled strictly in order."""
        async with self._dispatch_lock:
            reply = await self.dispatcher.handle(incoming)
            self.send_reply(incoming.sender, reply)

    def send_reply(self, recipient: str, text: str) -> None:
        # Clients render trailing blank lines; trim only the terminal newlines
        self.send_message(mto=recipient, mbody=text.rstrip("\r\n"), mtype="chat")

    def send_probe(self):
        """Ping the server without waiting for the answer."""
        task = asyncio.ensure_future(self._ping_server())
        self._probe_tasks.add(task)
        task.add_done_callback(self._probe_tasks.discard)

    async def _ping_server(self):
        try:
            await self.plugin["xep_0199"].send_ping(self.boundjid.domain, timeout=PROBE_TIMEOUT_SECONDS)
        except (IqError, IqTimeout) as e:
            # Any reply, even an error, already reset the activity clock
            _log(f"[xmpp] ping: {type(e).__name__}")
