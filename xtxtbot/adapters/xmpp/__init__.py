"""XMPP adapter — slixmpp client and process entry point."""

from xtxtbot.adapters.xmpp.bot import XmppBotAdapter

__all__ = ["XmppBotAdapter"]
