"""Inbound port — platform-agnostic message representation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IncomingMessage:
    """One chat message, independent of the XMPP stanza it arrived in."""

    sender: str  # full JID, resource included
    body: str
