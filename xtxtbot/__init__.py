"""xtxtbot — control a twtxt client from an XMPP chat."""

__version__ = "0.1.0"
