"""Adapters — twtxt client and XMPP transport."""
