"""Entry point for ``python -m xtxtbot``."""

from xtxtbot.adapters.xmpp.launcher import main

if __name__ == "__main__":
    main()
