"""twtxt adapter — runs the local twtxt/txtnish client."""

from xtxtbot.adapters.twtxt.adapter import TXTNISH, TWTXT, TwtxtAdapter, find_twtxt
from xtxtbot.adapters.twtxt.filters import grep_context, head_lines

__all__ = [
    "TXTNISH",
    "TWTXT",
    "TwtxtAdapter",
    "find_twtxt",
    "grep_context",
    "head_lines",
]
