"""Port interfaces (Hexagonal Architecture)."""

from xtxtbot.ports.inbound import IncomingMessage
from xtxtbot.ports.outbound import NotificationPort, ToolResult, TwtxtPort

__all__ = [
    "IncomingMessage",
    "NotificationPort",
    "ToolResult",
    "TwtxtPort",
]
