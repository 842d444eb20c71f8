"""Outbound ports — interfaces for external system adapters."""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class ToolResult:
    """Captured output of one twtxt client invocation."""

    output: str = ""
    error: Optional[str] = None
    no_match: bool = False  # search ran but found nothing

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class TwtxtPort(Protocol):
    """Interface for the twtxt client backend."""

    async def tweet(self, text: str) -> ToolResult: ...
    async def timeline(self, entries: int) -> ToolResult: ...
    async def view_user(self, user: str, entries: int) -> ToolResult: ...
    async def mentions(self, nick: str, entries: int) -> ToolResult: ...
    async def tags(self, tag: str, entries: int) -> ToolResult: ...
    async def follow(self, user: str, url: str) -> ToolResult: ...
    async def unfollow(self, user: str) -> ToolResult: ...
    async def following(self) -> ToolResult: ...


@runtime_checkable
class NotificationPort(Protocol):
    """Interface for sending chat replies."""

    def send_reply(self, recipient: str, text: str) -> None: ...
