"""twtxt client adapter — implements TwtxtPort.

Each operation spawns the client once with an argument vector (no shell),
so user input is never re-parsed. Failures come back as ToolResult errors
instead of exceptions.
"""

import asyncio
import os
import re
import shutil
import sys
from datetime import datetime
from typing import List, Optional, Tuple

from xtxtbot.adapters.twtxt.filters import grep_context, head_lines
from xtxtbot.config import ConfigError
from xtxtbot.ports.outbound import ToolResult

TWTXT = "twtxt"
TXTNISH = "txtnish"

# One timeline entry prints as three lines (header, text, blank)
LINES_PER_ENTRY = 3


def _log(msg: str):
    print(msg, file=sys.stderr)


def find_twtxt(explicit_path: str = "") -> Tuple[str, str]:
    """Locate the twtxt client. Returns (binary path, flavour).

    An explicit path wins; otherwise txtnish is preferred over twtxt.
    """
    if explicit_path:
        path = os.path.expanduser(explicit_path)
        if not (os.path.isfile(path) and os.access(path, os.X_OK)):
            raise ConfigError(f"twtxt client not executable: {path}")
        return path, _flavour_of(path)

    for name in (TXTNISH, TWTXT):
        found = shutil.which(name)
        if found:
            return found, name
    raise ConfigError("neither txtnish nor twtxt found on PATH")


def _flavour_of(path: str) -> str:
    return TXTNISH if os.path.basename(path).startswith(TXTNISH) else TWTXT


async def _run_subprocess(cmd_args: List[str], timeout: Optional[float] = None):
    """Run a subprocess command and return process/stdout/stderr.

    On timeout the child is killed and reaped before TimeoutError propagates.
    """
    proc = await asyncio.create_subprocess_exec(
        *cmd_args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass  # exited on its own meanwhile
        await proc.wait()
        raise
    return proc, stdout, stderr


class TwtxtAdapter:
    """Runs twtxt or txtnish commands. Implements TwtxtPort protocol."""

    def __init__(self, binary: str, flavour: str = TWTXT, timeout: Optional[float] = None):
        if flavour not in (TWTXT, TXTNISH):
            raise ValueError(f"Unsupported twtxt flavour: {flavour}")
        self.binary = binary
        self.flavour = flavour
        self.timeout = timeout

    @classmethod
    def discover(cls, explicit_path: str = "", timeout: Optional[float] = None) -> "TwtxtAdapter":
        binary, flavour = find_twtxt(explicit_path)
        _log(f"[twtxt] using {flavour} at {binary}")
        return cls(binary, flavour, timeout=timeout)

    async def _run(self, *args: str) -> ToolResult:
        cmd = [self.binary, *args]
        print(f"[{datetime.now().isoformat()}] Executing {args[0]} with {self.flavour}", file=sys.stderr)
        try:
            proc, stdout, stderr = await _run_subprocess(cmd, timeout=self.timeout or None)
        except asyncio.TimeoutError:
            return ToolResult(error=f"Timeout ({self.timeout:g}s)")
        except OSError as e:
            return ToolResult(error=f"Cannot start {self.binary}: {e}")

        output = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            err_text = stderr.decode("utf-8", errors="replace").strip() or output.strip()
            return ToolResult(output=output, error=f"Exit code {proc.returncode}: {err_text}")
        return ToolResult(output=output)

    async def _search(self, pattern: str, entries: int, *, before: int = 0, after: int = 0) -> ToolResult:
        result = await self._run("timeline")
        if not result.ok:
            return result
        found = grep_context(result.output, pattern, max_count=entries, before=before, after=after)
        if not found:
            return ToolResult(error="no matching entries", no_match=True)
        return ToolResult(output=found)

    async def tweet(self, text: str) -> ToolResult:
        return await self._run("tweet", text)

    async def timeline(self, entries: int) -> ToolResult:
        result = await self._run("timeline")
        if not result.ok:
            return result
        return ToolResult(output=head_lines(result.output, entries * LINES_PER_ENTRY))

    async def view_user(self, user: str, entries: int) -> ToolResult:
        if self.flavour == TXTNISH:
            # txtnish has no view command; pick the user's entries from the timeline
            return await self._search(rf"^\* {re.escape(user)} ", entries, after=1)
        result = await self._run("view", user)
        if not result.ok:
            return result
        return ToolResult(output=head_lines(result.output, entries * LINES_PER_ENTRY))

    async def mentions(self, nick: str, entries: int) -> ToolResult:
        return await self._search("@" + re.escape(nick), entries, before=1)

    async def tags(self, tag: str, entries: int) -> ToolResult:
        return await self._search("#" + re.escape(tag), entries, before=1)

    async def follow(self, user: str, url: str) -> ToolResult:
        return await self._run("follow", user, url)

    async def unfollow(self, user: str) -> ToolResult:
        return await self._run("unfollow", user)

    async def following(self) -> ToolResult:
        return await self._run("following")
