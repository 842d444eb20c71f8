"""Connection liveness — detects a silently stalled XMPP stream.

The receive path touches an ActivityClock on every inbound stanza. The
monitor wakes once a minute: after 5 minutes of silence it sends a probe,
after 7 minutes it gives up by raising ConnectionLost. The probe's reply is
ordinary inbound traffic and resets the clock.
"""

import asyncio
import sys
import threading
import time
from typing import Callable, Optional


def _log(msg: str):
    print(msg, file=sys.stderr)


PROBE_AFTER_SECONDS = 5 * 60
GIVE_UP_AFTER_SECONDS = 7 * 60
CHECK_INTERVAL_SECONDS = 60


class ConnectionLost(Exception):
    """Raised when no inbound traffic was seen for too long."""

    def __init__(self, silent_for: float):
        super().__init__(f"Connection lost. No activity for {int(silent_for)}s.")
        self.silent_for = silent_for


class ActivityClock:
    """Timestamp of the last inbound activity, safe to share between tasks."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._last = clock()

    def touch(self):
        now = self._clock()
        with self._lock:
            self._last = now

    @property
    def last(self) -> float:
        with self._lock:
            return self._last

    def seconds_since(self) -> float:
        return self._clock() - self.last


class LivenessMonitor:
    def __init__(
        self,
        clock: ActivityClock,
        probe: Callable[[], None],
        interval: float = CHECK_INTERVAL_SECONDS,
        probe_after: float = PROBE_AFTER_SECONDS,
        give_up_after: float = GIVE_UP_AFTER_SECONDS,
    ):
        self.clock = clock
        self._probe = probe
        self.interval = interval
        self.probe_after = probe_after
        self.give_up_after = give_up_after
        self._task: Optional[asyncio.Task] = None

    def check(self) -> float:
        """Run one liveness check. Returns the silence in seconds.

        Raises ConnectionLost once the silence reaches give_up_after. The
        probe is still sent on that final check.
        """
        silent_for = self.clock.seconds_since()
        if silent_for >= self.probe_after:
            _log(f"[liveness] no activity for {int(silent_for)}s, probing server")
            try:
                self._probe()
            except Exception as e:
                _log(f"[liveness] probe failed: {e}")
        if silent_for >= self.give_up_after:
            raise ConnectionLost(silent_for)
        return silent_for

    async def run(self):
        """Check forever, once per interval. Only returns by raising."""
        while True:
            await asyncio.sleep(self.interval)
            self.check()

    def start(self) -> asyncio.Task:
        if not self._task or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task
