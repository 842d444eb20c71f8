"""Tests for domain/liveness.py — activity clock and monitor state machine."""

import asyncio

import pytest

from xtxtbot.domain.liveness import (
    GIVE_UP_AFTER_SECONDS,
    PROBE_AFTER_SECONDS,
    ActivityClock,
    ConnectionLost,
    LivenessMonitor,
)


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, minutes=0.0, seconds=0.0):
        self.now += minutes * 60 + seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def activity(clock):
    return ActivityClock(clock=clock)


class TestActivityClock:
    def test_starts_at_creation(self, clock, activity):
        assert activity.seconds_since() == 0
        clock.advance(seconds=42)
        assert activity.seconds_since() == 42

    def test_touch_resets(self, clock, activity):
        clock.advance(minutes=3)
        activity.touch()
        assert activity.last == clock.now
        assert activity.seconds_since() == 0


class TestLivenessMonitor:
    def _make(self, activity):
        probes = []
        monitor = LivenessMonitor(activity, probe=lambda: probes.append(True))
        return monitor, probes

    def test_quiet_below_threshold(self, clock, activity):
        monitor, probes = self._make(activity)
        clock.advance(minutes=4, seconds=59)
        assert monitor.check() == pytest.approx(299)
        assert probes == []

    def test_probe_once_per_check_until_give_up(self, clock, activity):
        monitor, probes = self._make(activity)
        # Checks fire at minute boundaries: 1..6 survive, 7 is fatal
        for minute in range(1, 7):
            clock.advance(minutes=1)
            monitor.check()
            assert len(probes) == max(0, minute - 4)

        clock.advance(minutes=1)
        with pytest.raises(ConnectionLost) as exc:
            monitor.check()
        assert exc.value.silent_for == GIVE_UP_AFTER_SECONDS
        # The fatal check still probes
        assert len(probes) == 3

    def test_activity_stops_probing(self, clock, activity):
        monitor, probes = self._make(activity)
        clock.advance(minutes=5)
        monitor.check()
        assert len(probes) == 1

        # The probe's reply arrives
        activity.touch()
        clock.advance(minutes=1)
        monitor.check()
        assert len(probes) == 1

    def test_probe_error_does_not_stop_monitor(self, clock, activity):
        def broken_probe():
            raise RuntimeError("stream closed")

        monitor = LivenessMonitor(activity, probe=broken_probe)
        clock.advance(seconds=PROBE_AFTER_SECONDS)
        assert monitor.check() == PROBE_AFTER_SECONDS

    @pytest.mark.asyncio
    async def test_run_raises_connection_lost(self, clock, activity):
        probes = []
        monitor = LivenessMonitor(activity, probe=lambda: probes.append(True), interval=0)
        clock.advance(minutes=8)
        with pytest.raises(ConnectionLost):
            await asyncio.wait_for(monitor.run(), timeout=1)
        assert probes == [True]

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, activity):
        monitor = LivenessMonitor(activity, probe=lambda: None, interval=3600)
        task = monitor.start()
        assert monitor.start() is task
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
