"""Tests for the built-in display modules."""

from core.geometry import Geometry
from modules.clock import ClockModule
from modules.countdown import CountdownModule
from modules.message import MessageModule
from modules.slow import SlowModule

GEO = Geometry()


class TestClockModule:

    def test_renders_after_tick(self):
        clock = ClockModule({"format": "%Y"}, GEO, None)
        assert clock.render() == ""
        clock.tick(0, 0)
        assert clock.render().splitlines()[0] in ("1969", "1970")


class TestMessageModule:

    def test_renders_text(self):
        assert MessageModule({"text": "hello"}, GEO, None).render() == "hello"


class TestCountdownModule:

    def test_counts_down_from_deadline(self):
        countdown = CountdownModule({"seconds": 10}, GEO, None)
        assert countdown.will_be_shown_soon(1000) is None

        countdown.tick(500, 0)
        assert countdown.render() == "10"
        countdown.tick(4500, 4000)
        assert countdown.render() == "7"
        countdown.tick(11000, 6500)
        assert countdown.render() == "Time!"


class TestSlowModule:

    def test_ready_after_delay(self, timers):
        slow = SlowModule({"ready_after_ms": 300}, GEO, None, timers=timers)
        ready = slow.will_be_shown_soon(1000)
        assert ready.pending
        timers.advance(300)
        assert ready.resolved

    def test_never_ready(self, timers):
        slow = SlowModule({"ready_after_ms": -1}, GEO, None, timers=timers)
        ready = slow.will_be_shown_soon(1000)
        timers.advance(100000)
        assert ready.pending

    def test_ready_immediately_without_timers(self):
        slow = SlowModule({"ready_after_ms": 300}, GEO, None)
        assert slow.will_be_shown_soon(1000).resolved

    def test_dispose_cancels_pending_readiness(self, timers):
        slow = SlowModule({"ready_after_ms": 300}, GEO, None, timers=timers)
        ready = slow.will_be_shown_soon(1000)
        slow.dispose()
        timers.advance(1000)
        assert ready.pending
        assert timers.pending() == 0
