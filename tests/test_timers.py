"""Tests for timer services and timer scopes."""

import threading
import time

from core.timers import LoopTimerService, ManualTimerService, TimerScope, TkTimerService


class FakeRoot:
    """Stands in for tk.Tk: records after() calls, fires them on demand."""

    def __init__(self):
        self.pending = {}
        self._next = 0

    def after(self, ms, func):
        self._next += 1
        after_id = f"after#{self._next}"
        self.pending[after_id] = (ms, func)
        return after_id

    def after_cancel(self, after_id):
        self.pending.pop(after_id, None)

    def fire_all(self):
        for after_id in list(self.pending):
            _, func = self.pending.pop(after_id)
            func()


class TestManualTimerService:

    def test_fires_in_deadline_order(self, timers):
        fired = []
        timers.call_at(300, lambda: fired.append(300))
        timers.call_at(100, lambda: fired.append(100))
        timers.call_at(200, lambda: fired.append(200))

        timers.advance_to(250)
        assert fired == [100, 200]
        assert timers.now() == 250

        timers.advance(100)
        assert fired == [100, 200, 300]

    def test_ties_fire_in_arming_order(self, timers):
        fired = []
        timers.call_at(100, lambda: fired.append("first"))
        timers.call_at(100, lambda: fired.append("second"))
        timers.advance_to(100)
        assert fired == ["first", "second"]

    def test_clock_reads_deadline_inside_callback(self, timers):
        seen = []
        timers.call_at(400, lambda: seen.append(timers.now()))
        timers.advance_to(1000)
        assert seen == [400]

    def test_past_deadline_is_not_synchronous(self, timers):
        timers.advance_to(500)
        fired = []
        timers.call_at(100, lambda: fired.append(1))
        assert fired == []
        timers.run_due()
        assert fired == [1]

    def test_timer_armed_while_firing_runs_if_due(self, timers):
        fired = []
        timers.call_at(100, lambda: timers.call_at(150, lambda: fired.append(150)))
        timers.advance_to(200)
        assert fired == [150]

    def test_cancel_is_idempotent(self, timers):
        fired = []
        handle = timers.call_at(100, lambda: fired.append(1))
        timers.cancel(handle)
        timers.cancel(handle)
        timers.cancel(None)
        timers.advance_to(200)
        assert fired == []
        assert timers.pending() == 0

    def test_cancel_after_fire_is_harmless(self, timers):
        handle = timers.call_at(100, lambda: None)
        timers.advance_to(100)
        timers.cancel(handle)
        assert handle.fired and not handle.cancelled

    def test_callback_error_does_not_stop_others(self, timers):
        fired = []
        timers.call_at(100, lambda: 1 / 0)
        timers.call_at(100, lambda: fired.append(1))
        timers.advance_to(100)
        assert fired == [1]

    def test_until_never_negative(self, timers):
        timers.advance_to(1000)
        assert timers.until(500) == 0
        assert timers.until(1500) == 500


class TestTimerScope:

    def test_arm_replaces_previous(self, timers):
        fired = []
        scope = TimerScope(timers)
        scope.arm(100, lambda: fired.append("old"))
        scope.arm(200, lambda: fired.append("new"))
        timers.advance_to(300)
        assert fired == ["new"]

    def test_release_cancels(self, timers):
        fired = []
        scope = TimerScope(timers)
        scope.arm(100, lambda: fired.append(1))
        assert scope.armed
        scope.release()
        scope.release()
        timers.advance_to(200)
        assert fired == []
        assert not scope.armed


class TestTkTimerService:

    def test_schedules_with_after(self):
        root = FakeRoot()
        timers = TkTimerService(root, clock=lambda: 1000.0)
        fired = []
        timers.call_at(1250, lambda: fired.append(1))

        [(ms, _)] = root.pending.values()
        assert ms == 250
        root.fire_all()
        assert fired == [1]

    def test_past_deadline_uses_zero_delay(self):
        root = FakeRoot()
        timers = TkTimerService(root, clock=lambda: 1000.0)
        timers.call_at(10, lambda: None)
        [(ms, _)] = root.pending.values()
        assert ms == 0

    def test_cancel_uses_after_cancel(self):
        root = FakeRoot()
        timers = TkTimerService(root, clock=lambda: 0.0)
        fired = []
        handle = timers.call_at(100, lambda: fired.append(1))
        timers.cancel(handle)
        assert root.pending == {}
        root.fire_all()
        assert fired == []


class TestLoopTimerService:

    def test_runs_until_stopped(self):
        timers = LoopTimerService(idle_ms=5)
        fired = []
        timers.call_later(1, lambda: fired.append(1))
        timers.call_later(5, timers.stop)

        runner = threading.Thread(target=timers.run_forever)
        runner.start()
        runner.join(5)

        assert not runner.is_alive()
        assert fired == [1]

    def test_stop_from_another_thread(self):
        timers = LoopTimerService(idle_ms=5)
        runner = threading.Thread(target=timers.run_forever)
        runner.start()
        give_up = time.monotonic() + 5
        while not timers.running and time.monotonic() < give_up:
            time.sleep(0.001)
        timers.stop()
        runner.join(5)
        assert not runner.is_alive()
