"""Tests for the active module ticker."""

from core.registry import ModuleDefinition
from core.running_module import RunningModule
from core.ticker import ModuleTicker

from conftest import RecordingModule


def _module(name, events):
    definition = ModuleDefinition(name, RecordingModule, {
        "label": name, "events": events, "instances": [],
    })
    definition.mark_loaded()
    module = RunningModule(definition)
    module.instantiate()
    return module


class TestModuleTicker:

    def test_add_is_idempotent(self, timers):
        ticker = ModuleTicker(timers)
        module = _module("a", [])
        ticker.add(module)
        ticker.add(module)
        assert ticker.active() == [module]

    def test_remove_disposes_and_is_idempotent(self, timers):
        events = []
        ticker = ModuleTicker(timers)
        module = _module("a", events)
        ticker.add(module)

        ticker.remove(module)
        ticker.remove(module)

        assert ticker.active() == []
        assert events.count(("a", "dispose", None)) == 1

    def test_remove_of_never_added_module_is_safe(self, timers):
        events = []
        ticker = ModuleTicker(timers)
        module = _module("ghost", events)
        ticker.remove(module)
        ticker.remove(None)
        assert ticker.active() == []
        assert module.disposed

    def test_ticks_active_modules_on_interval(self, timers):
        ticker = ModuleTicker(timers, interval_ms=100)
        module = _module("a", [])
        ticker.add(module)
        ticker.start()

        timers.advance_to(350)

        # One tick on add, three from the interval.
        assert module.instance.ticks == 4

        ticker.stop()
        timers.advance_to(1000)
        assert module.instance.ticks == 4

    def test_listeners_see_membership_changes(self, timers):
        seen = []
        ticker = ModuleTicker(timers)
        ticker.subscribe(lambda active: seen.append([m.name for m in active]))
        a, b = _module("a", []), _module("b", [])

        ticker.add(a)
        ticker.add(b)
        ticker.remove(a)

        assert seen == [["a"], ["a", "b"], ["b"]]

    def test_listener_error_does_not_break_ticker(self, timers):
        ticker = ModuleTicker(timers)
        ticker.subscribe(lambda active: 1 / 0)
        module = _module("a", [])
        ticker.add(module)
        assert module in ticker
