"""Tests for one-shot signals and completion handles."""

import logging

from core.signal import Signal


def _resolved():
    signal = Signal()
    signal.resolve()
    return signal


class TestSignal:

    def test_resolve_runs_callbacks_once(self):
        calls = []
        signal = Signal("s")
        signal.then(lambda: calls.append("a")).then(lambda: calls.append("b"))

        assert signal.resolve() is True
        assert signal.resolve() is False
        assert calls == ["a", "b"]
        assert signal.resolved

    def test_then_after_resolve_runs_immediately(self):
        calls = []
        signal = _resolved()
        signal.then(lambda: calls.append(1))
        assert calls == [1]

    def test_discarded_signal_never_resolves(self):
        calls = []
        signal = Signal()
        signal.then(lambda: calls.append(1))

        assert signal.discard() is True
        assert signal.resolve() is False
        signal.then(lambda: calls.append(2))

        assert calls == []
        assert signal.discarded
        assert signal.status == "discarded"

    def test_cannot_discard_resolved(self):
        signal = _resolved()
        assert signal.discard() is False
        assert signal.resolved

    def test_callback_error_is_logged_and_others_still_run(self, caplog):
        calls = []
        signal = Signal("boom")
        signal.then(lambda: 1 / 0)
        signal.then(lambda: calls.append(1))

        with caplog.at_level(logging.ERROR):
            signal.resolve()

        assert calls == [1]
        assert any("boom" in r.getMessage() for r in caplog.records)

    def test_removed_callback_does_not_run(self):
        calls = []

        def first():
            calls.append("first")

        signal = Signal()
        signal.then(first).then(lambda: calls.append("second"))

        assert signal.remove(first) is True
        assert signal.remove(first) is False
        signal.resolve()
        assert calls == ["second"]

    def test_remove_matches_bound_methods(self):
        calls = []
        signal = Signal()
        signal.then(calls.clear)
        assert signal.remove(calls.clear) is True
        assert signal._callbacks == []
