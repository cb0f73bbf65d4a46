"""Tests for the periodic timer."""

import threading
import time

import pytest

from quotebar_app.engine.timer import PeriodicTimer


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestNextDeadline:
    """Deadline grid anchored at the start of the previous call."""

    def setup_method(self):
        self.timer = PeriodicTimer("test", interval=10.0, callback=lambda: None)

    def test_fast_callback(self):
        assert self.timer.next_deadline(tick_start=100.0, now=100.5) == 110.0

    def test_slow_callback_skips_missed_ticks(self):
        assert self.timer.next_deadline(tick_start=100.0, now=125.0) == 130.0

    def test_callback_ending_exactly_on_deadline(self):
        assert self.timer.next_deadline(tick_start=100.0, now=110.0) == 110.0

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            PeriodicTimer("bad", interval=0, callback=lambda: None)

    @pytest.mark.parametrize("interval", [float("nan"), float("inf")])
    def test_rejects_non_finite_interval(self, interval):
        with pytest.raises(ValueError):
            PeriodicTimer("bad", interval=interval, callback=lambda: None)


class TestPeriodicTimerThread:
    """Thread lifecycle with short real intervals."""

    def test_runs_immediately_and_repeats(self):
        calls = []
        timer = PeriodicTimer("fast", interval=0.01, callback=lambda: calls.append(1))
        timer.start()
        try:
            assert _wait_until(lambda: len(calls) >= 3)
        finally:
            timer.stop(join_timeout=1.0)
        assert not timer.running

    def test_delayed_first_run(self):
        calls = []
        timer = PeriodicTimer("delayed", interval=60.0, callback=lambda: calls.append(1),
                              run_immediately=False)
        timer.start()
        time.sleep(0.05)
        timer.stop(join_timeout=1.0)
        assert calls == []

    def test_stop_prevents_further_calls(self):
        calls = []
        timer = PeriodicTimer("stopping", interval=0.01, callback=lambda: calls.append(1))
        timer.start()
        assert _wait_until(lambda: len(calls) >= 1)
        timer.stop(join_timeout=1.0)
        count = len(calls)
        time.sleep(0.05)
        assert len(calls) == count

    def test_callback_errors_do_not_kill_timer(self):
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("boom")

        timer = PeriodicTimer("flaky", interval=0.01, callback=flaky)
        timer.start()
        try:
            assert _wait_until(lambda: len(calls) >= 2)
        finally:
            timer.stop(join_timeout=1.0)

    def test_calls_never_overlap(self):
        active = threading.Semaphore(1)
        overlaps = []
        calls = []

        def slow():
            if not active.acquire(blocking=False):
                overlaps.append(1)
                return
            try:
                calls.append(1)
                time.sleep(0.03)
            finally:
                active.release()

        timer = PeriodicTimer("slow", interval=0.01, callback=slow)
        timer.start()
        try:
            assert _wait_until(lambda: len(calls) >= 3)
        finally:
            timer.stop(join_timeout=1.0)
        assert overlaps == []
        assert timer.skipped_ticks > 0
