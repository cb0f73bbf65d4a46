"""Tests for the per-instrument poller."""

import threading
import time

import pytest

from quotebar_app.engine.poller import PollerState, SymbolPoller
from quotebar_app.errors import StateTransitionError
from quotebar_app.provider.models import FetchResult, Quote
from quotebar_app.quotes.models import QuoteState

from tests.helpers import FakeClient, ManualPoller, local_time, make_config


def _poller(client, store, code="XAU", token="test-token", **kwargs) -> ManualPoller:
    params = {"use_proxy": True, "refresh_interval": 10.0}
    params.update(kwargs)
    return ManualPoller(code=code, token=token, client=client, store=store, **params)


class BlockingClient:
    """Client whose fetch blocks until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch_quote(self, code, token, use_proxy=True):
        self.calls += 1
        self.entered.set()
        self.release.wait(2.0)
        return FetchResult.success(code, Quote(price=1.0, timestamp=local_time(8, 0, 0)))


class RaisingClient:
    """Client whose fetch raises instead of returning a FetchResult."""

    def __init__(self, exc):
        self.exc = exc

    def fetch_quote(self, code, token, use_proxy=True):
        raise self.exc

class TestPollerLifecycle:
    """State machine transitions."""

    def test_start_creates_state(self, fake_client, store):
        poller = _poller(fake_client, store)
        assert poller.state is PollerState.IDLE
        poller.start()
        assert poller.state is PollerState.RUNNING
        assert store.get("XAU") == QuoteState()

    def test_start_keeps_existing_state(self, fake_client, store):
        existing = QuoteState().with_success(5.0, local_time(9, 0, 0))
        store.set("XAU", existing)
        _poller(fake_client, store).start()
        assert store.get("XAU") == existing

    def test_double_start_raises(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        with pytest.raises(StateTransitionError) as exc_info:
            poller.start()
        assert exc_info.value.current_state == "running"

    def test_start_after_stop_raises(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        poller.stop()
        with pytest.raises(StateTransitionError):
            poller.start()

    def test_stop_is_idempotent(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        poller.stop()
        poller.stop()
        assert poller.state is PollerState.STOPPED

    def test_from_config_captures_settings(self, fake_client, store):
        config = make_config("XAU", token="abc", use_system_proxy=False, refresh_interval=30.0)
        poller = SymbolPoller.from_config("XAU", config, fake_client, store)
        assert poller.captured_settings == ("abc", False, 30.0)
        assert SymbolPoller.settings_key(config) == poller.captured_settings


class TestPollOnce:
    """Fetch outcomes recorded in the store."""

    def test_success_updates_state(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        fake_client.queue_quote("XAU", 2345.10, local_time(14, 3, 21))

        result = poller.poll_once()

        assert result.ok
        state = store.get("XAU")
        assert state.last_good_price == 2345.10
        assert state.stale is False
        assert fake_client.calls == [("XAU", "test-token", True)]

    def test_failure_marks_stale_and_keeps_last_good(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        fake_client.queue_quote("XAU", 2345.10, local_time(14, 3, 21))
        fake_client.queue_failure("XAU")

        poller.poll_once()
        result = poller.poll_once()

        assert not result.ok
        state = store.get("XAU")
        assert state.stale is True
        assert state.last_good_price == 2345.10
        assert state.last_good_timestamp == local_time(14, 3, 21)

    def test_recovers_after_failure(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        fake_client.queue_failure("XAU")
        fake_client.queue_quote("XAU", 10.0, local_time(9, 0, 0))

        poller.poll_once()
        assert store.get("XAU").stale is True
        poller.poll_once()
        assert store.get("XAU").stale is False

    def test_idle_poller_does_not_fetch(self, fake_client, store):
        poller = _poller(fake_client, store)
        assert poller.poll_once() is None
        assert fake_client.calls == []

    def test_stopped_poller_does_not_fetch_or_write(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        poller.stop()
        store.remove("XAU")

        assert poller.poll_once() is None
        assert fake_client.calls == []
        assert store.get("XAU") is None

    def test_missing_token_skips_fetch(self, fake_client, store):
        poller = _poller(fake_client, store, token="")
        poller.start()
        assert poller.poll_once() is None
        assert fake_client.calls == []
        assert store.get("XAU") == QuoteState()

    def test_stats(self, fake_client, store):
        poller = _poller(fake_client, store)
        poller.start()
        fake_client.queue_quote("XAU", 1.0, local_time(9, 0, 0))
        poller.poll_once()
        poller.poll_once()
        stats = poller.get_stats()
        assert stats["fetch_count"] == 2
        assert stats["failure_count"] == 1
        assert stats["state"] == "running"


    def test_client_exception_marks_stale(self, store):
        poller = _poller(RaisingClient(UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")), store)
        poller.start()
        store.set("XAU", QuoteState().with_success(2345.10, local_time(14, 3, 21)))

        result = poller.poll_once()

        assert not result.ok
        assert result.error.code == "XAU"
        state = store.get("XAU")
        assert state.stale is True
        assert state.last_good_price == 2345.10
        assert not poller.busy

class TestInFlightFetches:
    """At most one request per instrument at a time."""

    def test_tick_during_fetch_is_skipped(self, store):
        client = BlockingClient()
        poller = _poller(client, store)
        poller.start()

        worker = poller.refresh_now()
        assert client.entered.wait(2.0)
        assert poller.busy

        assert poller.poll_once() is None
        client.release.set()
        worker.join(2.0)

        assert client.calls == 1
        assert poller.get_stats()["skipped_count"] == 1
        assert store.get("XAU").last_good_price == 1.0

    def test_result_after_stop_is_discarded(self, store):
        client = BlockingClient()
        poller = _poller(client, store)
        poller.start()

        worker = poller.refresh_now()
        assert client.entered.wait(2.0)
        poller.stop()
        store.remove("XAU")
        client.release.set()
        worker.join(2.0)

        assert store.get("XAU") is None


    def test_replacement_waits_for_predecessor_fetch(self, store):
        client = BlockingClient()
        old = _poller(client, store)
        old.start()
        worker = old.refresh_now()
        assert client.entered.wait(2.0)
        old.stop()

        new = _poller(client, store, token="new-token")
        new.take_over_from(old)
        new.start()

        assert new.busy
        assert new.poll_once() is None
        assert client.calls == 1

        client.release.set()
        worker.join(2.0)
        assert new.poll_once() is not None
        assert client.calls == 2

    def test_take_over_after_start_raises(self, fake_client, store):
        old = _poller(fake_client, store)
        new = _poller(fake_client, store)
        new.start()
        with pytest.raises(StateTransitionError):
            new.take_over_from(old)

class TestScheduledPolling:
    """The real timer drives poll_once."""

    def test_fetches_immediately_on_start(self, store):
        client = FakeClient()
        client.queue_quote("XAU", 2345.10, local_time(14, 3, 21))
        poller = SymbolPoller(code="XAU", token="t", use_proxy=False, refresh_interval=3600.0,
                              client=client, store=store)
        poller.start()
        try:
            deadline = time.monotonic() + 2.0
            while store.get("XAU").last_good_price is None and time.monotonic() < deadline:
                time.sleep(0.005)
        finally:
            poller.stop()

        assert store.get("XAU").last_good_price == 2345.10
        assert len(client.calls) == 1
