"""Pytest configuration and shared fixtures."""

import pytest

from quotebar_app.engine.supervisor import EngineSupervisor
from quotebar_app.quotes.store import QuoteStore

from tests.helpers import FakeClient, ManualPoller, RecordingTray, manual_rotation


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def store() -> QuoteStore:
    return QuoteStore()


@pytest.fixture
def tray() -> RecordingTray:
    return RecordingTray()


@pytest.fixture
def supervisor(tray, fake_client, store):
    sup = EngineSupervisor(
        tray=tray,
        client=fake_client,
        store=store,
        poller_factory=ManualPoller.from_config,
        rotation_factory=manual_rotation,
    )
    yield sup
    sup.shutdown()
