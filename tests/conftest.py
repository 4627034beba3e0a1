"""Shared fixtures: a virtual-clock scheduler, a recording controller, a Flask client."""

import pytest

from engine import ManualScheduler, PlaybackController, RecordingConsumer
from main import create_app


@pytest.fixture
def sched():
    return ManualScheduler()


@pytest.fixture
def consumer():
    return RecordingConsumer()


@pytest.fixture
def controller(consumer, sched):
    ctl = PlaybackController(consumer, scheduler=sched, default_delay_ms=1000)
    yield ctl
    ctl.shutdown()


@pytest.fixture
def app(sched):
    return create_app({"TESTING": True, "DEFAULT_DELAY_MS": 1000}, scheduler=sched)


@pytest.fixture
def client(app):
    return app.test_client()
