import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from zoneforge import build_manager, create_app, event_bus, socketio  # noqa: E402
from zoneforge.events import EventBus  # noqa: E402
from zoneforge.services.zone_manager import ZoneInstanceManager  # noqa: E402
from zoneforge.zones.template_data import ZONE_TEMPLATES  # noqa: E402
from tests.factories import FakeClock  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def api_manager(test_app):
    """Swap a fresh manager (wired to the shared bus) into the app for one test."""
    previous = test_app.extensions["zone_manager"]
    manager = build_manager(event_bus)
    test_app.extensions["zone_manager"] = manager
    try:
        yield manager
    finally:
        test_app.extensions["zone_manager"] = previous


@pytest.fixture()
def socket_client(test_app):
    c = socketio.test_client(test_app, flask_test_client=test_app.test_client())
    c.get_received()
    yield c
    if c.is_connected():
        c.disconnect()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def bus():
    return EventBus()


@pytest.fixture()
def manager(bus, clock):
    m = ZoneInstanceManager(events=bus, clock=clock)
    m.register_templates(ZONE_TEMPLATES)
    return m
