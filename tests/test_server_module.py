import logging

import pytest

from zoneforge.server import _configure_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_configure_logging_is_idempotent(tmp_path, restore_root_logging):
    path = _configure_logging(str(tmp_path))
    _configure_logging(str(tmp_path))
    assert path == str(tmp_path / "zoneforge.log")
    root = logging.getLogger()
    assert len(root.handlers) == 2
    logging.getLogger("zoneforge.test").info("hello from the zone server")
    for h in root.handlers:
        h.flush()
    assert "hello from the zone server" in (tmp_path / "zoneforge.log").read_text()


def test_app_wiring(test_app):
    from zoneforge.services.zone_manager import ZoneInstanceManager

    manager = test_app.extensions["zone_manager"]
    assert isinstance(manager, ZoneInstanceManager)
    assert "twilight_strand" in manager.templates
    assert "zones" in test_app.blueprints
