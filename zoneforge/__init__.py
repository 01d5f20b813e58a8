"""
project: Zone Forge
module: __init__.py
License: MIT

Flask application factory and core extensions setup.

This module wires together the Flask app, Flask-SocketIO, the shared event
bus and the zone instance manager. Configuration is sourced from environment
variables with reasonable defaults for development. A local `instance/`
directory is used for the rotating log file and other runtime data.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_socketio import SocketIO

from zoneforge.events import EventBus
from zoneforge.services.zone_manager import DEFAULT_MAX_AGE_MS, ZoneInstanceManager
from zoneforge.zones.template_data import ZONE_TEMPLATES

# Load .env if present so `SECRET_KEY`, `PORT`, etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only checkouts still serve requests; logging falls back to console
    pass

app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    ZONEFORGE_INSTANCE_MAX_AGE_MS=int(os.getenv("ZONEFORGE_INSTANCE_MAX_AGE_MS", str(DEFAULT_MAX_AGE_MS))),
    ZONEFORGE_ENABLE_GENERATION_METRICS=os.getenv("ZONEFORGE_ENABLE_GENERATION_METRICS", "1").lower()
    not in {"0", "false", "no", ""},
)

socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    ping_interval=20,
    ping_timeout=10,
)

# Shared notification sink; the Socket.IO bridge subscribes to it
event_bus = EventBus()


def build_manager(events: EventBus = None) -> ZoneInstanceManager:
    """Return a manager preloaded with the authored zone templates."""
    manager = ZoneInstanceManager(
        events=events if events is not None else event_bus,
        max_age_ms=app.config["ZONEFORGE_INSTANCE_MAX_AGE_MS"],
    )
    manager.register_templates(ZONE_TEMPLATES)
    return manager


zone_manager = build_manager()
app.extensions["zone_manager"] = zone_manager


from zoneforge.routes.zone_api import bp_zones  # noqa: E402

app.register_blueprint(bp_zones)

from zoneforge.websockets import zone_events as _ws_zone_events  # noqa: F401,E402

_ws_zone_events.bridge_events(event_bus)


def create_app():
    """Return the Flask app instance."""
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500
