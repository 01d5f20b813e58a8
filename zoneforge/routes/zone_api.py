"""
project: Zone Forge
module: zone_api.py
License: MIT

Zone template, instance, movement and encounter API routes.

Domain failures (blocked path, locked waypoint, missing pack ...) answer 200
with the operation's result body (``success: false``). Unknown instances
answer 404 and malformed payloads 400 with ``{error, field, code}``.
"""

from flask import Blueprint, current_app, jsonify, request

from zoneforge.logging_utils import get_logger
from zoneforge.websockets.validation import (
    ACCESS_QUERY,
    CLEANUP,
    CREATE_INSTANCE,
    POSITION,
    TRAVEL,
    WAYPOINT,
    validate,
)
from zoneforge.zones.cells import Position
from zoneforge.zones.config import GenerationConfig

bp_zones = Blueprint("zones", __name__)

logger = get_logger("zoneforge.api")


def _manager():
    return current_app.extensions["zone_manager"]


def _bad_request(err):
    return jsonify({"error": err["error"], "field": err["field"], "code": err["code"]}), 400


def _not_found(instance_id):
    return jsonify({"error": "Zone instance not found", "instance_id": instance_id}), 404


def _query_ints(*names):
    """Pull integer query args; returns (ok, values_or_error)."""
    out = {}
    for name in names:
        raw = request.args.get(name)
        if raw is None or raw == "":
            continue
        try:
            out[name] = int(raw)
        except ValueError:
            return False, {"field": name, "error": "expected int", "code": "type"}
    return True, out


@bp_zones.route("/api/zones/templates")
def list_templates():
    act = request.args.get("act", type=int)
    manager = _manager()
    templates = manager.templates.by_act(act) if act is not None else manager.templates.all()
    return jsonify({"templates": [t.to_dict() for t in templates]})


@bp_zones.route("/api/zones/instances", methods=["POST"])
def create_instance():
    ok, data = validate(request.get_json(silent=True), CREATE_INSTANCE)
    if not ok:
        return _bad_request(data)
    manager = _manager()
    template_id, player_id = data["template_id"], data["player_id"]
    if template_id not in manager.templates:
        return jsonify({"error": "Zone template not found", "template_id": template_id}), 404
    seed = data.get("seed")
    # A seeded request replaces the player's copy; one live instance per zone
    if data.get("reset") or seed is not None:
        instance = manager.reset_zone_instance(template_id, player_id, GenerationConfig(seed=seed))
    else:
        instance = manager.get_or_create_zone_instance(template_id, player_id)
    return jsonify(instance.summary()), 201


@bp_zones.route("/api/zones/instances/<instance_id>")
def get_instance(instance_id):
    instance = _manager().get_zone_instance(instance_id)
    if instance is None:
        return _not_found(instance_id)
    return jsonify(instance.summary())


def _position_action(instance_id, action):
    manager = _manager()
    if manager.get_zone_instance(instance_id) is None:
        return _not_found(instance_id)
    ok, data = validate(request.get_json(silent=True), POSITION)
    if not ok:
        return _bad_request(data)
    result = action(manager, instance_id, Position(data["x"], data["y"]))
    return jsonify(result.to_dict())


@bp_zones.route("/api/zones/instances/<instance_id>/move", methods=["POST"])
def move(instance_id):
    return _position_action(instance_id, lambda m, iid, pos: m.move_player_in_zone(iid, pos))


@bp_zones.route("/api/zones/instances/<instance_id>/defeat", methods=["POST"])
def defeat(instance_id):
    return _position_action(instance_id, lambda m, iid, pos: m.defeat_monster_pack(iid, pos))


@bp_zones.route("/api/zones/instances/<instance_id>/interact", methods=["POST"])
def interact(instance_id):
    return _position_action(instance_id, lambda m, iid, pos: m.interact_with_feature(iid, pos))


def _current_or_query_position(instance):
    ok, data = _query_ints("x", "y")
    if not ok:
        return False, data
    if "x" in data and "y" in data:
        return True, Position(data["x"], data["y"])
    if "x" in data or "y" in data:
        missing = "y" if "x" in data else "x"
        return False, {"field": missing, "error": "missing required field", "code": "required"}
    return True, instance.player_position


@bp_zones.route("/api/zones/instances/<instance_id>/directions")
def directions(instance_id):
    manager = _manager()
    instance = manager.get_zone_instance(instance_id)
    if instance is None:
        return _not_found(instance_id)
    ok, pos = _current_or_query_position(instance)
    if not ok:
        return _bad_request(pos)
    if pos is None:
        return jsonify({"error": "position required", "field": "x", "code": "required"}), 400
    options = manager.get_available_directions(instance_id, pos)
    return jsonify({"position": pos.to_dict(), "directions": [o.to_dict() for o in options]})


@bp_zones.route("/api/zones/instances/<instance_id>/waypoint", methods=["POST"])
def waypoint(instance_id):
    manager = _manager()
    if manager.get_zone_instance(instance_id) is None:
        return _not_found(instance_id)
    ok, data = validate(request.get_json(silent=True) or {}, WAYPOINT)
    if not ok:
        return _bad_request(data)
    return jsonify(manager.use_waypoint(instance_id, data.get("target_zone_id")).to_dict())


@bp_zones.route("/api/zones/instances/<instance_id>/map")
def zone_map(instance_id):
    manager = _manager()
    instance = manager.get_zone_instance(instance_id)
    if instance is None:
        return _not_found(instance_id)
    ok, pos = _current_or_query_position(instance)
    if not ok:
        return _bad_request(pos)
    return jsonify({"instance_id": instance_id, "map": manager.get_zone_map(instance_id, pos)})


@bp_zones.route("/api/zones/access/<template_id>")
def access(template_id):
    args = {"player_id": request.args.get("player_id")}
    ok, ints = _query_ints("level")
    if not ok:
        return _bad_request(ints)
    args.update(ints)
    ok, data = validate(args, ACCESS_QUERY)
    if not ok:
        return _bad_request(data)
    items = request.args.getlist("item") or None
    result = _manager().can_access_zone(template_id, data["player_id"], player_level=data.get("level"), items=items)
    return jsonify(result.to_dict())


@bp_zones.route("/api/zones/cleanup", methods=["POST"])
def cleanup():
    ok, data = validate(request.get_json(silent=True) or {}, CLEANUP)
    if not ok:
        return _bad_request(data)
    deleted = _manager().cleanup_expired_instances(data.get("max_age_ms"))
    logger.info(event="cleanup_requested", deleted=deleted)
    return jsonify({"deleted_count": deleted})


@bp_zones.route("/api/zones/instances/<instance_id>/travel", methods=["POST"])
def travel(instance_id):
    manager = _manager()
    if manager.get_zone_instance(instance_id) is None:
        return _not_found(instance_id)
    ok, data = validate(request.get_json(silent=True), TRAVEL)
    if not ok:
        return _bad_request(data)
    return jsonify(manager.move_to_zone(instance_id, data["target_zone_id"]).to_dict())
