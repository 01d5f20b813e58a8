"""Socket.IO zone handlers and the event-bus bridge.

Events:
    - join_zone: Subscribe to a player's zone notifications; payload { player_id }
    - leave_zone: Unsubscribe; payload { player_id }
    - zone_action: Act inside an instance; payload { instance_id, action, x, y }
      where action is one of move|defeat|interact

Emits:
    - zone_joined / zone_left: Acknowledgements
    - zone_event: Re-emitted manager events { type, data }; player-scoped events go
      to room ``player:<id>``, the rest are broadcast
    - zone_action_result: Result of a zone_action { action, result }
"""

from flask import current_app
from flask_socketio import emit, join_room, leave_room

from zoneforge import socketio
from zoneforge.logging_utils import log as _log
from zoneforge.zones.cells import Position

from .validation import JOIN_ZONE, LEAVE_ZONE, POSITION, validate

ZONE_ACTION = {
    'instance_id': ('str', True, {'min_len': 1, 'max_len': 256}),
    'action': ('str', True, {'min_len': 1, 'max_len': 16}),
}

_ACTIONS = {
    'move': lambda m, iid, pos: m.move_player_in_zone(iid, pos),
    'defeat': lambda m, iid, pos: m.defeat_monster_pack(iid, pos),
    'interact': lambda m, iid, pos: m.interact_with_feature(iid, pos),
}


def player_room(player_id: str) -> str:
    return f"player:{player_id}"


def _error(event_name, result):
    emit('error', {'message': f"Invalid {event_name}: {result['error']}", 'field': result['field'], 'code': result['code']})


@socketio.on('join_zone')
def handle_join_zone(data):
    ok, result = validate(data or {}, JOIN_ZONE)
    if not ok:
        _error('join_zone', result)
        return
    room = player_room(result['player_id'])
    join_room(room)
    emit('zone_joined', {'player_id': result['player_id'], 'room': room})
    _log.info(event="join_zone", room=room)


@socketio.on('leave_zone')
def handle_leave_zone(data):
    ok, result = validate(data or {}, LEAVE_ZONE)
    if not ok:
        _error('leave_zone', result)
        return
    room = player_room(result['player_id'])
    leave_room(room)
    emit('zone_left', {'player_id': result['player_id'], 'room': room})
    _log.info(event="leave_zone", room=room)


@socketio.on('zone_action')
def handle_zone_action(data):
    ok, result = validate(data or {}, ZONE_ACTION)
    if not ok:
        _error('zone_action', result)
        return
    action = _ACTIONS.get(result['action'])
    if action is None:
        _error('zone_action', {'field': 'action', 'error': 'unknown action', 'code': 'choice'})
        return
    ok, pos = validate(data, POSITION)
    if not ok:
        _error('zone_action', pos)
        return
    manager = current_app.extensions['zone_manager']
    outcome = action(manager, result['instance_id'], Position(pos['x'], pos['y']))
    emit('zone_action_result', {'action': result['action'], 'result': outcome.to_dict()})


def _forward(event_type, data):
    payload = {'type': event_type, 'data': data}
    player_id = data.get('player_id') if isinstance(data, dict) else None
    if player_id:
        socketio.emit('zone_event', payload, to=player_room(player_id))
    else:
        socketio.emit('zone_event', payload)


def bridge_events(bus):
    """Forward every bus event to Socket.IO clients; returns the unsubscribe callable."""
    return bus.on_any(_forward)
