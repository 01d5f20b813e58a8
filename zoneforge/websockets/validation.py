"""Lightweight payload validation shared by the Socket.IO handlers and the HTTP API.

Provides minimal schema-like checking with clear, consistent error responses.
Returns (ok, value_or_error) tuples; the caller decides whether to emit an
error event or answer 400.

Schema Mini-Language (Python dict):
{
  'field_name': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'bool', 'list', 'dict'
Extras examples:
  max_len, min_len (str)
  min, max (int)
  item_type (list element primitive type)

Example:
 ok, data_or_err = validate({'template_id': 'the_coast', 'player_id': 'p1', 'seed': -1}, CREATE_INSTANCE)
 -> (False, {'field': 'seed', 'error': 'below minimum 0', 'code': 'min'})
"""
from __future__ import annotations

from typing import Any, Dict, Tuple

PRIMITIVES = {
    'str': str,
    'int': int,
    'bool': bool,
    'list': list,
    'dict': dict,
}


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {'field': field, 'error': message, 'code': code}


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail('__root__', 'payload must be an object', 'type')
    out = {}
    for name, spec in schema.items():
        if not isinstance(spec, tuple) or len(spec) < 2:
            return _fail('__schema__', f'invalid spec for {name}', 'schema')
        type_name, required = spec[0], spec[1]
        extras = spec[2] if len(spec) > 2 else {}
        if type_name not in PRIMITIVES:
            return _fail('__schema__', f'unsupported type {type_name}', 'schema')
        if name not in payload or payload[name] is None:
            if required:
                return _fail(name, 'missing required field', 'required')
            continue
        value = payload[name]
        py_type = PRIMITIVES[type_name]
        # bool is an int subclass; keep them apart
        if type_name == 'int' and isinstance(value, bool):
            return _fail(name, 'expected int', 'type')
        if not isinstance(value, py_type):
            return _fail(name, f'expected {type_name}', 'type')
        if type_name == 'str':
            s = value.strip()
            if len(s) == 0:
                return _fail(name, 'must not be empty', 'empty')
            if 'max_len' in extras and len(s) > extras['max_len']:
                return _fail(name, 'too long', 'max_len')
            if 'min_len' in extras and len(s) < extras['min_len']:
                return _fail(name, 'too short', 'min_len')
            out[name] = s
        elif type_name == 'int':
            if 'min' in extras and value < extras['min']:
                return _fail(name, f"below minimum {extras['min']}", 'min')
            if 'max' in extras and value > extras['max']:
                return _fail(name, f"above maximum {extras['max']}", 'max')
            out[name] = value
        elif type_name == 'list':
            item_type = extras.get('item_type')
            if item_type:
                it = PRIMITIVES.get(item_type)
                if not it:
                    return _fail('__schema__', f'unsupported item_type {item_type}', 'schema')
                for idx, elem in enumerate(value):
                    if not isinstance(elem, it):
                        return _fail(name, f'element {idx} not {item_type}', 'item_type')
            out[name] = value
        else:
            out[name] = value
    return True, out


# Predefined schemas
_ID = ('str', True, {'min_len': 1, 'max_len': 128})

JOIN_ZONE = {
    'player_id': _ID,
}
LEAVE_ZONE = JOIN_ZONE
CREATE_INSTANCE = {
    'template_id': _ID,
    'player_id': _ID,
    'seed': ('int', False, {'min': 0}),
    'reset': ('bool', False),
}
POSITION = {
    'x': ('int', True),
    'y': ('int', True),
}
WAYPOINT = {
    'target_zone_id': ('str', False, {'min_len': 1, 'max_len': 128}),
}
CLEANUP = {
    'max_age_ms': ('int', False, {'min': 0}),
}
ACCESS_QUERY = {
    'player_id': _ID,
    'level': ('int', False, {'min': 0}),
}
TRAVEL = {
    'target_zone_id': _ID,
}
