"""Zone templates and the in-memory template registry.

Templates are authored once and never mutated. Construction validates the
enumerated fields so a typo in authored data fails loudly at startup rather
than surfacing mid-generation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..logging_utils import get_logger
from .errors import TemplateError, UnknownGeneratorError
from .layouts import GENERATOR_KINDS

logger = get_logger("zoneforge.templates")

ZONE_TYPES = ("outdoor", "indoor", "town", "boss", "dungeon")
SIZES = ("small", "medium", "large")
DENSITIES = ("sparse", "normal", "dense")
COMPLEXITIES = ("simple", "moderate", "complex")
PREREQUISITE_TYPES = ("zone_cleared", "boss_killed", "level_requirement", "item_possessed")


@dataclass(frozen=True)
class ZonePrerequisite:
    type: str
    value: Any
    description: str = ""

    def __post_init__(self):
        if self.type not in PREREQUISITE_TYPES:
            raise TemplateError(f"Unknown prerequisite type: {self.type!r}")

    def to_dict(self):
        return {"type": self.type, "value": self.value, "description": self.description}


@dataclass(frozen=True)
class ZoneConnection:
    target_zone_id: str
    description: str = ""
    bidirectional: bool = True

    def to_dict(self):
        return {
            "target_zone_id": self.target_zone_id,
            "description": self.description,
            "bidirectional": self.bidirectional,
        }


@dataclass(frozen=True)
class ZoneTemplate:
    id: str
    name: str
    description: str = ""
    level: int = 1
    act: int = 1
    zone_type: str = "outdoor"
    generator: str = "open"
    size: str = "medium"
    density: str = "normal"
    complexity: str = "simple"
    monster_pool: Tuple[str, ...] = ()
    environment_theme: str = ""
    has_waypoint: bool = False
    has_boss: bool = False
    boss_type: Optional[str] = None
    prerequisites: Tuple[ZonePrerequisite, ...] = ()
    connections: Tuple[ZoneConnection, ...] = ()
    special_features: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.id:
            raise TemplateError("Zone template id must be non-empty")
        if self.generator not in GENERATOR_KINDS:
            raise UnknownGeneratorError(self.generator)
        for attr, allowed in (
            ("zone_type", ZONE_TYPES),
            ("size", SIZES),
            ("density", DENSITIES),
            ("complexity", COMPLEXITIES),
        ):
            value = getattr(self, attr)
            if value not in allowed:
                raise TemplateError(f"Template {self.id!r}: invalid {attr} {value!r}")
        # Lists are accepted from authored data but stored as tuples
        for attr in ("monster_pool", "prerequisites", "connections", "special_features"):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))

    @property
    def is_safe_zone(self) -> bool:
        return self.zone_type == "town" or "safe_zone" in self.special_features

    def connection_to(self, zone_id: str) -> Optional[ZoneConnection]:
        for conn in self.connections:
            if conn.target_zone_id == zone_id:
                return conn
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "level": self.level,
            "act": self.act,
            "zone_type": self.zone_type,
            "generator": self.generator,
            "size": self.size,
            "density": self.density,
            "complexity": self.complexity,
            "monster_pool": list(self.monster_pool),
            "environment_theme": self.environment_theme,
            "has_waypoint": self.has_waypoint,
            "has_boss": self.has_boss,
            "boss_type": self.boss_type,
            "prerequisites": [p.to_dict() for p in self.prerequisites],
            "connections": [c.to_dict() for c in self.connections],
            "special_features": list(self.special_features),
            "safe_zone": self.is_safe_zone,
        }


def template_from_dict(data: Dict[str, Any]) -> ZoneTemplate:
    """Build a template from a plain record (inverse of ``ZoneTemplate.to_dict``)."""
    if not isinstance(data, dict):
        raise TemplateError("Zone template record must be a mapping")
    try:
        prereqs = [ZonePrerequisite(**p) for p in data.get("prerequisites") or []]
        conns = [ZoneConnection(**c) for c in data.get("connections") or []]
    except TypeError as e:
        raise TemplateError(f"Malformed template record: {e}") from e
    kwargs = {k: v for k, v in data.items() if k not in {"prerequisites", "connections", "safe_zone"}}
    try:
        return ZoneTemplate(prerequisites=tuple(prereqs), connections=tuple(conns), **kwargs)
    except TypeError as e:
        raise TemplateError(f"Malformed template record: {e}") from e


class TemplateRegistry:
    """Id-keyed template store. Insertion order is preserved for listings."""

    def __init__(self, templates: Iterable[ZoneTemplate] = ()):
        self._templates: Dict[str, ZoneTemplate] = {}
        self.register_many(templates)

    def register(self, template: ZoneTemplate) -> bool:
        if not isinstance(template, ZoneTemplate) or not template.id:
            logger.error(event="template_rejected", value=repr(template)[:80])
            return False
        if template.id in self._templates:
            logger.warn(event="template_replaced", template_id=template.id)
        self._templates[template.id] = template
        return True

    def register_many(self, templates: Iterable[ZoneTemplate]) -> int:
        return sum(1 for t in templates if self.register(t))

    def get(self, template_id: str) -> Optional[ZoneTemplate]:
        return self._templates.get(template_id)

    def all(self) -> List[ZoneTemplate]:
        return list(self._templates.values())

    def by_act(self, act: int) -> List[ZoneTemplate]:
        return [t for t in self._templates.values() if t.act == act]

    def towns(self) -> List[ZoneTemplate]:
        return [t for t in self._templates.values() if t.zone_type == "town"]

    def bosses(self) -> List[ZoneTemplate]:
        return [t for t in self._templates.values() if t.has_boss]

    def __contains__(self, template_id) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[ZoneTemplate]:
        return iter(list(self._templates.values()))


__all__ = [
    "ZONE_TYPES",
    "SIZES",
    "DENSITIES",
    "COMPLEXITIES",
    "PREREQUISITE_TYPES",
    "ZonePrerequisite",
    "ZoneConnection",
    "ZoneTemplate",
    "TemplateRegistry",
    "template_from_dict",
]
