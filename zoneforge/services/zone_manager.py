"""Zone instance manager.

Owns every live ``ZoneInstance`` plus a player -> instance ids index. All
mutation of instance state goes through the methods here. Expected domain
failures (unknown instance, blocked cell, locked waypoint ...) come back as
result values with a readable description; nothing here raises for them.

The instance table is guarded by a single re-entrant lock because the
Flask/Socket.IO host may interleave requests.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from ..events import EventBus
from ..logging_utils import get_logger
from ..models.zone_instance import ZoneInstance
from ..zones.cells import CellFeature, GridCell, Position
from ..zones.config import GenerationConfig
from ..zones.generator import ZoneGenerator
from ..zones.render import render_player_map
from ..zones.spawns import MonsterSpawn
from ..zones.templates import TemplateRegistry, ZoneTemplate
from ..zones.tiles import BOSS, CHEST, EMPTY, EXIT, HAZARD, WAYPOINT
from . import rewards

logger = get_logger("zoneforge.manager")

DEFAULT_MAX_AGE_MS = 900_000

DIRECTIONS = (
    ("north", 0, -1),
    ("south", 0, 1),
    ("east", 1, 0),
    ("west", -1, 0),
)

CELL_DESCRIPTIONS = {
    EMPTY: "An open area.",
    WAYPOINT: "A waypoint pulses with mystical energy.",
    EXIT: "A path leads to another area.",
    CHEST: "A treasure chest sits here.",
    BOSS: "An ominous presence fills this area.",
}
DEFAULT_CELL_DESCRIPTION = "You are here."
UNEXPLORED_DESCRIPTION = "An unexplored area"

# Event names
INSTANCE_CREATED = "zone.instance.created"
INSTANCE_RESET = "zone.instance.reset"
WAYPOINT_UNLOCKED = "zone.waypoint.unlocked"
MONSTER_DEFEATED = "zone.monster.defeated"
ZONE_CLEARED = "zone.cleared"
INSTANCES_CLEANED = "zone.instances.cleaned"
INSTANCES_CLEARED = "zone.instances.cleared"
ZONE_TRANSITION = "zone.transition"


def describe_cell(cell: GridCell) -> str:
    if cell.type == HAZARD:
        description = cell.features[0].description if cell.features else "Dangerous area."
    else:
        description = CELL_DESCRIPTIONS.get(cell.type, DEFAULT_CELL_DESCRIPTION)
    for feature in cell.features:
        if feature.type != HAZARD:
            description += f" {feature.description}"
    return description


def as_position(value) -> Position:
    """Accept a Position, an (x, y) pair or a {"x":..,"y":..} mapping."""
    if isinstance(value, Position):
        return value
    if isinstance(value, dict):
        return Position(int(value["x"]), int(value["y"]))
    x, y = value
    return Position(int(x), int(y))


# ------------------------------------------------------------------ results
@dataclass
class MoveResult:
    success: bool
    description: str
    combat: Optional[MonsterSpawn] = None
    position: Optional[Position] = None

    def to_dict(self):
        return {
            "success": self.success,
            "description": self.description,
            "combat": self.combat.to_dict() if self.combat else None,
            "position": self.position.to_dict() if self.position else None,
        }


@dataclass
class DirectionOption:
    direction: str
    position: Position
    description: str

    def to_dict(self):
        return {"direction": self.direction, "position": self.position.to_dict(), "description": self.description}


@dataclass
class DefeatResult:
    success: bool
    experience: int = 0
    loot: List[str] = field(default_factory=list)
    progress: int = 0
    cleared: bool = False
    description: str = ""

    def to_dict(self):
        return {
            "success": self.success,
            "experience": self.experience,
            "loot": list(self.loot),
            "progress": self.progress,
            "cleared": self.cleared,
            "description": self.description,
        }


@dataclass
class WaypointResult:
    success: bool
    description: str
    available_destinations: Optional[List[str]] = None

    def to_dict(self):
        out = {"success": self.success, "description": self.description}
        if self.available_destinations is not None:
            out["available_destinations"] = list(self.available_destinations)
        return out


@dataclass
class FeatureResult:
    success: bool
    description: str
    feature: Optional[CellFeature] = None
    loot: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "success": self.success,
            "description": self.description,
            "feature": self.feature.to_dict() if self.feature else None,
            "loot": list(self.loot),
        }


@dataclass
class AccessResult:
    can_access: bool
    missing_prerequisites: List[str] = field(default_factory=list)

    def to_dict(self):
        return {"can_access": self.can_access, "missing_prerequisites": list(self.missing_prerequisites)}


@dataclass
class TransitionResult:
    success: bool
    description: str
    instance_id: Optional[str] = None
    position: Optional[Position] = None

    def to_dict(self):
        return {
            "success": self.success,
            "description": self.description,
            "instance_id": self.instance_id,
            "position": self.position.to_dict() if self.position else None,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


class ZoneInstanceManager:
    def __init__(
        self,
        events: Optional[EventBus] = None,
        generator: Optional[ZoneGenerator] = None,
        clock: Optional[Callable[[], int]] = None,
        rng=None,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
    ):
        self.templates = TemplateRegistry()
        self.events = events
        self.generator = generator or ZoneGenerator()
        self.max_age_ms = max_age_ms
        self._clock = clock or _now_ms
        self._rng = rng or random
        self._instances: Dict[str, ZoneInstance] = {}
        self._player_instances: Dict[str, List[str]] = {}
        self._boss_kills: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------- wiring
    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        if self.events is not None:
            self.events.emit(event_type, data)

    def register_template(self, template: ZoneTemplate) -> bool:
        return self.templates.register(template)

    def register_templates(self, templates: Iterable[ZoneTemplate]) -> int:
        return self.templates.register_many(templates)

    # ----------------------------------------------------------- lifecycle
    def _new_instance_id(self, template_id: str, player_id: str, now: int) -> str:
        base = f"{template_id}-{player_id}-{now}"
        instance_id = base
        n = 1
        while instance_id in self._instances:
            instance_id = f"{base}-{n}"
            n += 1
        return instance_id

    def create_zone_instance(
        self, template_id: str, player_id: str, config: Optional[GenerationConfig] = None
    ) -> Optional[ZoneInstance]:
        template = self.templates.get(template_id)
        if template is None:
            logger.error(event="zone_template_not_found", template_id=template_id, player_id=player_id)
            return None
        generated = self.generator.generate_zone(template, config)
        with self._lock:
            now = self._clock()
            instance_id = self._new_instance_id(template_id, player_id, now)
            instance = ZoneInstance(
                instance_id=instance_id,
                template=template,
                player_id=player_id,
                grid=generated.grid,
                spawns=generated.spawns,
                created_at=now,
                seed=generated.seed,
            )
            # Nothing hostile to clear
            if not instance.spawns:
                instance.progress = 100
                instance.cleared = True
            self._instances[instance_id] = instance
            self._player_instances.setdefault(player_id, []).append(instance_id)
            logger.info(
                event="zone_instance_created",
                instance_id=instance_id,
                template_id=template_id,
                player_id=player_id,
                seed=generated.seed,
                spawns=len(generated.spawns),
            )
            self._emit(INSTANCE_CREATED, {
                "instance_id": instance_id,
                "template_id": template_id,
                "player_id": player_id,
                "zone_id": template.id,
            })
            return instance

    def get_zone_instance(self, instance_id: str) -> Optional[ZoneInstance]:
        with self._lock:
            return self._instances.get(instance_id)

    def _find_player_instance(self, template_id: str, player_id: str) -> Optional[ZoneInstance]:
        for iid in self._player_instances.get(player_id, ()):
            inst = self._instances.get(iid)
            if inst is not None and inst.template.id == template_id:
                return inst
        return None

    def get_or_create_zone_instance(self, template_id: str, player_id: str) -> Optional[ZoneInstance]:
        with self._lock:
            existing = self._find_player_instance(template_id, player_id)
            if existing is not None:
                return existing
            return self.create_zone_instance(template_id, player_id)

    def _remove_instance(self, instance_id: str) -> Optional[ZoneInstance]:
        inst = self._instances.pop(instance_id, None)
        if inst is None:
            return None
        ids = self._player_instances.get(inst.player_id)
        if ids is not None:
            if instance_id in ids:
                ids.remove(instance_id)
            if not ids:
                del self._player_instances[inst.player_id]
        return inst

    def reset_zone_instance(
        self, template_id: str, player_id: str, config: Optional[GenerationConfig] = None
    ) -> Optional[ZoneInstance]:
        """Discard the player's copy of ``template_id`` and generate a fresh one."""
        with self._lock:
            if template_id not in self.templates:
                logger.error(event="zone_template_not_found", template_id=template_id, player_id=player_id)
                return None
            old_ids = [
                iid for iid in list(self._player_instances.get(player_id, ()))
                if self._instances[iid].template.id == template_id
            ]
            # Old copies hold their ids until the new one is assigned
            instance = self.create_zone_instance(template_id, player_id, config)
            for iid in old_ids:
                self._remove_instance(iid)
            self._emit(INSTANCE_RESET, {
                "template_id": template_id,
                "player_id": player_id,
                "old_instance_ids": old_ids,
                "instance_id": instance.instance_id if instance else None,
            })
            return instance

    def get_player_instances(self, player_id: str) -> List[ZoneInstance]:
        with self._lock:
            return [self._instances[iid] for iid in self._player_instances.get(player_id, ()) if iid in self._instances]

    def clear_player_instances(self, player_id: str) -> int:
        with self._lock:
            ids = list(self._player_instances.get(player_id, ()))
            for iid in ids:
                self._remove_instance(iid)
            self._player_instances.pop(player_id, None)
            if ids:
                self._emit(INSTANCES_CLEARED, {"player_id": player_id, "deleted_count": len(ids)})
            return len(ids)

    def cleanup_expired_instances(self, max_age_ms: Optional[int] = None) -> int:
        max_age = self.max_age_ms if max_age_ms is None else max_age_ms
        with self._lock:
            now = self._clock()
            expired = [iid for iid, inst in self._instances.items() if now - inst.created_at > max_age]
            for iid in expired:
                self._remove_instance(iid)
            if expired:
                logger.info(event="zone_instances_cleaned", deleted_count=len(expired), max_age_ms=max_age)
                self._emit(INSTANCES_CLEANED, {"deleted_count": len(expired)})
            return len(expired)

    def instance_count(self) -> int:
        with self._lock:
            return len(self._instances)

    # ------------------------------------------------------------ movement
    def get_cell_at_position(self, instance_id: str, position) -> Optional[GridCell]:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return None
            pos = as_position(position)
            return inst.grid.cell_at(pos.x, pos.y)

    def get_zone_entry_position(self, instance_id: str) -> Optional[Position]:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None or not inst.grid.entry_points:
                return None
            return inst.grid.entry_points[0]

    def move_player_in_zone(self, instance_id: str, position) -> MoveResult:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return MoveResult(False, "Zone instance not found")
            pos = as_position(position)
            cell = inst.grid.cell_at(pos.x, pos.y)
            if cell is None:
                return MoveResult(False, "Invalid position")
            if cell.blocked:
                return MoveResult(False, "Path is blocked")

            cell.discovered = True
            inst.visited_cells.add(cell.key)
            self._relocate_player(inst, cell)

            if cell.type == WAYPOINT and inst.template.has_waypoint and not inst.waypoint_unlocked:
                inst.waypoint_unlocked = True
                self._emit(WAYPOINT_UNLOCKED, {
                    "instance_id": inst.instance_id,
                    "player_id": inst.player_id,
                    "template_id": inst.template.id,
                })

            description = describe_cell(cell)
            combat = inst.spawn_at(pos)
            if combat is not None:
                description += f"\n{combat.description} blocks your path!"
            return MoveResult(True, description, combat=combat, position=pos)

    def _relocate_player(self, inst: ZoneInstance, cell: GridCell) -> None:
        if inst.player_position is not None:
            previous = inst.grid.cell_at(inst.player_position.x, inst.player_position.y)
            if previous is not None and inst.player_id in previous.entities:
                previous.entities.remove(inst.player_id)
        if inst.player_id not in cell.entities:
            cell.entities.append(inst.player_id)
        inst.player_position = cell.position

    def get_available_directions(self, instance_id: str, position) -> List[DirectionOption]:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return []
            pos = as_position(position)
            options = []
            for name, dx, dy in DIRECTIONS:
                cell = inst.grid.cell_at(pos.x + dx, pos.y + dy)
                if cell is None or cell.blocked:
                    continue
                description = describe_cell(cell) if cell.discovered else UNEXPLORED_DESCRIPTION
                options.append(DirectionOption(name, cell.position, description))
            return options

    # -------------------------------------------------------------- combat
    def defeat_monster_pack(self, instance_id: str, position) -> DefeatResult:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return DefeatResult(False, description="Zone instance not found")
            pos = as_position(position)
            spawn = inst.spawn_at(pos)
            if spawn is None:
                return DefeatResult(False, progress=inst.progress, cleared=inst.cleared,
                                    description="No monster pack at that position")
            inst.spawns.remove(spawn)
            experience = rewards.experience_for(spawn)
            loot = rewards.roll_pack_loot(spawn, self._rng)
            if spawn.is_boss:
                self._boss_kills.setdefault(inst.player_id, set()).update(spawn.monster_types)
            self._update_progress(inst)
            self._emit(MONSTER_DEFEATED, {
                "instance_id": inst.instance_id,
                "player_id": inst.player_id,
                "spawn": spawn.to_dict(),
                "experience": experience,
                "loot": list(loot),
            })
            return DefeatResult(
                True,
                experience=experience,
                loot=loot,
                progress=inst.progress,
                cleared=inst.cleared,
                description=f"Defeated {spawn.description}.",
            )

    def _update_progress(self, inst: ZoneInstance) -> None:
        total = inst.initial_spawn_count
        remaining = len(inst.spawns)
        progress = 100 if total <= 0 else (total - max(0, remaining)) * 100 // total
        inst.progress = max(inst.progress, min(100, progress))
        if inst.progress >= 100 and not inst.cleared:
            inst.cleared = True
            logger.info(event="zone_cleared", instance_id=inst.instance_id, player_id=inst.player_id)
            self._emit(ZONE_CLEARED, {
                "instance_id": inst.instance_id,
                "player_id": inst.player_id,
                "template_id": inst.template.id,
            })

    def boss_kills(self, player_id: str) -> Set[str]:
        with self._lock:
            return set(self._boss_kills.get(player_id, ()))

    # ----------------------------------------------------------- waypoints
    def _waypoint_destinations(self, inst: ZoneInstance) -> List[str]:
        out: List[str] = []
        for other in self.get_player_instances(inst.player_id):
            if other.template.id == inst.template.id or not other.waypoint_unlocked:
                continue
            if other.template.id not in out:
                out.append(other.template.id)
        return out

    def use_waypoint(self, instance_id: str, target_zone_id: Optional[str] = None) -> WaypointResult:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None or not inst.waypoint_unlocked:
                return WaypointResult(False, "Waypoint not available")
            if not target_zone_id:
                return WaypointResult(
                    True,
                    "Waypoint activated. Choose destination:",
                    available_destinations=self._waypoint_destinations(inst),
                )
            target = self.templates.get(target_zone_id)
            if target is None:
                return WaypointResult(False, f"Unknown destination: {target_zone_id}")
            return WaypointResult(True, f"Transported to {target.name}")

    # ------------------------------------------------------------ features
    def interact_with_feature(self, instance_id: str, position) -> FeatureResult:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return FeatureResult(False, "Zone instance not found")
            pos = as_position(position)
            cell = inst.grid.cell_at(pos.x, pos.y)
            if cell is None:
                return FeatureResult(False, "Invalid position")
            if cell.key not in inst.visited_cells:
                return FeatureResult(False, "You have not reached that spot yet")
            interactive = [f for f in cell.features if f.interactive]
            if not interactive:
                return FeatureResult(False, "Nothing to interact with here")
            feature = interactive[0]
            if feature.type == "chest":
                if feature.used:
                    return FeatureResult(False, f"The {feature.name} is empty.", feature=feature)
                feature.used = True
                loot = rewards.roll_chest_loot(self._rng)
                logger.debug(event="chest_opened", instance_id=inst.instance_id, loot=",".join(loot))
                return FeatureResult(True, f"You open the {feature.name}.", feature=feature, loot=loot)
            if feature.type == "npc":
                wares = ", ".join(feature.sells_category) or "nothing"
                return FeatureResult(True, f"{feature.name} offers {wares}.", feature=feature)
            return FeatureResult(True, feature.description, feature=feature)

    # ------------------------------------------------------------- display
    def get_zone_map(self, instance_id: str, player_position=None) -> str:
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return "Zone not found"
            pos = as_position(player_position) if player_position is not None else inst.player_position
            return render_player_map(inst.grid, pos)

    # -------------------------------------------------------------- access
    def _is_zone_cleared(self, template_id: str, player_id: str) -> bool:
        return any(i.template.id == template_id and i.cleared for i in self.get_player_instances(player_id))

    def can_access_zone(
        self,
        template_id: str,
        player_id: str,
        player_level: Optional[int] = None,
        items: Optional[Iterable[str]] = None,
    ) -> AccessResult:
        with self._lock:
            template = self.templates.get(template_id)
            if template is None:
                return AccessResult(False, ["Zone template not found"])
            owned = set(items) if items is not None else None
            missing = []
            for prereq in template.prerequisites:
                unmet = False
                if prereq.type == "zone_cleared":
                    unmet = not self._is_zone_cleared(str(prereq.value), player_id)
                elif prereq.type == "boss_killed":
                    unmet = str(prereq.value) not in self._boss_kills.get(player_id, ())
                elif prereq.type == "level_requirement":
                    unmet = player_level is not None and player_level < int(prereq.value)
                elif prereq.type == "item_possessed":
                    unmet = owned is not None and str(prereq.value) not in owned
                if unmet:
                    missing.append(prereq.description or f"{prereq.type}: {prereq.value}")
            return AccessResult(not missing, missing)

    def get_available_zones(self, player_id: str, player_level: Optional[int] = None) -> List[ZoneTemplate]:
        with self._lock:
            return [
                t for t in self.templates.all()
                if self.can_access_zone(t.id, player_id, player_level=player_level).can_access
            ]

    def move_to_zone(self, instance_id: str, target_zone_id: str) -> TransitionResult:
        """Follow a template connection into the player's instance of the target zone."""
        with self._lock:
            inst = self._instances.get(instance_id)
            if inst is None:
                return TransitionResult(False, "Zone instance not found")
            if inst.template.connection_to(target_zone_id) is None:
                return TransitionResult(False, f"No path from {inst.template.name} to {target_zone_id}")
            target = self.templates.get(target_zone_id)
            if target is None:
                return TransitionResult(False, "Zone not found")
            access = self.can_access_zone(target_zone_id, inst.player_id)
            if not access.can_access:
                return TransitionResult(False, "; ".join(access.missing_prerequisites))
            dest = self.get_or_create_zone_instance(target_zone_id, inst.player_id)
            if dest is None:
                return TransitionResult(False, "Zone not found")
            entry = dest.grid.entry_points[0] if dest.grid.entry_points else None
            if entry is not None:
                self.move_player_in_zone(dest.instance_id, entry)
            self._emit(ZONE_TRANSITION, {
                "player_id": inst.player_id,
                "from_instance_id": inst.instance_id,
                "to_instance_id": dest.instance_id,
                "template_id": target_zone_id,
            })
            return TransitionResult(True, f"You enter {target.name}.", instance_id=dest.instance_id, position=entry)


__all__ = [
    "ZoneInstanceManager",
    "MoveResult",
    "DirectionOption",
    "DefeatResult",
    "WaypointResult",
    "FeatureResult",
    "AccessResult",
    "TransitionResult",
    "describe_cell",
    "as_position",
    "DEFAULT_MAX_AGE_MS",
]
