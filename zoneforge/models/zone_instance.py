from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..zones.cells import Position, ZoneGrid
from ..zones.spawns import MonsterSpawn
from ..zones.templates import ZoneTemplate


@dataclass
class ZoneInstance:
    """One player's live copy of a generated zone.

    ``spawns`` shrinks as packs are defeated; ``initial_spawn_count`` keeps the
    original size so progress stays meaningful.
    """

    instance_id: str
    template: ZoneTemplate
    player_id: str
    grid: ZoneGrid
    spawns: List[MonsterSpawn]
    created_at: int
    seed: Optional[int] = None
    initial_spawn_count: int = 0
    cleared: bool = False
    progress: int = 0
    waypoint_unlocked: bool = False
    visited_cells: Set[str] = field(default_factory=set)
    player_position: Optional[Position] = None

    def __post_init__(self):
        if not self.initial_spawn_count:
            self.initial_spawn_count = len(self.spawns)

    @property
    def template_id(self) -> str:
        return self.template.id

    def spawn_at(self, position: Position) -> Optional[MonsterSpawn]:
        for spawn in self.spawns:
            if spawn.position.x == position.x and spawn.position.y == position.y:
                return spawn
        return None

    def summary(self) -> Dict[str, Any]:
        return {
            "instance_id": self.instance_id,
            "template_id": self.template.id,
            "name": self.template.name,
            "player_id": self.player_id,
            "width": self.grid.width,
            "height": self.grid.height,
            "created_at": self.created_at,
            "cleared": self.cleared,
            "progress": self.progress,
            "waypoint_unlocked": self.waypoint_unlocked,
            "remaining_packs": len(self.spawns),
            "player_position": self.player_position.to_dict() if self.player_position else None,
            "entry": self.grid.entry_points[0].to_dict() if self.grid.entry_points else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instance_id": self.instance_id,
            "template": self.template.to_dict(),
            "player_id": self.player_id,
            "grid": self.grid.to_dict(),
            "spawns": [s.to_dict() for s in self.spawns],
            "created_at": self.created_at,
            "seed": self.seed,
            "initial_spawn_count": self.initial_spawn_count,
            "cleared": self.cleared,
            "progress": self.progress,
            "waypoint_unlocked": self.waypoint_unlocked,
            "visited_cells": sorted(self.visited_cells),
            "player_position": self.player_position.to_dict() if self.player_position else None,
        }

    def __repr__(self):
        return f"<ZoneInstance {self.instance_id} player={self.player_id} progress={self.progress}>"
