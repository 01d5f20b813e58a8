"""Grid containers shared by the generators, the instance manager and the renderer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional

from .tiles import EMPTY, WALL


class Position(NamedTuple):
    x: int
    y: int

    @property
    def key(self) -> str:
        return cell_key(self.x, self.y)

    def to_dict(self):
        return {"x": self.x, "y": self.y}


def cell_key(x: int, y: int) -> str:
    return f"{x},{y}"


@dataclass
class CellFeature:
    type: str
    name: str
    description: str
    interactive: bool = True
    used: bool = False
    npc_type: Optional[str] = None
    sells_category: List[str] = field(default_factory=list)

    def to_dict(self):
        out = {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "interactive": self.interactive,
            "used": self.used,
        }
        if self.npc_type:
            out["npc_type"] = self.npc_type
            out["sells_category"] = list(self.sells_category)
        return out


class GridCell:
    """Lightweight container for one zone grid square."""

    __slots__ = ("x", "y", "type", "blocked", "discovered", "entities", "features")

    def __init__(self, x: int, y: int, cell_type: str = EMPTY, blocked: bool = False):
        self.x = x
        self.y = y
        self.type = cell_type
        self.blocked = blocked
        self.discovered = False
        self.entities: List[str] = []
        self.features: List[CellFeature] = []

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def key(self) -> str:
        return cell_key(self.x, self.y)

    def set_wall(self):
        self.type = WALL
        self.blocked = True

    def set_open(self, cell_type: str = EMPTY):
        self.type = cell_type
        self.blocked = False

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "type": self.type,
            "blocked": self.blocked,
            "discovered": self.discovered,
            "entities": list(self.entities),
            "features": [f.to_dict() for f in self.features],
        }

    def __repr__(self):
        return f"<GridCell {self.x},{self.y} {self.type}{' blocked' if self.blocked else ''}>"


@dataclass
class ExitPoint:
    position: Position
    target_zone_id: str
    description: str

    def to_dict(self):
        return {
            "position": self.position.to_dict(),
            "target_zone_id": self.target_zone_id,
            "description": self.description,
        }


@dataclass
class ZoneGrid:
    width: int
    height: int
    cells: Dict[str, GridCell] = field(default_factory=dict)
    entry_points: List[Position] = field(default_factory=list)
    exit_points: List[ExitPoint] = field(default_factory=list)
    waypoint_position: Optional[Position] = None
    boss_position: Optional[Position] = None

    @classmethod
    def blank(cls, width: int, height: int) -> "ZoneGrid":
        grid = cls(width=width, height=height)
        for x in range(width):
            for y in range(height):
                grid.cells[cell_key(x, y)] = GridCell(x, y)
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Optional[GridCell]:
        return self.cells.get(cell_key(x, y))

    def index_of(self, x: int, y: int) -> int:
        return y * self.width + x

    def iter_cells(self) -> Iterator[GridCell]:
        """Row-major iteration (y outer, x inner)."""
        for y in range(self.height):
            for x in range(self.width):
                yield self.cells[cell_key(x, y)]

    def walkable_cells(self) -> List[GridCell]:
        return [c for c in self.iter_cells() if not c.blocked]

    def count_type(self, cell_type: str) -> int:
        return sum(1 for c in self.cells.values() if c.type == cell_type)

    def to_dict(self):
        return {
            "width": self.width,
            "height": self.height,
            "cells": [c.to_dict() for c in self.iter_cells()],
            "entry_points": [p.to_dict() for p in self.entry_points],
            "exit_points": [e.to_dict() for e in self.exit_points],
            "waypoint_position": self.waypoint_position.to_dict() if self.waypoint_position else None,
            "boss_position": self.boss_position.to_dict() if self.boss_position else None,
        }


__all__ = ["Position", "cell_key", "CellFeature", "GridCell", "ExitPoint", "ZoneGrid"]
