"""Placement of entry/exit points, waypoint, boss cell and cell features.

Runs after connectivity repair. Every position placed here ends up unblocked:
when a scan finds nothing suitable, a fixed fallback cell is carved open and
joined to the nearest walkable cell with an L corridor.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from . import config as cfg
from .cells import CellFeature, ExitPoint, GridCell, Position, ZoneGrid
from .connectivity import nearest_open_cell
from .layouts import carve_l_corridor
from .rng import SeededRandom
from .tiles import BOSS, CHEST, EMPTY, EXIT, NPC, WAYPOINT

if TYPE_CHECKING:  # pragma: no cover
    from .templates import ZoneTemplate

DEFAULT_EXIT_TARGET = "next_zone"
DEFAULT_EXIT_DESCRIPTION = "A path leads deeper into the area"

NPC_TYPES = [
    {"type": "weapon_vendor", "name": "Weapons Master", "sells": ["weapons", "ammunition"]},
    {"type": "armor_vendor", "name": "Armorer", "sells": ["armor", "shields"]},
    {"type": "accessory_vendor", "name": "Jeweler", "sells": ["rings", "amulets", "belts"]},
    {"type": "flask_vendor", "name": "Alchemist", "sells": ["flasks", "potions"]},
    {"type": "general_vendor", "name": "General Merchant", "sells": ["consumables", "misc"]},
    {"type": "waypoint_master", "name": "Waypoint Master", "sells": ["waypoint_scrolls"]},
]


def _carve_fallback(grid: ZoneGrid, pos: Position, stats: Dict) -> Position:
    """Open ``pos`` and join it to the walkable region if it is walled."""
    cell = grid.cell_at(pos.x, pos.y)
    if cell.blocked:
        target = nearest_open_cell(grid, pos)
        if target is None:
            cell.set_open()
        else:
            carve_l_corridor(grid, pos, target)
        stats["fallback_carves"] = stats.get("fallback_carves", 0) + 1
    return pos


def place_entry_points(grid: ZoneGrid, stats: Dict) -> Position:
    for y in range(grid.height):
        cell = grid.cell_at(0, y)
        if not cell.blocked:
            entry = cell.position
            break
    else:
        entry = _carve_fallback(grid, Position(0, grid.height // 2), stats)
    grid.entry_points.append(entry)
    return entry


def place_exit_points(grid: ZoneGrid, template: "ZoneTemplate", stats: Dict) -> ExitPoint:
    right = grid.width - 1
    for y in range(grid.height - 1, -1, -1):
        cell = grid.cell_at(right, y)
        if not cell.blocked:
            pos = cell.position
            break
    else:
        pos = _carve_fallback(grid, Position(right, grid.height // 2), stats)
    grid.cell_at(pos.x, pos.y).set_open(EXIT)
    if template.connections:
        first = template.connections[0]
        target, description = first.target_zone_id, first.description or DEFAULT_EXIT_DESCRIPTION
    else:
        target, description = DEFAULT_EXIT_TARGET, DEFAULT_EXIT_DESCRIPTION
    exit_point = ExitPoint(position=pos, target_zone_id=target, description=description)
    grid.exit_points.append(exit_point)
    return exit_point


def _closest_to_centre(cells: List[GridCell], cx: int, cy: int) -> Optional[GridCell]:
    best = None
    best_dist = None
    for cell in cells:
        dist = abs(cell.x - cx) + abs(cell.y - cy)
        if best_dist is None or dist < best_dist:
            best, best_dist = cell, dist
    return best


def place_waypoint(grid: ZoneGrid) -> Optional[Position]:
    """Mark the walkable cell nearest the grid centre as the waypoint.

    Plain ``empty`` cells win over exits so the exit marker is never overwritten.
    """
    cx, cy = grid.width // 2, grid.height // 2
    walkable = grid.walkable_cells()
    chosen = _closest_to_centre([c for c in walkable if c.type == EMPTY], cx, cy)
    if chosen is None:
        chosen = _closest_to_centre(walkable, cx, cy)
    if chosen is None:
        return None
    chosen.set_open(WAYPOINT)
    grid.waypoint_position = chosen.position
    return chosen.position


def _boss_scan(grid: ZoneGrid, only_empty: bool) -> Optional[GridCell]:
    for x in range(grid.width - 1, -1, -1):
        for y in range(grid.height):
            cell = grid.cell_at(x, y)
            if cell.blocked:
                continue
            if only_empty and cell.type != EMPTY:
                continue
            return cell
    return None


def place_boss(grid: ZoneGrid, stats: Dict) -> Position:
    cell = _boss_scan(grid, only_empty=True) or _boss_scan(grid, only_empty=False)
    if cell is None:
        pos = _carve_fallback(grid, Position(grid.width - 1, grid.height // 2), stats)
        cell = grid.cell_at(pos.x, pos.y)
    cell.set_open(BOSS)
    grid.boss_position = cell.position
    return cell.position


def place_chests(grid: ZoneGrid, rng: SeededRandom) -> int:
    attempts = int(grid.width * grid.height * cfg.CHEST_RATIO)
    walkable = grid.walkable_cells()
    placed = 0
    for _ in range(min(attempts, len(walkable))):
        cell = walkable[rng.randint_below(len(walkable))]
        if cell.type != EMPTY:
            continue
        cell.set_open(CHEST)
        cell.features.append(CellFeature(
            type="chest",
            name="Treasure Chest",
            description="A wooden chest that might contain loot",
        ))
        placed += 1
    return placed


def npc_feature(index: int) -> CellFeature:
    npc = NPC_TYPES[index % len(NPC_TYPES)]
    return CellFeature(
        type="npc",
        name=npc["name"],
        description=f"A friendly {npc['name'].lower()} offering goods and services",
        npc_type=npc["type"],
        sells_category=list(npc["sells"]),
    )


def place_npcs(grid: ZoneGrid, rng: SeededRandom) -> int:
    available = [c for c in grid.walkable_cells() if c.type == EMPTY]
    count = min(int(grid.width * grid.height * cfg.NPC_RATIO), cfg.MAX_NPCS, len(available))
    for i in range(count):
        cell = available.pop(rng.randint_below(len(available)))
        cell.set_open(NPC)
        cell.features.append(npc_feature(i))
    return count


def place_features(grid: ZoneGrid, template: "ZoneTemplate", rng: SeededRandom, stats: Dict) -> None:
    """Chests for hostile zones, vendors for safe ones."""
    if template.is_safe_zone:
        stats["npcs_placed"] = place_npcs(grid, rng)
    else:
        stats["chests_placed"] = place_chests(grid, rng)


__all__ = [
    "NPC_TYPES",
    "DEFAULT_EXIT_TARGET",
    "DEFAULT_EXIT_DESCRIPTION",
    "place_entry_points",
    "place_exit_points",
    "place_waypoint",
    "place_boss",
    "place_chests",
    "place_npcs",
    "place_features",
    "npc_feature",
]
