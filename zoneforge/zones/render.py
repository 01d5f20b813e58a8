"""ASCII rendering of zone grids.

``render_player_map`` is what a player sees: undiscovered cells are ``?``.
``render_debug_map`` reveals everything and overlays monster packs, for the
CLI and for eyeballing generator output.
"""
from __future__ import annotations

from typing import Iterable, Optional

from .cells import Position, ZoneGrid
from .tiles import GLYPHS, PLAYER_GLYPH, UNDISCOVERED_GLYPH

SPAWN_GLYPHS = {"unique": "U", "rare": "R"}
DEFAULT_SPAWN_GLYPH = "M"


def _glyph(cell_type: str) -> str:
    return GLYPHS.get(cell_type, " ")


def render_player_map(grid: ZoneGrid, player_position: Optional[Position] = None) -> str:
    lines = []
    for y in range(grid.height):
        row = []
        for x in range(grid.width):
            cell = grid.cell_at(x, y)
            if cell is None:
                row.append(" ")
            elif player_position is not None and (x, y) == (player_position.x, player_position.y):
                row.append(PLAYER_GLYPH)
            elif not cell.discovered:
                row.append(UNDISCOVERED_GLYPH)
            else:
                row.append(_glyph(cell.type))
        lines.append("".join(row))
    return "\n".join(lines)


def render_debug_map(grid: ZoneGrid, spawns: Iterable = (), player_position: Optional[Position] = None) -> str:
    overlay = {}
    for spawn in spawns:
        if spawn.pack_type == "boss":
            continue
        overlay[(spawn.position.x, spawn.position.y)] = SPAWN_GLYPHS.get(spawn.rarity, DEFAULT_SPAWN_GLYPH)
    if player_position is not None:
        overlay[(player_position.x, player_position.y)] = PLAYER_GLYPH
    lines = []
    for y in range(grid.height):
        lines.append("".join(overlay.get((x, y)) or _glyph(grid.cell_at(x, y).type) for x in range(grid.width)))
    return "\n".join(lines)


__all__ = ["render_player_map", "render_debug_map"]
