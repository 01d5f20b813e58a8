"""Connectivity utilities: component labelling, largest-region repair and reachability.

All fills are iterative (explicit stack) over a flat ``y * width + x`` index so
large grids never hit the recursion limit.
"""
from __future__ import annotations

from typing import List, Optional, Set

from .cells import Position, ZoneGrid

_DIRS = ((0, 1), (0, -1), (1, 0), (-1, 0))


def _blocked_mask(grid: ZoneGrid) -> List[bool]:
    return [c.blocked for c in grid.iter_cells()]


def _fill(start: int, blocked: List[bool], visited: List[bool], width: int, height: int) -> List[int]:
    component = []
    stack = [start]
    while stack:
        idx = stack.pop()
        if visited[idx] or blocked[idx]:
            continue
        visited[idx] = True
        component.append(idx)
        x, y = idx % width, idx // width
        for dx, dy in _DIRS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height:
                nidx = ny * width + nx
                if not visited[nidx]:
                    stack.append(nidx)
    return component


def find_components(grid: ZoneGrid) -> List[List[int]]:
    """Return every 4-connected component of unblocked cells as index lists (scan order)."""
    width, height = grid.width, grid.height
    blocked = _blocked_mask(grid)
    visited = [False] * (width * height)
    components = []
    for idx in range(width * height):
        if not blocked[idx] and not visited[idx]:
            components.append(_fill(idx, blocked, visited, width, height))
    return components


def ensure_connectivity(grid: ZoneGrid) -> int:
    """Keep the largest walkable component; wall off the rest.

    Ties keep the component found first in row-major order. Returns the number
    of cells converted back to wall.
    """
    components = find_components(grid)
    if len(components) <= 1:
        return 0
    largest = components[0]
    for comp in components[1:]:
        if len(comp) > len(largest):
            largest = comp
    removed = 0
    for comp in components:
        if comp is largest:
            continue
        for idx in comp:
            grid.cell_at(idx % grid.width, idx // grid.width).set_wall()
            removed += 1
    return removed


def reachable_from(grid: ZoneGrid, start: Position) -> Set[Position]:
    """Positions reachable from ``start`` by 4-directional moves over unblocked cells."""
    if not grid.in_bounds(start.x, start.y):
        return set()
    width, height = grid.width, grid.height
    blocked = _blocked_mask(grid)
    visited = [False] * (width * height)
    comp = _fill(grid.index_of(start.x, start.y), blocked, visited, width, height)
    return {Position(idx % width, idx // width) for idx in comp}


def nearest_open_cell(grid: ZoneGrid, origin: Position) -> Optional[Position]:
    """Closest unblocked cell to ``origin`` by Manhattan distance (row-major tie-break)."""
    best = None
    best_dist = None
    for cell in grid.iter_cells():
        if cell.blocked:
            continue
        dist = abs(cell.x - origin.x) + abs(cell.y - origin.y)
        if best_dist is None or dist < best_dist:
            best, best_dist = cell.position, dist
    return best


__all__ = ["find_components", "ensure_connectivity", "reachable_from", "nearest_open_cell"]
