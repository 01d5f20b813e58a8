"""Layout algorithms: linear corridors, cellular-automaton caves, room-and-corridor
dungeons, open fields and recursive-backtracker mazes.

Every layout takes ``(grid, rng, stats)`` and rewrites cell types in place.
``stats`` is a plain dict the pipeline folds into its generation metrics.
Layouts are selected through the ``LAYOUTS`` table; adding a kind means adding
one function and one table entry.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from . import config as cfg
from .cells import Position, ZoneGrid
from .errors import UnknownGeneratorError
from .rng import SeededRandom


@dataclass
class Room:
    x: int
    y: int
    w: int
    h: int

    def cells(self):
        for ix in range(self.x, self.x + self.w):
            for iy in range(self.y, self.y + self.h):
                yield ix, iy

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)


def fill_walls(grid: ZoneGrid) -> None:
    for cell in grid.cells.values():
        cell.set_wall()


def carve(grid: ZoneGrid, x: int, y: int) -> None:
    cell = grid.cell_at(x, y)
    if cell is not None and cell.blocked:
        cell.set_open()


def carve_l_corridor(grid: ZoneGrid, start: Tuple[int, int], end: Tuple[int, int]) -> None:
    """Carve a horizontal run then a vertical run from ``start`` to ``end`` (both inclusive)."""
    cx, cy = start
    tx, ty = end
    while cx != tx:
        carve(grid, cx, cy)
        cx += 1 if cx < tx else -1
    while cy != ty:
        carve(grid, cx, cy)
        cy += 1 if cy < ty else -1
    carve(grid, tx, ty)


# ---------------------------------------------------------------- linear
def carve_linear(grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    fill_walls(grid)
    width, height = grid.width, grid.height
    path_y = height // 2
    for x in range(width):
        carve(grid, x, path_y)
    branch_count = width // 8
    for _ in range(branch_count):
        branch_x = rng.randint_below(width - 2) + 1
        branch_len = rng.randint_below(3) + 2
        direction = -1 if rng.random() < 0.5 else 1
        for j in range(1, branch_len + 1):
            by = path_y + j * direction
            if 0 <= by < height:
                carve(grid, branch_x, by)
    stats["branches"] = branch_count


# ---------------------------------------------------------------- cave
def _wall_neighbours(blocked: List[bool], width: int, height: int, x: int, y: int) -> int:
    count = 0
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and blocked[ny * width + nx]:
                count += 1
    return count


def carve_cave(grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    fill_walls(grid)
    width, height = grid.width, grid.height
    for cell in grid.iter_cells():
        if rng.random() < cfg.CAVE_FILL_PERCENTAGE:
            cell.set_open()
    # Synchronous automaton rounds over a flat blocked[] snapshot
    for _ in range(cfg.CAVE_ITERATIONS):
        blocked = [c.blocked for c in grid.iter_cells()]
        for cell in grid.iter_cells():
            if _wall_neighbours(blocked, width, height, cell.x, cell.y) > cfg.CAVE_WALL_THRESHOLD:
                cell.set_wall()
            else:
                cell.set_open()
    stats["cave_iterations"] = cfg.CAVE_ITERATIONS


# ---------------------------------------------------------------- dungeon
def _room_overlaps(room: Room, existing: List[Room]) -> bool:
    for r in existing:
        if not (
            room.x + room.w < r.x
            or r.x + r.w < room.x
            or room.y + room.h < r.y
            or r.y + r.h < room.y
        ):
            return True
    return False


def place_rooms(grid: ZoneGrid, rng: SeededRandom) -> Tuple[List[Room], int]:
    """Place non-overlapping rooms; returns (rooms, skipped_count).

    A room that does not fit before the last of ROOM_PLACEMENT_ATTEMPTS draws
    is skipped, so a cramped grid may end up with fewer rooms than targeted.
    """
    width, height = grid.width, grid.height
    target = (width * height) // 200 + 3
    span = cfg.ROOM_MAX_SIZE - cfg.ROOM_MIN_SIZE + 1
    rooms: List[Room] = []
    skipped = 0
    for _ in range(target):
        placed = None
        for attempt in range(1, cfg.ROOM_PLACEMENT_ATTEMPTS + 1):
            rw = rng.randint_below(span) + cfg.ROOM_MIN_SIZE
            rh = rng.randint_below(span) + cfg.ROOM_MIN_SIZE
            rx = rng.randint_below(max(1, width - rw - 2)) + 1
            ry = rng.randint_below(max(1, height - rh - 2)) + 1
            candidate = Room(rx, ry, rw, rh)
            if not _room_overlaps(candidate, rooms):
                # The final attempt still draws but never places
                if attempt < cfg.ROOM_PLACEMENT_ATTEMPTS:
                    placed = candidate
                break
        if placed is None:
            skipped += 1
            continue
        rooms.append(placed)
    return rooms, skipped


def carve_dungeon(grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    fill_walls(grid)
    rooms, skipped = place_rooms(grid, rng)
    for room in rooms:
        for ix, iy in room.cells():
            carve(grid, ix, iy)
    for a, b in zip(rooms, rooms[1:]):
        carve_l_corridor(grid, a.center, b.center)
    stats["rooms_placed"] = len(rooms)
    stats["rooms_skipped"] = skipped


# ---------------------------------------------------------------- open
def carve_open(grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    for cell in grid.cells.values():
        cell.set_open()
    obstacles = int(grid.width * grid.height * cfg.OPEN_OBSTACLE_RATIO)
    for _ in range(obstacles):
        x = rng.randint_below(grid.width)
        y = rng.randint_below(grid.height)
        grid.cell_at(x, y).set_wall()
    stats["obstacle_drops"] = obstacles


# ---------------------------------------------------------------- maze
_MAZE_STEPS = ((0, 2), (2, 0), (0, -2), (-2, 0))


def _unvisited_lattice_neighbours(pos: Position, visited: set, width: int, height: int) -> List[Position]:
    out = []
    for dx, dy in _MAZE_STEPS:
        nx, ny = pos.x + dx, pos.y + dy
        if 0 < nx < width - 1 and 0 < ny < height - 1 and (nx, ny) not in visited:
            out.append(Position(nx, ny))
    return out


def carve_maze(grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    fill_walls(grid)
    width, height = grid.width, grid.height
    start = Position(1 + rng.randint_below(width - 2), 1 + rng.randint_below(height - 2))
    stack = [start]
    visited = set()
    while stack:
        current = stack[-1]
        if (current.x, current.y) not in visited:
            visited.add((current.x, current.y))
            carve(grid, current.x, current.y)
        options = _unvisited_lattice_neighbours(current, visited, width, height)
        if not options:
            stack.pop()
            continue
        nxt = rng.choice(options)
        carve(grid, (current.x + nxt.x) // 2, (current.y + nxt.y) // 2)
        stack.append(nxt)
    stats["maze_nodes"] = len(visited)


LayoutFn = Callable[[ZoneGrid, SeededRandom, Dict], None]

LAYOUTS: Dict[str, LayoutFn] = {
    "linear": carve_linear,
    "cave": carve_cave,
    "dungeon": carve_dungeon,
    "open": carve_open,
    "maze": carve_maze,
}

GENERATOR_KINDS = tuple(LAYOUTS)


def apply_layout(kind: str, grid: ZoneGrid, rng: SeededRandom, stats: Dict) -> None:
    try:
        layout = LAYOUTS[kind]
    except KeyError:
        raise UnknownGeneratorError(kind) from None
    layout(grid, rng, stats)


__all__ = [
    "Room",
    "LAYOUTS",
    "GENERATOR_KINDS",
    "apply_layout",
    "carve_l_corridor",
    "place_rooms",
    "carve_linear",
    "carve_cave",
    "carve_dungeon",
    "carve_open",
    "carve_maze",
]
