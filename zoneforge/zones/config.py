from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .spawns import MonsterSpawn

SIZE_DIMENSIONS = {
    "small": (15, 15),
    "medium": (25, 25),
    "large": (35, 35),
}
DEFAULT_DIMENSIONS = (20, 20)

DENSITY_FACTORS = {"sparse": 0.2, "normal": 0.4, "dense": 0.6}

# Layout tuning
CAVE_FILL_PERCENTAGE = 0.45
CAVE_ITERATIONS = 5
CAVE_WALL_THRESHOLD = 4
ROOM_MIN_SIZE = 4
ROOM_MAX_SIZE = 9
ROOM_PLACEMENT_ATTEMPTS = 50
OPEN_OBSTACLE_RATIO = 0.1
CHEST_RATIO = 0.05
NPC_RATIO = 0.08
MAX_NPCS = 6


def size_dimensions(size: str) -> Tuple[int, int]:
    return SIZE_DIMENSIONS.get(size, DEFAULT_DIMENSIONS)


def metrics_enabled() -> bool:
    return os.getenv("ZONEFORGE_ENABLE_GENERATION_METRICS", "1").lower() not in {"0", "false", "no", ""}


@dataclass
class GenerationConfig:
    """Per-call generation knobs.

    ``seed`` rebinds the generator's random source; ``monster_overrides`` are
    appended verbatim to the generated spawn list.
    """

    seed: Optional[int] = None
    monster_overrides: List[MonsterSpawn] = field(default_factory=list)
    enable_metrics: Optional[bool] = None


__all__ = [
    "SIZE_DIMENSIONS",
    "DEFAULT_DIMENSIONS",
    "DENSITY_FACTORS",
    "GenerationConfig",
    "size_dimensions",
    "metrics_enabled",
]
