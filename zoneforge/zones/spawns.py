"""Monster pack spawning for generated zones.

Each pack occupies one walkable ``empty`` cell. Rarity drives pack size and the
number of affixes. The unique tier belongs to the zone boss alone; a regular
pack that rolls unique is demoted to rare.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

from .cells import Position, ZoneGrid
from .config import DENSITY_FACTORS
from .rng import SeededRandom
from .tiles import EMPTY

if TYPE_CHECKING:  # pragma: no cover
    from .templates import ZoneTemplate

PACK_TYPES = ["melee", "ranged", "caster", "mixed"]
AFFIX_POOL = ["fast", "tanky", "regenerating", "extra_damage", "elemental"]
BOSS_AFFIXES = ["boss", "extra_life", "area_damage"]

# (upper bound of roll, rarity); first match wins
RARITY_THRESHOLDS = [(0.01, "unique"), (0.05, "rare"), (0.20, "magic")]
PACK_SIZE_RANGES = {"normal": (1, 3), "magic": (2, 4), "rare": (3, 6), "unique": (1, 1)}
AFFIX_COUNTS = {"normal": 0, "magic": 1, "rare": 2, "unique": 3}


@dataclass
class MonsterSpawn:
    position: Position
    pack_type: str
    monster_types: List[str]
    pack_size: int
    rarity: str
    affixes: List[str] = field(default_factory=list)
    description: str = ""

    @property
    def is_boss(self) -> bool:
        return self.pack_type == "boss"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "pack_type": self.pack_type,
            "monster_types": list(self.monster_types),
            "pack_size": self.pack_size,
            "rarity": self.rarity,
            "affixes": list(self.affixes),
            "description": self.description,
        }


def spawn_from_dict(data: Dict[str, Any]) -> MonsterSpawn:
    pos = data["position"]
    return MonsterSpawn(
        position=Position(int(pos["x"]), int(pos["y"])),
        pack_type=data.get("pack_type", "melee"),
        monster_types=list(data.get("monster_types") or []),
        pack_size=int(data.get("pack_size", 1)),
        rarity=data.get("rarity", "normal"),
        affixes=list(data.get("affixes") or []),
        description=data.get("description", ""),
    )


def roll_rarity(rng: SeededRandom) -> str:
    roll = rng.random()
    for bound, rarity in RARITY_THRESHOLDS:
        if roll < bound:
            return rarity
    return "normal"


def roll_pack_size(rarity: str, rng: SeededRandom) -> int:
    low, high = PACK_SIZE_RANGES.get(rarity, PACK_SIZE_RANGES["normal"])
    if low == high:
        return low
    return rng.randint(low, high)


def select_monster_types(pool: List[str], pack_size: int, rng: SeededRandom) -> List[str]:
    return rng.shuffle(pool)[: min(pack_size, 3)]


def roll_affixes(rarity: str, rng: SeededRandom) -> List[str]:
    count = AFFIX_COUNTS.get(rarity, 0)
    if not count:
        return []
    return rng.shuffle(AFFIX_POOL)[:count]


def describe_pack(monster_types: List[str], pack_size: int, rarity: str) -> str:
    size_text = "A" if pack_size == 1 else str(pack_size)
    rarity_text = "" if rarity == "normal" else f"{rarity} "
    if len(monster_types) == 1:
        monster_text = monster_types[0]
    else:
        monster_text = "mixed " + ", ".join(monster_types)
    return f"{size_text} {rarity_text}{monster_text}"


def generate_pack(template: "ZoneTemplate", position: Position, rng: SeededRandom) -> MonsterSpawn:
    rarity = roll_rarity(rng)
    if rarity == "unique":
        rarity = "rare"
    pack_size = roll_pack_size(rarity, rng)
    monster_types = select_monster_types(list(template.monster_pool), pack_size, rng)
    pack_type = rng.choice(PACK_TYPES)
    return MonsterSpawn(
        position=position,
        pack_type=pack_type,
        monster_types=monster_types,
        pack_size=pack_size,
        rarity=rarity,
        affixes=roll_affixes(rarity, rng),
        description=describe_pack(monster_types, pack_size, rarity),
    )


def boss_spawn(template: "ZoneTemplate", position: Position) -> MonsterSpawn:
    return MonsterSpawn(
        position=position,
        pack_type="boss",
        monster_types=[template.boss_type or "zone_boss"],
        pack_size=1,
        rarity="unique",
        affixes=list(BOSS_AFFIXES),
        description=f"The {template.boss_type or 'zone boss'} awaits",
    )


def generate_monster_spawns(template: "ZoneTemplate", grid: ZoneGrid, rng: SeededRandom) -> List[MonsterSpawn]:
    """Populate a generated grid with packs according to the template density."""
    if template.is_safe_zone:
        return []
    spawns: List[MonsterSpawn] = []
    if template.monster_pool:
        candidates = [
            c.position for c in grid.walkable_cells()
            if c.type == EMPTY and c.position != grid.boss_position
        ]
        count = int(len(candidates) * DENSITY_FACTORS.get(template.density, DENSITY_FACTORS["normal"]))
        for pos in rng.shuffle(candidates)[:count]:
            spawns.append(generate_pack(template, pos, rng))
    if template.has_boss and grid.boss_position is not None:
        spawns.append(boss_spawn(template, grid.boss_position))
    return spawns


__all__ = [
    "MonsterSpawn",
    "PACK_TYPES",
    "AFFIX_POOL",
    "BOSS_AFFIXES",
    "spawn_from_dict",
    "roll_rarity",
    "roll_pack_size",
    "select_monster_types",
    "roll_affixes",
    "describe_pack",
    "generate_pack",
    "boss_spawn",
    "generate_monster_spawns",
]
