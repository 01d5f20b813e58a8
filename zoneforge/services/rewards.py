"""Reward rolls for defeated monster packs and opened chests.

Returns plain loot tags; turning tags into concrete items is the job of the
surrounding game's item generation. The random source is injectable so tests
can pin outcomes (``rng = rng or random``).
"""

from __future__ import annotations

import random
from typing import List

BASE_EXPERIENCE = 10
RARITY_MULTIPLIERS = {"normal": 1.0, "magic": 1.5, "rare": 2.5, "unique": 5.0}

WEAPON_DROP_CHANCE = 0.3
ARMOR_DROP_CHANCE = 0.2
CHEST_DROP_TABLE = [("currency_orb", 0.5), ("weapon", 0.35), ("armor", 0.35), ("flask", 0.25)]


def experience_for(spawn) -> int:
    multiplier = RARITY_MULTIPLIERS.get(spawn.rarity, 1.0)
    return int(BASE_EXPERIENCE * spawn.pack_size * multiplier)


def roll_pack_loot(spawn, rng=None) -> List[str]:
    rng = rng or random
    loot = []
    if spawn.rarity in ("rare", "unique"):
        loot.append("currency_orb")
    if rng.random() < WEAPON_DROP_CHANCE:
        loot.append("weapon")
    if rng.random() < ARMOR_DROP_CHANCE:
        loot.append("armor")
    return loot


def roll_chest_loot(rng=None) -> List[str]:
    """At least one tag; a chest is never empty."""
    rng = rng or random
    loot = [tag for tag, chance in CHEST_DROP_TABLE if rng.random() < chance]
    if not loot:
        loot.append("currency_orb")
    return loot


__all__ = [
    "BASE_EXPERIENCE",
    "RARITY_MULTIPLIERS",
    "experience_for",
    "roll_pack_loot",
    "roll_chest_loot",
]
