"""Authored zone templates for acts 1-5."""
from __future__ import annotations

from typing import List, Optional

from .templates import ZoneConnection as Conn
from .templates import ZonePrerequisite as Prereq
from .templates import ZoneTemplate

ZONE_TEMPLATES: List[ZoneTemplate] = [
    # Act 1
    ZoneTemplate(
        id="twilight_strand",
        name="The Twilight Strand",
        description="A dark beach where you first awaken, littered with the wreckage of ships.",
        level=1,
        act=1,
        zone_type="outdoor",
        generator="linear",
        size="small",
        density="sparse",
        complexity="simple",
        monster_pool=("zombie", "skeleton"),
        environment_theme="beach",
        connections=(Conn("lioneyes_watch", "Path to Lioneye's Watch"),),
        special_features=("tutorial",),
    ),
    ZoneTemplate(
        id="lioneyes_watch",
        name="Lioneye's Watch",
        description="A small town built into the coastal cliffs, serving as a safe haven.",
        level=1,
        act=1,
        zone_type="town",
        generator="dungeon",
        size="small",
        density="sparse",
        complexity="simple",
        environment_theme="town",
        has_waypoint=True,
        prerequisites=(Prereq("zone_cleared", "twilight_strand", "Clear the Twilight Strand"),),
        connections=(
            Conn("twilight_strand", "Return to the beach"),
            Conn("the_coast", "Head inland along the coast"),
        ),
        special_features=("vendors", "safe_zone"),
    ),
    ZoneTemplate(
        id="the_coast",
        name="The Coast",
        description="Rocky coastline with tide pools and scattered driftwood.",
        level=2,
        act=1,
        zone_type="outdoor",
        generator="open",
        size="medium",
        density="normal",
        complexity="moderate",
        monster_pool=("zombie", "skeleton", "rhoa"),
        environment_theme="coastal",
        has_waypoint=True,
        prerequisites=(Prereq("zone_cleared", "twilight_strand", "Find your way from the beach"),),
        connections=(
            Conn("lioneyes_watch", "Return to town"),
            Conn("tidal_island", "Cross to the tidal island"),
            Conn("mud_flats", "Follow the coast inland"),
        ),
        special_features=("optional_path",),
    ),
    ZoneTemplate(
        id="tidal_island",
        name="The Tidal Island",
        description="A small island accessible only at low tide, home to aggressive sea creatures.",
        level=3,
        act=1,
        zone_type="outdoor",
        generator="cave",
        size="small",
        density="dense",
        complexity="simple",
        monster_pool=("skeleton", "rhoa", "siren"),
        environment_theme="island",
        has_boss=True,
        boss_type="hailrake",
        prerequisites=(Prereq("zone_cleared", "the_coast", "Find the path from the coast"),),
        connections=(Conn("the_coast", "Return to the mainland"),),
        special_features=("optional_boss", "skill_point_quest"),
    ),
    ZoneTemplate(
        id="mud_flats",
        name="The Mud Flats",
        description="Vast muddy plains where the tide has receded, revealing ancient ruins.",
        level=4,
        act=1,
        zone_type="outdoor",
        generator="open",
        size="large",
        density="normal",
        complexity="moderate",
        monster_pool=("zombie", "rhoa", "goatman"),
        environment_theme="mudflats",
        has_waypoint=True,
        prerequisites=(Prereq("zone_cleared", "the_coast", "Clear the coast to reach the flats"),),
        connections=(
            Conn("the_coast", "Back to the rocky shore"),
            Conn("fetid_pool", "Explore the stagnant pool"),
            Conn("submerged_passage", "Enter the flooded caves"),
        ),
        special_features=("large_area", "multiple_exits"),
    ),
    # Act 2
    ZoneTemplate(
        id="southern_forest",
        name="The Southern Forest",
        description="Dense woodland filled with the sounds of wild beasts and rustling leaves.",
        level=13,
        act=2,
        zone_type="outdoor",
        generator="maze",
        size="large",
        density="normal",
        complexity="complex",
        monster_pool=("bandit", "ape", "spider"),
        environment_theme="forest",
        has_waypoint=True,
        prerequisites=(Prereq("boss_killed", "merveil", "Defeat Merveil to access Act 2"),),
        connections=(
            Conn("forest_encampment", "Find the encampment"),
            Conn("old_fields", "Head to the old fields"),
        ),
        special_features=("act_transition",),
    ),
    ZoneTemplate(
        id="forest_encampment",
        name="The Forest Encampment",
        description="A makeshift camp in a forest clearing, populated by exiles and merchants.",
        level=13,
        act=2,
        zone_type="town",
        generator="dungeon",
        size="small",
        density="sparse",
        complexity="simple",
        environment_theme="camp",
        has_waypoint=True,
        prerequisites=(Prereq("zone_cleared", "southern_forest", "Navigate through the forest"),),
        connections=(
            Conn("southern_forest", "Back to the forest"),
            Conn("old_fields", "Explore the fields"),
        ),
        special_features=("vendors", "safe_zone", "bandit_choice_hub"),
    ),
    # Act 3
    ZoneTemplate(
        id="city_of_sarn",
        name="The City of Sarn",
        description="Once-mighty city now overrun by the Blackguard and worse horrors.",
        level=24,
        act=3,
        zone_type="outdoor",
        generator="dungeon",
        size="large",
        density="dense",
        complexity="complex",
        monster_pool=("blackguard", "evangelist", "undying"),
        environment_theme="ruined_city",
        has_waypoint=True,
        prerequisites=(Prereq("boss_killed", "vaal_oversoul", "Defeat the Vaal Oversoul"),),
        connections=(
            Conn("sarn_encampment", "Find the encampment"),
            Conn("the_slums", "Enter the slums"),
        ),
        special_features=("act_transition", "urban_environment"),
    ),
    # Act 4
    ZoneTemplate(
        id="the_aqueduct",
        name="The Aqueduct",
        description="Ancient waterways leading to Highgate, now dry and cracked.",
        level=35,
        act=4,
        zone_type="indoor",
        generator="linear",
        size="medium",
        density="normal",
        complexity="moderate",
        monster_pool=("miner", "construct", "demon"),
        environment_theme="ancient_structure",
        has_waypoint=True,
        prerequisites=(Prereq("boss_killed", "dominus", "Defeat Dominus in the tower"),),
        connections=(
            Conn("highgate", "Reach Highgate"),
            Conn("dried_lake", "Cross the dried lake"),
        ),
        special_features=("act_transition",),
    ),
    # Act 5
    ZoneTemplate(
        id="slave_pens",
        name="The Slave Pens",
        description="Oriath's prison complex, now a nightmare of corruption and despair.",
        level=46,
        act=5,
        zone_type="indoor",
        generator="dungeon",
        size="medium",
        density="dense",
        complexity="complex",
        monster_pool=("templar", "oriath_citizen", "kitava_herald"),
        environment_theme="prison",
        has_waypoint=True,
        prerequisites=(Prereq("boss_killed", "malachai", "Escape from the Beast"),),
        connections=(
            Conn("overseer_tower", "Find the overseer's tower"),
            Conn("control_blocks", "Enter the control blocks"),
        ),
        special_features=("act_transition", "corruption_theme"),
    ),
]


def get_zone_template(template_id: str) -> Optional[ZoneTemplate]:
    for template in ZONE_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def get_zone_templates_by_act(act: int) -> List[ZoneTemplate]:
    return [t for t in ZONE_TEMPLATES if t.act == act]


def get_town_zone_templates() -> List[ZoneTemplate]:
    return [t for t in ZONE_TEMPLATES if t.zone_type == "town"]


def get_boss_zone_templates() -> List[ZoneTemplate]:
    return [t for t in ZONE_TEMPLATES if t.has_boss]


__all__ = [
    "ZONE_TEMPLATES",
    "get_zone_template",
    "get_zone_templates_by_act",
    "get_town_zone_templates",
    "get_boss_zone_templates",
]
