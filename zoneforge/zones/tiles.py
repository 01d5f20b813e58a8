# Cell type constants centralized for modular imports
EMPTY = "empty"
WALL = "wall"
EXIT = "exit"
WAYPOINT = "waypoint"
CHEST = "chest"
BOSS = "boss"
SHRINE = "shrine"
NPC = "npc"
HAZARD = "hazard"  # display only, never produced by the generators

CELL_TYPES = (EMPTY, WALL, EXIT, WAYPOINT, CHEST, BOSS, SHRINE, NPC, HAZARD)

# Map glyphs used by the player-facing renderer
GLYPHS = {
    WALL: "#",
    EMPTY: ".",
    WAYPOINT: "W",
    EXIT: "E",
    CHEST: "C",
    HAZARD: "H",
    BOSS: "B",
    NPC: "N",
    SHRINE: "S",
}
UNDISCOVERED_GLYPH = "?"
PLAYER_GLYPH = "@"

__all__ = [
    "EMPTY",
    "WALL",
    "EXIT",
    "WAYPOINT",
    "CHEST",
    "BOSS",
    "SHRINE",
    "NPC",
    "HAZARD",
    "CELL_TYPES",
    "GLYPHS",
    "UNDISCOVERED_GLYPH",
    "PLAYER_GLYPH",
]
