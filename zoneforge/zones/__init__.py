"""Public zone generation interface."""

from .cells import CellFeature, ExitPoint, GridCell, Position, ZoneGrid  # noqa: F401
from .config import GenerationConfig  # noqa: F401
from .errors import TemplateError, UnknownGeneratorError  # noqa: F401
from .generator import GeneratedZone, ZoneGenerator, generate_zone  # noqa: F401
from .rng import SeededRandom  # noqa: F401
from .spawns import MonsterSpawn, generate_monster_spawns  # noqa: F401
from .templates import (  # noqa: F401
    TemplateRegistry,
    ZoneConnection,
    ZonePrerequisite,
    ZoneTemplate,
    template_from_dict,
)

__all__ = [
    "Position",
    "GridCell",
    "CellFeature",
    "ExitPoint",
    "ZoneGrid",
    "GenerationConfig",
    "TemplateError",
    "UnknownGeneratorError",
    "ZoneGenerator",
    "GeneratedZone",
    "generate_zone",
    "SeededRandom",
    "MonsterSpawn",
    "generate_monster_spawns",
    "ZoneTemplate",
    "ZonePrerequisite",
    "ZoneConnection",
    "TemplateRegistry",
    "template_from_dict",
]
