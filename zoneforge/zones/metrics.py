from typing import Any, Dict

from .cells import ZoneGrid


def init_metrics() -> Dict[str, Any]:
    return {
        'rooms_placed': 0,
        'rooms_skipped': 0,
        'components_discarded': 0,
        'fallback_carves': 0,
        'chests_placed': 0,
        'npcs_placed': 0,
        'spawn_count': 0,
        'runtime_ms': 0.0,
    }


def cell_type_counts(grid: ZoneGrid) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for cell in grid.cells.values():
        counts[cell.type] = counts.get(cell.type, 0) + 1
    return counts
