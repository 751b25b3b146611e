from typing import Dict


def init_metrics() -> Dict[str, int | float]:
    return {
        'target_rooms': 0,
        'rooms': 0,
        'attempts': 0,
        'rejected': 0,
        'tunnels': 0,
        'burrowed': 0,
        'relaxed': 0,
        'tiles_floor': 0,
        'tiles_brush': 0,
        'tiles_wall': 0,
        'monsters': 0,
        'items': 0,
        'runtime_ms': 0.0,
    }
