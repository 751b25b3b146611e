"""Simulation configuration.

``SimConfig`` carries the knobs the turn scheduler and its services read:
perception radius, starting player stats, combat variance, idle wandering and
levelling. Values come from dataclass defaults, optionally overlaid with
``DELVE_<FIELD>`` environment variables (see ``SimConfig.from_env``). A ``.env``
file is honoured by the CLI, which loads it before any config is built.

Environment values that cannot be coerced to the field's type are ignored with
a warning rather than aborting startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict

from delve.logging_utils import get_logger

logger = get_logger("delve.config")

LEVEL_UP_STATS = ("constitution", "strength", "agility")


@dataclass
class SimConfig:
    fov_radius: int = 10
    player_hp: int = 100
    player_power: int = 4
    player_defense: int = 1
    damage_variance: int = 0
    message_log_limit: int = 250
    wander_enabled: bool = False
    wander_chance: float = 0.5
    level_up_stat: str = "constitution"

    def __post_init__(self):
        if self.fov_radius < 0:
            raise ValueError("fov_radius must be >= 0")
        if self.level_up_stat not in LEVEL_UP_STATS:
            raise ValueError(f"level_up_stat must be one of {LEVEL_UP_STATS}, got {self.level_up_stat!r}")

    @classmethod
    def from_env(cls, prefix: str = "DELVE_", **overrides) -> "SimConfig":
        values = env_overrides(cls, prefix)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _coerce(raw: str, default: Any) -> Any:
    raw = raw.strip()
    if isinstance(default, bool):
        return raw.lower() not in {"0", "false", "no", "off", ""}
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    if default is None:
        if raw.lower() in {"", "none", "null"}:
            return None
        return int(raw)
    return raw


def env_overrides(cls, prefix: str) -> Dict[str, Any]:
    """Collect ``{field: value}`` for every dataclass field set as ``<prefix><FIELD>`` in the environment."""
    defaults = {f.name: f.default for f in fields(cls)}
    values: Dict[str, Any] = {}
    for name, default in defaults.items():
        env_key = prefix + name.upper()
        if env_key not in os.environ:
            continue
        try:
            values[name] = _coerce(os.environ[env_key], default)
        except ValueError:
            logger.warn(event="config_ignored", key=env_key, value=os.environ[env_key])
    return values


__all__ = ["SimConfig", "LEVEL_UP_STATS", "env_overrides"]
