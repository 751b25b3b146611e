"""Structured key=value logging for the simulation.

Emits key=value pairs (or one JSON object per line) with a timestamp and level
so simulation traces stay greppable. Levels and output mode come from the
environment and are re-read on every call, which lets tests and the CLI flip
them without re-importing:

    DELVE_LOG_LEVEL   debug | info | warn | error   (default: warn)
    DELVE_LOG_JSON    1/true/yes/on for JSON lines

Usage:
    from delve.logging_utils import get_logger
    log = get_logger("delve.turns")
    log.debug(event="monster_step", entity=3, x=4, y=7)

All non-numeric values are str()'d with spaces replaced by underscores.
Reserved keys: level, ts, logger.

``configure_file_logging`` additionally mirrors every record into a rotating
log file through the standard ``logging`` module.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler

# name -> (numeric threshold, stdlib level for the file mirror)
LEVELS = {
    "debug": (10, logging.DEBUG),
    "info": (20, logging.INFO),
    "warn": (30, logging.WARNING),
    "error": (40, logging.ERROR),
}
_FILE_LOGGER_NAME = "delve.file"
_TRUTHY = {"1", "true", "yes", "on"}


def _threshold() -> int:
    name = os.getenv("DELVE_LOG_LEVEL", "warn").strip().lower()
    return LEVELS.get(name, LEVELS["warn"])[0]


def _as_json() -> bool:
    return os.getenv("DELVE_LOG_JSON", "").strip().lower() in _TRUTHY


def _kv(value) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    return str(value).replace(" ", "_")


def render(level: str, fields: dict) -> str:
    """One log line; ``None`` values are dropped."""
    kept = {k: v for k, v in fields.items() if v is not None}
    stamp = int(time.time())
    if _as_json():
        return json.dumps({**kept, "level": level, "ts": stamp}, separators=(",", ":"), default=str)
    head = f"level={level} ts={stamp}"
    return " ".join([head] + [f"{k}={_kv(v)}" for k, v in kept.items()])


class _Logger:
    def __init__(self, name: str = "delve"):
        self.name = name

    def _emit(self, level: str, fields: dict) -> None:
        threshold, stdlib_level = LEVELS[level]
        if threshold < _threshold():
            return
        fields.setdefault("logger", self.name)
        line = render(level, fields)
        print(line, file=sys.stderr if level == "error" else sys.stdout)
        mirror = logging.getLogger(_FILE_LOGGER_NAME)
        if mirror.handlers:
            mirror.log(stdlib_level, line)

    def debug(self, **fields):
        self._emit("debug", fields)

    def info(self, **fields):
        self._emit("info", fields)

    def warn(self, **fields):
        self._emit("warn", fields)

    def error(self, **fields):
        self._emit("error", fields)


_loggers: dict = {}


def get_logger(name: str) -> _Logger:
    return _loggers.setdefault(name, _Logger(name))


def configure_file_logging(path: str, max_bytes: int = 1_000_000, backup_count: int = 3) -> logging.Logger:
    """Mirror structured log lines into a rotating file.

    Idempotent: an existing handler is replaced, so calling twice never
    duplicates lines.
    """
    file_logger = logging.getLogger(_FILE_LOGGER_NAME)
    file_logger.setLevel(logging.DEBUG)
    file_logger.propagate = False
    for handler in list(file_logger.handlers):
        file_logger.removeHandler(handler)
        handler.close()
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    file_logger.addHandler(handler)
    return file_logger


log = get_logger("delve")
