"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}


def get_log_dir() -> Path:
    return Path.home() / ".boxcar" / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_path = get_log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def set_stderr_level(level: str) -> None:
    """Replace loguru's default stderr sink with one at ``level``."""
    # 0 is the sink loguru installs on import
    sink_id = _SINK_IDS.pop("stderr", 0)
    try:
        logger.remove(sink_id)
    except ValueError:
        logger.debug("stderr sink {} was already removed", sink_id)
    _SINK_IDS["stderr"] = logger.add(sys.stderr, level=level)
