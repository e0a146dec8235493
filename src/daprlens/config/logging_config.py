"""Brief: Root logger setup for the daprlens CLI.

Inputs:
  - The ``logging`` section of the configuration.

Outputs:
  - Root handlers emitting ``<UTC time> [level] <logger>: <message>`` lines.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from .config_schema import LoggingConfig

# (config name, logging level, tag shown in output)
_LEVEL_TABLE = (
    ("debug", logging.DEBUG, "debug"),
    ("info", logging.INFO, "info"),
    ("warn", logging.WARNING, "warn"),
    ("warning", logging.WARNING, "warn"),
    ("error", logging.ERROR, "error"),
    ("crit", logging.CRITICAL, "crit"),
    ("critical", logging.CRITICAL, "crit"),
)
_LEVELS = {name: level for name, level, _ in _LEVEL_TABLE}
_TAGS = {level: f"[{tag}]" for _, level, tag in _LEVEL_TABLE}

LOG_FORMAT = "%(asctime)s %(level_tag)s %(name)s: %(message)s"


class BracketLevelFormatter(logging.Formatter):
    """Formatter adding a ``level_tag`` such as ``[warn]`` and UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, timezone.utc)
        return stamp.strftime(datefmt or "%Y-%m-%dT%H:%M:%SZ")

    def format(self, record):
        record.level_tag = _TAGS.get(record.levelno) or f"[lvl{record.levelno}]"
        return super().format(record)


def parse_level(value: Any) -> int:
    """Map a level name (debug/info/warn/error/crit) to a logging constant; default INFO."""

    return _LEVELS.get(str(value or "info").strip().lower(), logging.INFO)


def _build_handlers(data: Dict[str, Any]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if data.get("stderr", True):
        handlers.append(logging.StreamHandler(sys.stderr))

    target = data.get("file")
    if isinstance(target, str) and target.strip():
        log_path = os.path.abspath(os.path.expanduser(target.strip()))
        os.makedirs(os.path.dirname(log_path), exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
    return handlers


def init_logging(cfg: Optional[Union[LoggingConfig, Dict[str, Any]]]) -> None:
    """
    Brief: Replace the root logger's handlers according to ``cfg``.

    Inputs:
      - cfg: LoggingConfig, an equivalent mapping, or None for defaults.
        Keys: level (debug/info/warn/error/crit), stderr (bool), file (path
        opened in append mode, parent directories created).

    Outputs:
      - None. Python warnings are routed through logging as well.

    Example:
      >>> init_logging({"level": "debug", "stderr": True})  # doctest: +SKIP
    """
    if isinstance(cfg, LoggingConfig):
        data: Dict[str, Any] = {"level": cfg.level, "stderr": cfg.stderr, "file": cfg.file}
    else:
        data = dict(cfg or {})

    handlers = _build_handlers(data)
    formatter = BracketLevelFormatter(fmt=LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(parse_level(data.get("level")))

    logging.captureWarnings(True)
