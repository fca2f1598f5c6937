from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

from . import config

LEVEL_ALIASES = {"warn": "WARNING", "trace": "DEBUG", "off": "CRITICAL"}


def _level(name: str) -> Optional[int]:
    name = LEVEL_ALIASES.get(name.strip().lower(), name.strip().upper())
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else None


def parse_directive(directive: str) -> Tuple[Optional[int], Dict[str, int]]:
    """Parse ``debug`` / ``linkwatch.ping=debug,info`` style directives.

    Returns the root level (None if unset) and per-logger levels. Items
    with an unknown level are ignored.
    """
    root: Optional[int] = None
    loggers: Dict[str, int] = {}
    for item in directive.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        if sep:
            level = _level(value)
            if level is not None and name.strip():
                loggers[name.strip()] = level
        else:
            level = _level(name)
            if level is not None:
                root = level
    return root, loggers


def configure_logging(
    env: Mapping[str, str] = os.environ, console: Optional[Console] = None
) -> None:
    """Route log records to the terminal, verbosity from LINKWATCH_LOG."""
    root_level, loggers = parse_directive(env.get(config.LOG_ENV_VAR, ""))
    handler = RichHandler(
        console=console,
        show_path=False,
        log_time_format=config.LOG_TIME_FORMAT,
    )
    logging.basicConfig(
        level=root_level if root_level is not None else config.LOG_DEFAULT_LEVEL,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    for name, level in loggers.items():
        logging.getLogger(name).setLevel(level)


def silence() -> None:
    """Keep log output off a terminal owned by curses."""
    package = logging.getLogger("linkwatch")
    package.addHandler(logging.NullHandler())
    package.propagate = False
