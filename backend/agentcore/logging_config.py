"""Logging setup for agentcore entry points. Library modules only create loggers."""

import logging
from pathlib import Path
from typing import Callable

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries under the openai SDK log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

CONSOLE_HANDLER_NAME = "agentcore.console"


def _attach(root: logging.Logger, name: str, build: Callable[[], logging.Handler], level: int) -> logging.Handler:
    """Add the named handler once; later calls only refresh its level."""
    handler = next((h for h in root.handlers if h.get_name() == name), None)
    if handler is None:
        handler = build()
        handler.set_name(name)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    handler.setLevel(level)
    return handler


def setup_logging(
    log_level: str | int = "INFO",
    log_file: str | None = None,
    log_dir: str | Path = "./tmp",
) -> logging.Logger:
    """Configure the root logger for a CLI run and return it.

    Args:
        log_level: Level name or number; unknown names fall back to INFO.
        log_file: If provided, logs are also written to <log_dir>/<log_file>.
        log_dir: Directory for the log file, created on demand.
    """
    level = log_level if isinstance(log_level, int) else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    _attach(root, CONSOLE_HANDLER_NAME, logging.StreamHandler, level)

    if log_file:
        path = (Path(log_dir) / log_file).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        _attach(root, f"agentcore.file:{path}", lambda: logging.FileHandler(path, encoding="utf-8"), level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return root
