"""
Logging setup for the Level backend.

``setup_logging`` is called once by each entry point (the web server and the
digest job). Every module then asks ``get_logger(__name__)`` for its logger.

Output goes to stderr and, when ``LOG__ENABLE_FILE`` is set, to
``<LOG__FILE_DIR>/level.log``. Three line formats are available: ``simple``,
``detailed`` and ``json``.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from level.server.core.config import settings

LOG_LEVEL = settings.log.level.upper()
LOG_FORMAT = settings.log.format
LOG_FILE_DIR = settings.log.file_dir
ENABLE_FILE_LOGGING = settings.log.enable_file
LOG_FILE_NAME = "level.log"

FORMATS: Dict[str, str] = {
    "simple": "%(levelname)s %(name)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d %(funcName)s] %(message)s",
    "json": (
        '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
        '"location": "%(filename)s:%(lineno)d", "message": "%(message)s"}'
    ),
}

MODULE_LOG_LEVELS = {
    "level": "INFO",
    "level.server.api": "DEBUG",
    "level.server.graphql": "DEBUG",
    "level.server.services": "DEBUG",
    # Third-party libraries
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "asyncio": "WARNING",
    "httpx": "WARNING",
    "strawberry": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _handlers(level: str, formatter: logging.Formatter, to_file: bool) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if to_file:
        directory = Path(LOG_FILE_DIR)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = logging.FileHandler(directory / LOG_FILE_NAME)
        # The file keeps everything, the console only what was asked for
        log_file.setLevel(logging.DEBUG)
        log_file.setFormatter(formatter)
        handlers.append(log_file)
    return handlers


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
) -> None:
    """
    Install the root handlers and the per-module levels.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Console level, defaults to ``LOG__LEVEL``
        log_format: ``simple``, ``detailed`` or ``json``, defaults to ``LOG__FORMAT``
        enable_file: Also write to the log file, defaults to ``LOG__ENABLE_FILE``
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT
    to_file = ENABLE_FILE_LOGGING if enable_file is None else enable_file
    formatter = logging.Formatter(FORMATS.get(fmt, FORMATS["detailed"]), datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in _handlers(level, formatter, to_file):
        root.addHandler(handler)

    for name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(module_level)

    root.info(f"Logging ready (level={level}, format={fmt}, file={to_file})")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
