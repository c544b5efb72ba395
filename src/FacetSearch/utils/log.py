"""FacetSearch package logger.

Every module logs through `log`. `configure_logging` installs a console
handler and, optionally, a per-command log file, with lines formatted as::

    10-18 14:02:11 [INFO] Search completed: total=42 hits=20 page=1
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

log = logging.getLogger("FacetSearch")

LOG_FORMAT = "%(asctime)s [%(levelshort)s] %(message)s"
LOG_DATE_FORMAT = "%m-%d %H:%M:%S"


class _ShortLevelFormatter(logging.Formatter):
    """Renders the level as four letters: DEBG, INFO, WARN or ERRO."""

    _SHORT = {"DEBUG": "DEBG", "WARNING": "WARN", "ERROR": "ERRO", "CRITICAL": "ERRO"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - stdlib name
        record.levelshort = self._SHORT.get(record.levelname, record.levelname[:4])
        return super().format(record)


def log_file_path(log_dir: str | Path, action: str, now: datetime | None = None) -> Path:
    """Return ``<log_dir>/<action>/<action>_<mmddHHMMSS>.log``."""
    stamp = (now or datetime.now()).strftime("%m%d%H%M%S")
    return Path(log_dir) / action / f"{action}_{stamp}.log"


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> Path | None:
    """Replace the package handlers.

    The console handler filters at `level`; the log file, written only when
    `log_to_file` is set and an `action` is named, records everything from
    DEBUG up. Handlers from a previous call are closed.

    Returns:
        The log file path, or None when logging to the console only.
    """
    console_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(console_level, int):
        console_level = logging.INFO
    formatter = _ShortLevelFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(formatter)
    log.addHandler(console)

    path: Path | None = None
    if log_to_file and action:
        path = log_file_path(log_dir or "log", action)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.setLevel(logging.DEBUG if path is not None else console_level)
    log.propagate = False
    return path
