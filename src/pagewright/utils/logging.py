"""Log files for the Pagewright editor.

Logs are written next to the settings file (``<settings dir>/logs/pagewright.log``)
so that a ``--settings`` profile keeps its own history. Every handler masks
registered secrets, the hosting token in particular, before a record is written.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Iterable

__all__ = [
    "LOG_FILE_NAME",
    "SecretMaskingFilter",
    "get_log_path",
    "log_dir_for",
    "register_secret",
    "setup_logging",
]

LOG_FILE_NAME = "pagewright.log"
MASK = "[redacted]"
_LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
_LOG_DATE_FORMAT = "%H:%M:%S"
_LOG_FILE_BYTES = 512 * 1024
_LOG_FILE_BACKUPS = 2
_MIN_SECRET_LENGTH = 4
_THIRD_PARTY_LOGGERS = ("asyncio", "qasync", "httpx", "httpcore")


class SecretMaskingFilter(logging.Filter):
    """Replace registered secrets in log records with :data:`MASK`."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets: set[str] = set()
        for secret in secrets:
            self.add(secret)

    def add(self, secret: str | None) -> None:
        value = (secret or "").strip()
        # Short values would mask unrelated words.
        if len(value) >= _MIN_SECRET_LENGTH:
            self._secrets.add(value)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in self._secrets:
            masked = masked.replace(secret, MASK)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


_masking_filter = SecretMaskingFilter()
_log_path: Path | None = None


def log_dir_for(settings_path: Path) -> Path:
    """Return the log directory belonging to *settings_path*; ``PAGEWRIGHT_LOG_DIR`` wins."""

    override = os.environ.get("PAGEWRIGHT_LOG_DIR")
    if override:
        return Path(override).expanduser()
    return settings_path.expanduser().parent / "logs"


def register_secret(secret: str | None) -> None:
    """Mask *secret* in every record handled from now on."""

    _masking_filter.add(secret)


def setup_logging(log_dir: Path, *, debug: bool = False, console: bool = True) -> Path:
    """(Re)configure the root logger and return the active log file.

    The file receives DEBUG records in debug mode and INFO otherwise. The
    console only shows warnings unless debug mode is on. Calling it again
    replaces the previous handlers.
    """

    global _log_path
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=_LOG_FILE_BYTES, backupCount=_LOG_FILE_BACKUPS, encoding="utf-8"
    )
    file_handler.setLevel(level)
    handlers: list[logging.Handler] = [file_handler]
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level if debug else logging.WARNING)
        handlers.append(console_handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_masking_filter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    _log_path = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the active log file, or ``None`` before :func:`setup_logging` ran."""

    return _log_path
