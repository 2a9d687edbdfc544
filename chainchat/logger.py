"""Process-wide levelled logger writing to stdout or to an append-only file."""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import IO, Optional


class LogLevel(IntEnum):
    """Severity levels, ordered from most to least verbose."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    OFF = 5


_RESET = "\x1b[0m"
_STYLES = {
    LogLevel.DEBUG: "\x1b[34m",
    LogLevel.INFO: "\x1b[32m",
    LogLevel.WARN: "\x1b[33m",
    LogLevel.ERROR: "\x1b[31m",
    LogLevel.FATAL: "\x1b[1;41;37m",
}
_DIM = "\x1b[2m"

_lock = threading.Lock()
_level: LogLevel = LogLevel.OFF
_use_time = True
_log_file: Optional[IO[str]] = None


def set_log_level(level: LogLevel) -> None:
    """Set the minimum level that gets written."""
    global _level
    _level = LogLevel(level)


def set_log_file(path: Optional[str | os.PathLike]) -> None:
    """Send log lines to ``path`` (appending), creating parent directories.

    Passing ``None`` closes the current file and returns output to stdout.
    """
    global _log_file
    new_file: Optional[IO[str]] = None
    if path is not None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        new_file = open(target, "a", encoding="utf-8")
    with _lock:
        if _log_file is not None:
            _log_file.close()
        _log_file = new_file


def set_log_time(use_time: bool) -> None:
    """Enable or disable the UTC timestamp prefix."""
    global _use_time
    _use_time = bool(use_time)


def _time_string() -> str:
    if not _use_time:
        return ""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return now.strftime("%Y-%m-%dT%H:%M:%SZ") + " "


def _style(text: str, code: str) -> str:
    if not text or os.environ.get("NO_COLOR"):
        return text
    return f"{code}{text}{_RESET}"


def _log(level: LogLevel, message: str) -> None:
    if level < _level:
        return
    label = f"[{level.name}]"
    with _lock:
        if _log_file is not None:
            _log_file.write(f"{_time_string()}{label} {message}\n")
            _log_file.flush()
            return
    time_str = _style(_time_string(), _DIM)
    formatted = f"{time_str}{_style(label, _STYLES[level])} {message}\n"
    sys.stdout.write(formatted)


def debug(message: str) -> None:
    """Log at DEBUG level."""
    _log(LogLevel.DEBUG, message)


def info(message: str) -> None:
    """Log at INFO level."""
    _log(LogLevel.INFO, message)


def warn(message: str) -> None:
    """Log at WARN level."""
    _log(LogLevel.WARN, message)


def error(message: str) -> None:
    """Log at ERROR level."""
    _log(LogLevel.ERROR, message)


def fatal(message: str) -> None:
    """Log at FATAL level."""
    _log(LogLevel.FATAL, message)