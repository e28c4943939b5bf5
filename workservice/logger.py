"""Logger construction with console and JSON output."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_SHORT_NAMES = {
    logging.DEBUG: "DBG",
    logging.INFO: "INF",
    logging.WARNING: "WRN",
    logging.ERROR: "ERR",
    logging.CRITICAL: "FTL",
}

_LONG_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}

_COLOURS = {
    logging.DEBUG: "\x1b[33m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[31m",
    logging.ERROR: "\x1b[1m\x1b[31m",
    logging.CRITICAL: "\x1b[1m\x1b[31m",
}
_RESET = "\x1b[0m"


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="seconds")


def _fields(record: logging.LogRecord) -> dict:
    fields = dict(getattr(record, "fields", None) or {})
    if record.exc_info and record.exc_info[1] is not None:
        fields["error"] = str(record.exc_info[1])
    return fields


class _ConsoleFormatter(logging.Formatter):
    def __init__(self, colour: bool, caller: bool) -> None:
        super().__init__()
        self._colour = colour
        self._caller = caller

    def format(self, record: logging.LogRecord) -> str:
        level = _SHORT_NAMES.get(record.levelno, record.levelname[:3].upper())
        if self._colour:
            level = f"{_COLOURS.get(record.levelno, '')}{level}{_RESET}"
        parts = [_timestamp(record), level]
        if self._caller:
            parts.append(f"{record.filename}:{record.lineno} >")
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in _fields(record).items())
        return " ".join(parts)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": _LONG_NAMES.get(record.levelno, record.levelname.lower()),
            **_fields(record),
            "time": _timestamp(record),
            "message": record.getMessage(),
        }
        return json.dumps(payload, default=str)


def _build(formatter: logging.Formatter, level: int) -> logging.Logger:
    logger = logging.Logger("workservice", level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def new_logger() -> logging.Logger:
    """Coloured console logger at info level that reports the caller."""
    return _build(_ConsoleFormatter(colour=True, caller=True), logging.INFO)


def new_logger_with_config(level: str, pretty: bool, no_color: bool) -> logging.Logger:
    """Logger with the given level name; console output if *pretty*, JSON otherwise.

    Unknown level names fall back to info.
    """
    formatter: logging.Formatter
    if pretty:
        formatter = _ConsoleFormatter(colour=not no_color, caller=False)
    else:
        formatter = _JsonFormatter()
    return _build(formatter, _LEVELS.get(level, logging.INFO))