"""Minimal logging hook: a single installable sink and bounded messages."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Optional

from .fixed import FixedString

_MESSAGE_CAPACITY = 256


class LogLevel(IntEnum):
    """Log severity; lower is more severe."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3
    TRACE = 4


LogSink = Callable[[LogLevel, str, str], None]

_sink: Optional[LogSink] = None


def set_log_sink(sink: Optional[LogSink]) -> None:
    """Install the function that receives log records, or None to drop them."""
    global _sink
    _sink = sink


def log(level: LogLevel, module: str, message: str) -> None:
    """Pass a record to the sink, with the message bounded to 256 bytes.

    Levels below WARN are dropped when assertions are disabled.
    """
    level = LogLevel(level)
    if level > LogLevel.WARN and not __debug__:
        return
    sink = _sink
    if sink is None:
        return
    bounded = FixedString(_MESSAGE_CAPACITY)
    bounded.write(message)
    sink(level, module, str(bounded))