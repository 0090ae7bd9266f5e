"""
Console logger used by the reader, writer and visualizer.

Lines look like `[pyzev] [Reader] message`. Progress messages only appear
when the caller asked for them; warnings always go to stderr.
"""

import sys
from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2


class ZevLogger:
    """
    Prints messages at or above a threshold level.

    Usage:
        logger = create_logger(verbose=True, name="Reader")
        logger.info("Decoded 29 events")
        logger.warning("Event 'Demo' has no actors")
    """

    def __init__(self, name: Optional[str] = None, level: LogLevel = LogLevel.WARNING):
        self.name = name
        self.level = level

    @property
    def verbose(self) -> bool:
        return self.level <= LogLevel.INFO

    def _emit(self, level: LogLevel, message: str, stream=None):
        if level < self.level:
            return
        prefix = "[pyzev]"
        if self.name:
            prefix += f" [{self.name}]"
        if level == LogLevel.DEBUG:
            prefix += " DEBUG:"
        elif level == LogLevel.WARNING:
            prefix += " Warning:"
        print(f"{prefix} {message}", file=stream or sys.stdout)

    def debug(self, message: str):
        """Record layout details (offsets, patched pointers)."""
        self._emit(LogLevel.DEBUG, message)

    def info(self, message: str):
        self._emit(LogLevel.INFO, message)

    def warning(self, message: str):
        self._emit(LogLevel.WARNING, message, sys.stderr)


def create_logger(verbose: bool = True, name: Optional[str] = None, debug: bool = False) -> ZevLogger:
    """
    Build a logger for one component.

    Args:
        verbose: Show progress messages
        name: Component name (e.g. "Reader", "Writer")
        debug: Also show layout details; implies verbose
    """
    if debug:
        level = LogLevel.DEBUG
    elif verbose:
        level = LogLevel.INFO
    else:
        level = LogLevel.WARNING
    return ZevLogger(name=name, level=level)
