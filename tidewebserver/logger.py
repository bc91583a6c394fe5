"""Leveled log lines with a replaceable output sink."""

from __future__ import annotations

import inspect
import os
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Mapping, Optional

from .logstream import LogStream
from .threads import tid
from .timestamp import MICROSECONDS_PER_SECOND, Timestamp


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


_LEVEL_NAMES = {
    LogLevel.TRACE: "TRACE ",
    LogLevel.DEBUG: "DEBUG ",
    LogLevel.INFO: "INFO ",
    LogLevel.WARN: "WARN ",
    LogLevel.ERROR: "ERRNO",
    LogLevel.FATAL: "FATAL ",
}


class FatalError(RuntimeError):
    """Raised after a FATAL log line has been written and flushed."""


OutputFunc = Callable[[bytes], object]
FlushFunc = Callable[[], object]


def init_log_level(environ: Optional[Mapping[str, str]] = None) -> LogLevel:
    """Pick the starting level from ``LOG_TRACE`` or ``LOG_DEBUG``."""
    env = os.environ if environ is None else environ
    if env.get("LOG_TRACE"):
        return LogLevel.TRACE
    if env.get("LOG_DEBUG"):
        return LogLevel.DEBUG
    return LogLevel.INFO


def _default_output(data: bytes) -> None:
    sys.stdout.write(data.decode("utf-8", errors="replace"))


def _default_flush() -> None:
    sys.stdout.flush()


@dataclass
class _Config:
    level: LogLevel
    output: OutputFunc
    flush: FlushFunc


_config = _Config(init_log_level(), _default_output, _default_flush)


def log_level() -> LogLevel:
    return _config.level


def set_log_level(level: LogLevel) -> None:
    _config.level = LogLevel(level)


def set_output(func: Optional[OutputFunc]) -> None:
    """Send finished log lines to ``func``; None restores standard output."""
    _config.output = _default_output if func is None else func


def set_flush(func: Optional[FlushFunc]) -> None:
    """Flush with ``func``; None restores flushing standard output."""
    _config.flush = _default_flush if func is None else func


def strerror(saved_errno: int) -> str:
    return os.strerror(saved_errno)


def source_basename(path: str) -> str:
    """Return the part of ``path`` after its last slash."""
    return path.rpartition("/")[2]


class Logger:
    """One log line: a header is written on creation, a trailer on finish."""

    def __init__(
        self,
        file: str,
        line: int,
        level: LogLevel = LogLevel.INFO,
        func: Optional[str] = None,
        saved_errno: int = 0,
    ) -> None:
        self._level = LogLevel(level)
        self._line = line
        self._basename = source_basename(file)
        self._time = Timestamp.now()
        self._stream = LogStream()
        self._finished = False

        micro = self._time.microseconds % MICROSECONDS_PER_SECOND
        self._stream << self._time.to_formatted_string(False) << f".{micro:06d} "
        self._stream << tid() << " "
        self._stream << _LEVEL_NAMES[self._level].ljust(6)
        if saved_errno:
            self._stream << strerror(saved_errno) << " (errno=" << saved_errno << ") "
        if func:
            self._stream << func << " "

    @property
    def stream(self) -> LogStream:
        return self._stream

    @property
    def level(self) -> LogLevel:
        return self._level

    def finish(self) -> None:
        """Write the line out; raise FatalError after a FATAL line."""
        if self._finished:
            return
        self._finished = True
        self._stream << " - " << self._basename << ":" << self._line << "\n"
        _config.output(self._stream.buffer.data())
        if self._level is LogLevel.FATAL:
            _config.flush()
            raise FatalError(f"fatal log at {self._basename}:{self._line}")

    def __enter__(self) -> LogStream:
        return self._stream

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.finish()
        return False


def log(
    level: LogLevel,
    message: object,
    file: Optional[str] = None,
    line: Optional[int] = None,
) -> None:
    """Log ``message`` at ``level``; TRACE to INFO obey the current level."""
    level = LogLevel(level)
    if level <= LogLevel.INFO and _config.level > level:
        return
    if file is None or line is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        if file is None:
            file = caller.f_code.co_filename if caller is not None else ""
        if line is None:
            line = caller.f_lineno if caller is not None else 0
    entry = Logger(file, line, level)
    entry.stream << message
    entry.finish()