"""Microsecond-resolution timestamps."""

from __future__ import annotations

import time
from dataclasses import dataclass

MICROSECONDS_PER_SECOND = 1_000_000
_DISPLAY_OFFSET_SECONDS = 8 * 3600


def _split(microseconds: int) -> tuple[int, int]:
    """Split into whole seconds and the remainder, truncating toward zero."""
    seconds = abs(microseconds) // MICROSECONDS_PER_SECOND
    if microseconds < 0:
        seconds = -seconds
    return seconds, microseconds - seconds * MICROSECONDS_PER_SECOND


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time, counted in microseconds since the Unix epoch."""

    microseconds: int = 0

    def to_string(self) -> str:
        seconds, micro = _split(self.microseconds)
        return f"{seconds}. {micro:06d}"

    def to_formatted_string(self, show_microseconds: bool = True) -> str:
        """Format as ``YYYYMMDD HH:MM:SS[.ffffff]`` in UTC+8."""
        seconds, micro = _split(self.microseconds)
        tm = time.gmtime(seconds + _DISPLAY_OFFSET_SECONDS)
        text = (
            f"{tm.tm_year:4d}{tm.tm_mon:02d}{tm.tm_mday:02d} "
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}"
        )
        if show_microseconds:
            text += f".{micro:06d}"
        return text

    def valid(self) -> bool:
        return self.microseconds > 0

    def seconds_from_epoch(self) -> int:
        return _split(self.microseconds)[0]

    @classmethod
    def now(cls) -> Timestamp:
        return cls(time.time_ns() // 1000)

    @classmethod
    def invalid(cls) -> Timestamp:
        return cls()

    @classmethod
    def from_unix_time(cls, t: int, microseconds: int = 0) -> Timestamp:
        return cls(t * MICROSECONDS_PER_SECOND + microseconds)


def time_difference(high: Timestamp, low: Timestamp) -> float:
    """Return ``high - low`` in seconds."""
    return (high.microseconds - low.microseconds) / MICROSECONDS_PER_SECOND


def add_time(timestamp: Timestamp, seconds: float) -> Timestamp:
    """Return ``timestamp`` moved forward by ``seconds``."""
    delta = int(seconds * MICROSECONDS_PER_SECOND)
    return Timestamp(timestamp.microseconds + delta)