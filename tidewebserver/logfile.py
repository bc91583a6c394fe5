"""Log files that roll over by size and by day."""

from __future__ import annotations

import time

from .timestamp import Timestamp

ROLL_PER_SECONDS = 60 * 60 * 24


def log_file_name(basename: str) -> str:
    """Return ``basename`` followed by the current time and ``.log``."""
    return f"{basename}{Timestamp.now().to_formatted_string(False)}.log"


class LogFile:
    """Appends to a log file, starting a new one when it grows or a day passes."""

    def __init__(
        self,
        basename: str,
        roll_size: int,
        flush_interval: int = 3,
        check_every_n: int = 1024,
    ) -> None:
        self._basename = str(basename)
        self._roll_size = roll_size
        self._flush_interval = flush_interval
        self._check_every_n = check_every_n
        self._count = 0
        now = int(time.time())
        self._start_of_period = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
        self._last_roll = now
        self._last_flush = now
        self._open()

    def _open(self) -> None:
        self._filename = log_file_name(self._basename)
        self._file = open(self._filename, "ab")
        self._bytes_written = 0

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def bytes_written(self) -> int:
        """Bytes written to the current file."""
        return self._bytes_written

    def write(self, data: bytes | bytearray | memoryview | str) -> None:
        if isinstance(data, str):
            data = data.encode()
        self._file.write(data)
        self._bytes_written += len(data)

        if self._bytes_written > self._roll_size:
            self.roll()
            return
        self._count += 1
        if self._count >= self._check_every_n:
            self._count = 0
            now = int(time.time())
            this_period = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
            if this_period != self._start_of_period:
                self.roll()
            elif now - self._last_flush > self._flush_interval:
                self.flush()
                self._last_flush = now

    def flush(self) -> None:
        self._file.flush()

    def roll(self) -> bool:
        """Start a new file unless one was started this second."""
        now = int(time.time())
        if now <= self._last_roll:
            return False
        self._last_roll = now
        self._last_flush = now
        self._start_of_period = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
        self._file.close()
        self._open()
        return True

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> LogFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False