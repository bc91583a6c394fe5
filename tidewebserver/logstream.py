"""Fixed-size log buffers and a stream that formats values into them."""

from __future__ import annotations

SMALL_BUFFER_SIZE = 4000
LARGE_BUFFER_SIZE = 4000 * 1000
_MAX_NUMERIC_SIZE = 32


class LogBuffer:
    """A fixed-capacity byte buffer; appends that do not fit are dropped."""

    __slots__ = ("_data", "_current")

    def __init__(self, size: int = SMALL_BUFFER_SIZE) -> None:
        if size < 0:
            raise ValueError(f"buffer size must not be negative: {size}")
        self._data = bytearray(size)
        self._current = 0

    @property
    def capacity(self) -> int:
        return len(self._data)

    def append(self, data: bytes | bytearray | memoryview | str) -> bool:
        """Append ``data`` if it fits; return whether it was appended."""
        if isinstance(data, str):
            data = data.encode()
        length = len(data)
        if self.avail() > length:
            self._data[self._current:self._current + length] = data
            self._current += length
            return True
        return False

    def data(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._data[:self._current])

    def __len__(self) -> int:
        return self._current

    def avail(self) -> int:
        """Return the number of bytes still free."""
        return len(self._data) - self._current

    def reset(self) -> None:
        """Move the write position back to the start."""
        self._current = 0

    def bzero(self) -> None:
        """Zero the storage without moving the write position."""
        self._data[:] = bytes(len(self._data))

    def __str__(self) -> str:
        return self.data().decode("utf-8", errors="replace")


class LogStream:
    """Formats values with ``<<`` into a small log buffer."""

    def __init__(self) -> None:
        self._buffer = LogBuffer(SMALL_BUFFER_SIZE)

    def __lshift__(self, value: object) -> LogStream:
        if value is None:
            text = b"(null)"
        elif isinstance(value, bool):
            text = b"1" if value else b"0"
        elif isinstance(value, int):
            text = str(value).encode()
        elif isinstance(value, float):
            available = self._buffer.avail()
            if available >= _MAX_NUMERIC_SIZE:
                formatted = ("%f" % value).encode()
                self._buffer.append(formatted[:available - 1])
            return self
        elif isinstance(value, str):
            text = value.encode()
        elif isinstance(value, (bytes, bytearray, memoryview)):
            text = bytes(value)
        elif isinstance(value, LogBuffer):
            text = value.data()
        else:
            raise TypeError(f"cannot log value of type {type(value).__name__}")
        self._buffer.append(text)
        return self

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        self._buffer.append(data)

    @property
    def buffer(self) -> LogBuffer:
        return self._buffer

    def reset_buffer(self) -> None:
        self._buffer.reset()