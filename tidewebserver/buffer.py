"""A growable byte buffer with separate read and write positions."""

from __future__ import annotations

_INITIAL_SIZE = 256


class Buffer:
    """Bytes are written at the tail and read from the head."""

    def __init__(self) -> None:
        self._read_index = 0
        self._write_index = 0
        self._data = bytearray(_INITIAL_SIZE)

    def consume(self, length: int) -> None:
        """Drop ``length`` readable bytes; dropping all of them resets the buffer."""
        if len(self) > length:
            self._read_index += length
        else:
            self.consume_all()

    def consume_all(self) -> None:
        self._read_index = self._write_index = 0

    def write(self, data: bytes | bytearray | memoryview | str) -> None:
        if isinstance(data, str):
            data = data.encode()
        length = len(data)
        self._ensure_capacity(length)
        self._data[self._write_index:self._write_index + length] = data
        self._write_index += length

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes."""
        message = bytes(self._data[self._read_index:self._read_index + min(length, len(self))])
        self.consume(length)
        return message

    def read_all(self) -> bytes:
        return self.read(len(self))

    def peek(self) -> bytes:
        """Return the readable bytes without removing them."""
        return bytes(self._data[self._read_index:self._write_index])

    def __len__(self) -> int:
        return self._write_index - self._read_index

    def empty(self) -> bool:
        return len(self) == 0

    def writable(self) -> int:
        return len(self._data) - self._write_index

    def shrink_to_fit(self) -> None:
        """Release storage past the write position."""
        self._data = bytearray(self._data[:self._write_index])

    def _ensure_capacity(self, length: int) -> None:
        capacity = len(self._data)
        while capacity - self._write_index < length:
            capacity = max(capacity * 2, 1)
        if capacity > len(self._data):
            self._data.extend(bytes(capacity - len(self._data)))