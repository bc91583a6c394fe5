"""A background thread that writes log data to rolling files."""

from __future__ import annotations

import threading

from .logfile import LogFile
from .logstream import LARGE_BUFFER_SIZE, LogBuffer
from .sync import CountDownLatch
from .threads import Thread


class AsyncLogging:
    """Front ends append into large buffers; a thread writes full ones out."""

    def __init__(self, basename: str, roll_size: int) -> None:
        self._basename = str(basename)
        self._roll_size = roll_size
        self._running = False
        self._cond = threading.Condition()
        self._current: LogBuffer = LogBuffer(LARGE_BUFFER_SIZE)
        self._next: LogBuffer | None = LogBuffer(LARGE_BUFFER_SIZE)
        self._buffers: list[LogBuffer] = []
        self._latch = CountDownLatch(1)
        self._thread = Thread(self._thread_func, "log thread")

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        """Queue ``data``; safe to call from any thread."""
        if isinstance(data, str):
            data = data.encode()
        with self._cond:
            if self._current.avail() > len(data):
                self._current.append(data)
                return
            self._buffers.append(self._current)
            self._current = self._next if self._next is not None else LogBuffer(LARGE_BUFFER_SIZE)
            self._next = None
            self._current.append(data)
            self._cond.notify()

    def start(self) -> None:
        """Start the writer thread and wait until it runs."""
        with self._cond:
            self._running = True
        self._thread.start()
        self._latch.wait()

    def stop(self) -> None:
        """Write out everything appended so far and stop the thread."""
        with self._cond:
            self._running = False
            self._cond.notify_all()
        self._thread.join()

    def __enter__(self) -> AsyncLogging:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False

    def _thread_func(self) -> None:
        self._latch.count_down()
        spare = [LogBuffer(LARGE_BUFFER_SIZE), LogBuffer(LARGE_BUFFER_SIZE)]
        with LogFile(self._basename, self._roll_size) as log_file:
            while True:
                with self._cond:
                    self._cond.wait_for(lambda: bool(self._buffers) or not self._running)
                    stopping = not self._running
                    self._buffers.append(self._current)
                    to_write, self._buffers = self._buffers, []
                    self._current = spare.pop()
                    if self._next is None:
                        self._next = spare.pop()

                for buffer in to_write:
                    log_file.write(buffer.data())

                del to_write[2:]
                while len(spare) < 2:
                    buffer = to_write.pop() if to_write else LogBuffer(LARGE_BUFFER_SIZE)
                    buffer.reset()
                    spare.append(buffer)
                log_file.flush()
                if stopping:
                    break