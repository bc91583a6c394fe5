"""Thread synchronisation helpers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, TypeVar

T = TypeVar("T")


class CountDownLatch:
    """Lets threads wait until a counter has been counted down to zero."""

    def __init__(self, count: int) -> None:
        self._count = count
        self._cond = threading.Condition()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the count reaches zero; False if ``timeout`` ran out."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count <= 0, timeout)

    def count_down(self) -> None:
        with self._cond:
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count


class BlockingQueue(Generic[T]):
    """A FIFO queue whose ``take`` blocks until an item is available."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._cond = threading.Condition()

    def put(self, value: T) -> None:
        with self._cond:
            self._items.append(value)
            self._cond.notify()

    def take(self) -> T:
        with self._cond:
            self._cond.wait_for(lambda: bool(self._items))
            return self._items.popleft()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)