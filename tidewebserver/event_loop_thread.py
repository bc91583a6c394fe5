"""Event loops running on their own threads, singly or as a pool."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from .event_loop import EventLoop
from .threads import Thread

ThreadInitCallback = Callable[[EventLoop], object]


class EventLoopThread:
    """A thread that creates an EventLoop and runs it until stopped."""

    def __init__(self, name: str = "", init_callback: Optional[ThreadInitCallback] = None) -> None:
        self._loop: EventLoop | None = None
        self._finished = False
        self._joined = False
        self._cond = threading.Condition()
        self._callback = init_callback
        self._thread = Thread(self._thread_func, name)

    @property
    def name(self) -> str:
        return self._thread.name

    def start(self) -> EventLoop:
        """Start the thread and return its loop once it exists."""
        self._thread.start()
        with self._cond:
            self._cond.wait_for(lambda: self._loop is not None or self._finished)
            loop = self._loop
        if loop is None:
            self._join()
            raise RuntimeError(f"event loop thread {self.name!r} ended before its loop started")
        return loop

    def stop(self) -> None:
        """Stop the loop, if running, and wait for the thread."""
        with self._cond:
            loop = self._loop
        if loop is not None:
            loop.stop()
        if self._thread.started:
            self._join()

    def __enter__(self) -> EventLoop:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False

    def _join(self) -> None:
        if self._joined:
            return
        self._joined = True
        self._thread.join()

    def _thread_func(self) -> None:
        try:
            with EventLoop() as loop:
                if self._callback is not None:
                    self._callback(loop)
                with self._cond:
                    self._loop = loop
                    self._cond.notify_all()
                loop.loop()
        finally:
            with self._cond:
                self._loop = None
                self._finished = True
                self._cond.notify_all()


class EventLoopThreadPool:
    """A fixed number of loop threads handed out in turn."""

    def __init__(
        self,
        size: int = 4,
        name: str = "",
        init_callback: Optional[ThreadInitCallback] = None,
    ) -> None:
        if size < 0:
            raise ValueError(f"pool size must not be negative: {size}")
        self._name = name
        self._threads = [EventLoopThread(f"{name}{i}", init_callback) for i in range(size)]
        self._loops: list[EventLoop] = []
        self._next = 0
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            raise RuntimeError("event loop thread pool already started")
        self._started = True
        self._loops = [thread.start() for thread in self._threads]

    def get_loop(self) -> EventLoop:
        """Return the next loop in turn."""
        if not self._loops:
            raise RuntimeError("no event loops are running")
        self._next += 1
        if self._next == len(self._loops):
            self._next = 0
        return self._loops[self._next]

    @property
    def loops(self) -> list[EventLoop]:
        return list(self._loops)

    def stop(self) -> None:
        for thread in self._threads:
            thread.stop()
        self._loops = []

    def __enter__(self) -> EventLoopThreadPool:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False