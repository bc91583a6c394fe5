"""Named worker threads and information about the current thread."""

from __future__ import annotations

import sys
import threading
from typing import Callable

from .sync import CountDownLatch

_state = threading.local()


def tid() -> int:
    """Return the operating-system id of the calling thread."""
    return threading.get_native_id()


def is_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


def thread_name() -> str:
    """Return the name of the calling thread."""
    name = getattr(_state, "name", None)
    if name is not None:
        return name
    if is_main_thread():
        return "main"
    return threading.current_thread().name


class Thread:
    """A thread running one function, whose id is known once started."""

    _created = 0
    _created_lock = threading.Lock()

    def __init__(self, func: Callable[[], object], name: str = "") -> None:
        with Thread._created_lock:
            Thread._created += 1
            number = Thread._created
        self._func = func
        self._name = name or f"Thread {number}"
        self._started = False
        self._joined = False
        self._tid = 0
        self._latch = CountDownLatch(1)
        self._thread: threading.Thread | None = None
        self._exception: BaseException | None = None

    def start(self) -> None:
        """Start the thread and wait until its id is known."""
        if self._started:
            raise RuntimeError(f"thread {self._name!r} already started")
        self._started = True
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        try:
            self._thread.start()
        except RuntimeError:
            self._started = False
            raise
        self._latch.wait()

    def _run(self) -> None:
        self._tid = tid()
        self._latch.count_down()
        _state.name = self._name
        try:
            self._func()
        except BaseException as exc:
            _state.name = "crashed"
            self._exception = exc
            print(f"exception caught in Thread {self._name}", file=sys.stderr)
            print(f"exception: {exc}", file=sys.stderr)
        else:
            _state.name = "finished"

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the thread; re-raise what its function raised.

        Returns False if ``timeout`` ran out before the thread finished.
        """
        if not self._started or self._thread is None:
            raise RuntimeError(f"thread {self._name!r} not started")
        if self._joined:
            raise RuntimeError(f"thread {self._name!r} already joined")
        self._thread.join(timeout)
        if self._thread.is_alive():
            return False
        self._joined = True
        if self._exception is not None:
            raise self._exception
        return True

    @property
    def started(self) -> bool:
        return self._started

    @property
    def tid(self) -> int:
        return self._tid

    @property
    def name(self) -> str:
        return self._name

    @classmethod
    def num_created(cls) -> int:
        with cls._created_lock:
            return cls._created