"""The reactor: polls channels and runs queued work on one thread."""

from __future__ import annotations

import threading
from typing import Callable

from .channel import Channel
from .logger import LogLevel, log
from .poller import Poller
from .sockets import create_wakeup_pair
from .threads import tid

POLL_TIME_MS = 10000
_WAKEUP_BYTES = (1).to_bytes(8, "little")

Runnable = Callable[[], object]


class EventLoop:
    """One loop per thread; it belongs to the thread that created it."""

    def __init__(self) -> None:
        self._thread_id = tid()
        self._running = False
        self._event_handling = False
        self._stop = False
        self._closed = False
        self._lock = threading.Lock()
        self._pending: list[Runnable] = []
        self._poller = Poller()
        self._wakeup_reader, self._wakeup_writer = create_wakeup_pair()
        self._wakeup_channel = Channel(self, self._wakeup_reader.fileno())
        self._wakeup_channel.read_callback = self._handle_wakeup
        self._wakeup_channel.enable_reading()

    @property
    def running(self) -> bool:
        return self._running

    def loop(self) -> None:
        """Poll and dispatch until ``stop`` is called."""
        with self._lock:
            if self._running:
                raise RuntimeError("event loop already running")
            self._running = True
        try:
            while not self._stop:
                _, active = self._poller.poll(POLL_TIME_MS)
                self._handle_events(active)
                self._run_pending()
        finally:
            self._running = False
        log(LogLevel.TRACE, f"EventLoop {id(self):#x} stop looping")

    def stop(self) -> None:
        """Ask the loop to finish its current iteration and return."""
        self._stop = True
        self.wakeup()

    def queue_in_loop(self, func: Runnable) -> None:
        """Run ``func`` on the loop thread after the current events."""
        with self._lock:
            self._pending.append(func)
        if not self.is_in_loop_thread() or self._event_handling:
            self.wakeup()

    def run_in_loop(self, func: Runnable) -> None:
        """Run ``func`` now if on the loop thread, otherwise queue it."""
        if self.is_in_loop_thread():
            func()
        else:
            self.queue_in_loop(func)

    def insert_channel(self, channel: Channel) -> None:
        self._poller.insert(channel)

    def remove_channel(self, channel: Channel) -> None:
        self._poller.remove(channel)

    def update_channel(self, channel: Channel) -> None:
        self._poller.update(channel)

    def has_channel(self, channel: Channel) -> bool:
        return self._poller.has_channel(channel)

    def is_in_loop_thread(self) -> bool:
        return self._thread_id == tid()

    def assert_in_loop_thread(self) -> None:
        """Log a fatal error (raising FatalError) off the loop thread."""
        if not self.is_in_loop_thread():
            log(
                LogLevel.FATAL,
                f"EventLoop::abortNotInLoopThread - EventLoop {id(self):#x}"
                f" was created in threadId_ = {self._thread_id}"
                f", current thread id = {tid()}",
            )

    def wakeup(self) -> None:
        """Interrupt a poll in progress."""
        with self._lock:
            if self._closed:
                return
            try:
                self._wakeup_writer.send(_WAKEUP_BYTES)
            except BlockingIOError:
                pass
            except OSError as exc:
                log(LogLevel.ERROR, f"EventLoop::wakeup() failed: {exc}")

    def close(self) -> None:
        """Release the loop's poller and wakeup sockets."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._wakeup_channel.disable_all()
        self._wakeup_channel.remove()
        self._wakeup_reader.close()
        self._wakeup_writer.close()
        self._poller.close()

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _handle_events(self, active: list[Channel]) -> None:
        self._event_handling = True
        try:
            log(LogLevel.TRACE, "handle events")
            for channel in active:
                channel.handle_event()
        finally:
            self._event_handling = False

    def _run_pending(self) -> None:
        log(LogLevel.TRACE, "handle runnable")
        with self._lock:
            pending, self._pending = self._pending, []
        for func in pending:
            func()

    def _handle_wakeup(self) -> None:
        while True:
            try:
                data = self._wakeup_reader.recv(4096)
            except BlockingIOError:
                break
            except InterruptedError:
                continue
            except OSError as exc:
                log(LogLevel.ERROR, f"EventLoop::handleWakeUp() error: {exc}")
                break
            if not data:
                break