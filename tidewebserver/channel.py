"""Channels: a file descriptor, the events it wants and the handlers for them."""

from __future__ import annotations

from enum import IntFlag
from typing import Callable, Optional, Protocol

from .logger import LogLevel, log


class Event(IntFlag):
    """Readiness events, numbered as epoll numbers them."""

    NONE = 0
    IN = 0x001
    PRI = 0x002
    OUT = 0x004
    ERR = 0x008
    HUP = 0x010
    RDHUP = 0x2000


READ_EVENTS = Event.IN | Event.PRI
WRITE_EVENTS = Event.OUT

_EVENT_NAMES = (
    (Event.IN, "EPOLLIN"),
    (Event.OUT, "EPOLLOUT"),
    (Event.ERR, "EPOLLERR"),
    (Event.PRI, "EPOLLPRI"),
    (Event.HUP, "EPOLLHUP"),
    (Event.RDHUP, "EPOLLRDHUP"),
)

EventCallback = Optional[Callable[[], object]]


class ChannelOwner(Protocol):
    """What a channel needs from the loop it belongs to."""

    def has_channel(self, channel: Channel) -> bool: ...

    def insert_channel(self, channel: Channel) -> None: ...

    def update_channel(self, channel: Channel) -> None: ...

    def remove_channel(self, channel: Channel) -> None: ...


def event_to_string(fd: int, event: int) -> str:
    """Describe ``event`` on ``fd`` for log lines."""
    names = "".join(f"{name} " for flag, name in _EVENT_NAMES if event & flag)
    return f"fd = {fd}, event = {names}"


class Channel:
    """Dispatches the events polled for one file descriptor."""

    def __init__(self, loop: ChannelOwner, fd) -> None:
        self._loop = loop
        self._fd = fd if isinstance(fd, int) else fd.fileno()
        self._event = Event.NONE
        self.action_events = Event.NONE
        self.event_handling = False
        self.read_callback: EventCallback = None
        self.write_callback: EventCallback = None
        self.close_callback: EventCallback = None
        self.error_callback: EventCallback = None

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def event(self) -> Event:
        """The events this channel is interested in."""
        return self._event

    def handle_event(self) -> None:
        """Run the callbacks for the events last reported by the poller."""
        self.event_handling = True
        try:
            events = self.action_events
            log(LogLevel.TRACE, event_to_string(self._fd, events))
            if events & Event.HUP and not events & Event.IN and self.close_callback:
                self.close_callback()
            if events & Event.ERR and self.error_callback:
                self.error_callback()
            if events & (Event.IN | Event.PRI | Event.RDHUP) and self.read_callback:
                self.read_callback()
            if events & Event.OUT and self.write_callback:
                self.write_callback()
        finally:
            self.event_handling = False

    def enable_reading(self) -> None:
        self._event |= READ_EVENTS
        self._update()

    def enable_writing(self) -> None:
        self._event |= WRITE_EVENTS
        self._update()

    def enable_read_and_write(self) -> None:
        self._event |= READ_EVENTS | WRITE_EVENTS
        self._update()

    def disable_reading(self) -> None:
        self._event &= ~READ_EVENTS
        self._update()

    def disable_writing(self) -> None:
        self._event &= ~WRITE_EVENTS
        self._update()

    def disable_all(self) -> None:
        self._event = Event.NONE
        self._update()

    def is_reading(self) -> bool:
        """Whether the last poll reported the channel readable."""
        return bool(self.action_events & READ_EVENTS)

    def is_writing(self) -> bool:
        """Whether the last poll reported the channel writable."""
        return bool(self.action_events & WRITE_EVENTS)

    def is_none_event(self) -> bool:
        return self._event == Event.NONE

    def remove(self) -> None:
        self._loop.remove_channel(self)

    def __str__(self) -> str:
        return event_to_string(self._fd, self._event)

    def __repr__(self) -> str:
        return f"Channel({self})"

    def _update(self) -> None:
        if self._loop.has_channel(self):
            self._loop.update_channel(self)
        else:
            self._loop.insert_channel(self)