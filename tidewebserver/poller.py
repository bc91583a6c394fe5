"""Waits for readiness on a set of channels."""

from __future__ import annotations

import selectors
from enum import IntEnum

from .channel import READ_EVENTS, WRITE_EVENTS, Channel, Event
from .logger import LogLevel, log
from .sockets import SocketError
from .timestamp import Timestamp


class PollerOperation(IntEnum):
    ADD = 1
    DEL = 2
    MOD = 3


def flag_to_string(flag: int) -> str:
    """Name a poller operation for log lines."""
    try:
        return f"EPOLL_CTL_{PollerOperation(flag).name}"
    except ValueError:
        return "Unknown Operation"


def _selector_mask(event: Event) -> int:
    mask = 0
    if event & READ_EVENTS:
        mask |= selectors.EVENT_READ
    if event & WRITE_EVENTS:
        mask |= selectors.EVENT_WRITE
    return mask


class Poller:
    """Keeps the channels of one loop and reports which are ready."""

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()
        self._channels: dict[int, Channel] = {}

    def poll(self, timeout_ms: int) -> tuple[Timestamp, list[Channel]]:
        """Wait up to ``timeout_ms`` (forever if negative) for ready channels.

        Each returned channel has its ``action_events`` set.
        """
        log(LogLevel.TRACE, f"poller file count = {len(self._channels)}")
        timeout = None if timeout_ms < 0 else timeout_ms / 1000
        ready = self._selector.select(timeout)
        active: list[Channel] = []
        for key, mask in ready:
            channel: Channel = key.data
            events = Event.NONE
            if mask & selectors.EVENT_READ:
                events |= Event.IN
            if mask & selectors.EVENT_WRITE:
                events |= Event.OUT
            channel.action_events = events
            active.append(channel)
        if active:
            log(LogLevel.TRACE, f"poll returned, {len(active)} events active")
        else:
            log(LogLevel.TRACE, "poll returned, no events active")
        return Timestamp.now(), active

    def insert(self, channel: Channel) -> None:
        if channel.fd in self._channels:
            raise ValueError(f"fd {channel.fd} is already in the poller")
        log(LogLevel.TRACE, f"insert channel: {channel}")
        self._channels[channel.fd] = channel
        self._ctl(channel, PollerOperation.ADD)

    def update(self, channel: Channel) -> None:
        if channel.fd not in self._channels:
            raise ValueError(f"fd {channel.fd} is not in the poller")
        log(LogLevel.TRACE, f"update channel: {channel}")
        self._ctl(channel, PollerOperation.MOD)

    def remove(self, channel: Channel) -> None:
        if channel.fd not in self._channels:
            raise ValueError(f"fd {channel.fd} is not in the poller")
        log(LogLevel.TRACE, f"remove channel: fd = {channel.fd}")
        self._ctl(channel, PollerOperation.DEL)
        del self._channels[channel.fd]

    def has_channel(self, channel: Channel) -> bool:
        return channel.fd in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def close(self) -> None:
        self._selector.close()
        self._channels.clear()

    def _ctl(self, channel: Channel, operation: PollerOperation) -> None:
        log(LogLevel.TRACE, f"epoll_ctl flag = {flag_to_string(operation)}, {channel}")
        fd = channel.fd
        mask = _selector_mask(channel.event)
        registered = fd in self._selector.get_map()
        try:
            if operation is PollerOperation.DEL or mask == 0:
                if registered:
                    self._selector.unregister(fd)
            elif registered:
                self._selector.modify(fd, mask, channel)
            else:
                self._selector.register(fd, mask, channel)
        except (OSError, ValueError) as exc:
            errno = getattr(exc, "errno", None)
            raise SocketError(
                errno, f"epoll_ctl flag = {flag_to_string(operation)} fd = {fd}: {exc}"
            ) from exc