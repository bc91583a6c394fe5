"""One established TCP connection driven by an event loop."""

from __future__ import annotations

import socket
from enum import Enum, auto
from typing import Any, Callable

from .buffer import Buffer
from .channel import Channel
from .event_loop import EventLoop
from .inet_address import InetAddress
from .logger import LogLevel, log

_READ_SIZE = 4096


class ConnectionState(Enum):
    ESTABLISHING = auto()
    ESTABLISHED = auto()
    CLOSING = auto()
    CLOSED = auto()


def _consume_everything(conn: Connection, buffer: Buffer) -> None:
    buffer.consume_all()


def _ignore(conn: Connection) -> None:
    return None


class Connection:
    """Buffers data in both directions and reports it through callbacks."""

    def __init__(
        self,
        loop: EventLoop,
        sock: socket.socket,
        local_address: InetAddress,
        peer_address: InetAddress,
    ) -> None:
        self._loop = loop
        self._sock = sock
        self._fd = sock.fileno()
        self._local_address = local_address
        self._peer_address = peer_address
        self._state = ConnectionState.ESTABLISHING
        self._input = Buffer()
        self._output = Buffer()
        self.context: Any = None
        self.message_callback: Callable[[Connection, Buffer], object] = _consume_everything
        self.connection_callback: Callable[[Connection], object] = _ignore
        self.close_callback: Callable[[Connection], object] = _ignore
        self.write_finish_callback: Callable[[Connection], object] = _ignore
        self._channel = Channel(loop, sock)
        self._channel.read_callback = self.handle_read
        self._channel.write_callback = self.handle_write
        self._channel.error_callback = self.handle_error

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def local_address(self) -> InetAddress:
        return self._local_address

    @property
    def peer_address(self) -> InetAddress:
        return self._peer_address

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def input_buffer(self) -> Buffer:
        """Data received from the peer and not yet consumed."""
        return self._input

    @property
    def output_buffer(self) -> Buffer:
        """Data waiting to be sent to the peer."""
        return self._output

    def established(self) -> bool:
        return self._state is ConnectionState.ESTABLISHED

    def send(self, data: bytes | bytearray | memoryview | str) -> None:
        """Queue ``data`` for sending; raises RuntimeError once closed."""
        if self._state is ConnectionState.CLOSED:
            raise RuntimeError(f"connection {self._fd} is closed")
        self._output.write(data)
        self._channel.enable_writing()

    def establish(self) -> None:
        """Start reading and report the connection as established."""
        self._channel.enable_reading()
        self._state = ConnectionState.ESTABLISHED
        self.connection_callback(self)

    def handle_read(self) -> None:
        """Read everything available and pass it to the message callback."""
        while self._state is not ConnectionState.CLOSED:
            try:
                data = self._sock.recv(_READ_SIZE)
            except InterruptedError:
                continue
            except BlockingIOError:
                log(LogLevel.INFO, f"read would blocked on connection: {self._fd}")
                break
            except OSError as exc:
                log(LogLevel.ERROR, f"read error on connection {self._fd}: {exc}")
                self.close()
                break
            if not data:
                log(LogLevel.TRACE, f"connection {self._peer_address} closed by peer")
                self.close()
                break
            self._input.write(data)
            log(
                LogLevel.TRACE,
                f"read message from connection: {self._fd} and length is {len(data)}",
            )
            self.message_callback(self, self._input)

    def handle_write(self) -> None:
        """Send buffered output until it is all sent or the socket is full."""
        while self._state is not ConnectionState.CLOSED:
            try:
                written = self._sock.send(self._output.peek())
            except InterruptedError:
                continue
            except BlockingIOError:
                log(LogLevel.TRACE, "keep write will be block, waiting for next write event")
                break
            except OSError as exc:
                self.close()
                log(LogLevel.ERROR, f"error handleWrite in connection: {self._fd}: {exc}")
                break
            if written > 0:
                self._output.consume(written)
            if self._output.empty():
                self._channel.disable_writing()
                log(LogLevel.TRACE, " all write buffer sent")
                self._loop.queue_in_loop(lambda: self.write_finish_callback(self))
                break

    def handle_error(self) -> None:
        self.close()

    def close(self) -> None:
        """Stop polling, shut the socket down and queue the close callback."""
        if self._state is ConnectionState.CLOSED:
            return
        self._channel.disable_all()
        self._channel.remove()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._state = ConnectionState.CLOSED
        self._loop.queue_in_loop(self._finish_close)

    def _finish_close(self) -> None:
        try:
            self.close_callback(self)
        finally:
            log(
                LogLevel.INFO,
                f"connection: {self._fd} from:{self._peer_address}"
                f" to: {self._local_address} closed",
            )
            self._sock.close()