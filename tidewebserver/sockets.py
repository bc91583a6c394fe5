"""Thin helpers over non-blocking IPv4 TCP sockets."""

from __future__ import annotations

import socket

from .inet_address import InetAddress
from .logger import Logger, LogLevel, log


class SocketError(OSError):
    """A socket operation the server cannot continue without has failed."""


def _fail(what: str, exc: OSError) -> SocketError:
    return SocketError(exc.errno, f"{what}: {exc.strerror or exc}")


def nonblock_inet_socket() -> socket.socket:
    """Create a non-blocking, non-inheritable IPv4 TCP socket."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise _fail("socket fault", exc) from exc
    sock.setblocking(False)
    sock.set_inheritable(False)
    return sock


def bind(sock: socket.socket, address: InetAddress) -> None:
    try:
        sock.bind(address.sockaddr())
    except OSError as exc:
        raise _fail("bind fault", exc) from exc


def listen(sock: socket.socket, backlog: int) -> None:
    try:
        sock.listen(backlog)
    except OSError as exc:
        raise _fail("listen fault", exc) from exc


def accept(sock: socket.socket) -> tuple[socket.socket, InetAddress] | None:
    """Accept one connection, or return None if none is waiting.

    The accepted socket is made non-blocking.
    """
    while True:
        try:
            conn, (host, port) = sock.accept()
        except InterruptedError:
            continue
        except BlockingIOError:
            log(LogLevel.TRACE, "accept will be blocked")
            return None
        except OSError as exc:
            raise _fail("accept fault", exc) from exc
        conn.setblocking(False)
        conn.set_inheritable(False)
        return conn, InetAddress(host, port)


def shutdown_write(sock: socket.socket) -> None:
    """Close the sending side; a failure is logged, not raised."""
    try:
        sock.shutdown(socket.SHUT_WR)
    except OSError as exc:
        line = exc.__traceback__.tb_lineno if exc.__traceback__ is not None else 0
        entry = Logger(__file__, line, LogLevel.ERROR, saved_errno=exc.errno or 0)
        entry.stream << "socket shutdown write"
        entry.finish()


def set_no_delay(sock: socket.socket, on: bool) -> None:
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if on else 0)


def create_wakeup_pair() -> tuple[socket.socket, socket.socket]:
    """Return a non-blocking (reader, writer) pair for waking a poller."""
    try:
        reader, writer = socket.socketpair()
    except OSError as exc:
        raise _fail("failed to create wakeup pair", exc) from exc
    for sock in (reader, writer):
        sock.setblocking(False)
        sock.set_inheritable(False)
    return reader, writer