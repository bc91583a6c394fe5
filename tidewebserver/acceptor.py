"""Accepts incoming TCP connections on a listening socket."""

from __future__ import annotations

import socket
from typing import Callable, Optional

from .channel import Channel
from .event_loop import EventLoop
from .inet_address import InetAddress
from .logger import LogLevel, log
from .sockets import SocketError, accept, bind, listen, nonblock_inet_socket

AcceptCallback = Callable[[socket.socket, InetAddress], object]


class Acceptor:
    """Owns a listening socket and hands each new connection to a callback."""

    def __init__(
        self,
        loop: EventLoop,
        port: int,
        callback: Optional[AcceptCallback] = None,
    ) -> None:
        self._loop = loop
        self.accept_callback = callback
        self.peer_address = InetAddress("0.0.0.0", 0)
        self._address = InetAddress.listen_address(port)
        self._sock = nonblock_inet_socket()
        try:
            bind(self._sock, self._address)
        except SocketError:
            self._sock.close()
            raise
        self._port = self._sock.getsockname()[1]
        self.host_address = InetAddress("127.0.0.1", self._port)
        self._listening = False
        self._closed = False
        self._channel = Channel(loop, self._sock)
        self._channel.read_callback = self.on_accept
        self._channel.enable_reading()
        log(LogLevel.TRACE, f"Acceptor created, fd = {self._channel.fd}")

    @property
    def port(self) -> int:
        """The port the socket is bound to."""
        return self._port

    @property
    def channel(self) -> Channel:
        return self._channel

    @property
    def listening(self) -> bool:
        return self._listening

    def listen(self, backlog: int = socket.SOMAXCONN) -> None:
        """Start listening; a second call raises RuntimeError."""
        if self._listening:
            raise RuntimeError("socket already in listening")
        self._listening = True
        listen(self._sock, backlog)

    def on_accept(self) -> None:
        """Accept every pending connection and pass each to the callback."""
        while True:
            result = accept(self._sock)
            if result is None:
                break
            conn, peer = result
            self.peer_address = peer
            log(LogLevel.INFO, f"new connection from {peer} fd = {conn.fileno()}")
            if self.accept_callback is None:
                conn.close()
            else:
                self.accept_callback(conn, peer)

    def close(self) -> None:
        """Stop watching the socket and close it."""
        if self._closed:
            return
        self._closed = True
        self._channel.disable_all()
        self._channel.remove()
        self._sock.close()

    def __enter__(self) -> Acceptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False