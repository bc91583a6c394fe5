"""IPv4 socket addresses."""

from __future__ import annotations

import ipaddress
import socket

_INADDR_ANY = 0


class InetAddress:
    """An IPv4 address and TCP port."""

    __slots__ = ("_ip", "_port")

    def __init__(self, ip: str | int = _INADDR_ANY, port: int = 0) -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        if isinstance(ip, int):
            try:
                self._ip = str(ipaddress.IPv4Address(ip))
            except ipaddress.AddressValueError as exc:
                raise ValueError(f"invalid IPv4 address: {ip}") from exc
        else:
            try:
                self._ip = socket.inet_ntoa(socket.inet_aton(ip))
            except OSError as exc:
                raise ValueError(f"invalid IPv4 address: {ip!r}") from exc
        self._port = port

    @property
    def ip(self) -> str:
        return self._ip

    @property
    def port(self) -> int:
        return self._port

    def sockaddr(self) -> tuple[str, int]:
        """Return the address in the form the socket module takes."""
        return (self._ip, self._port)

    @classmethod
    def listen_address(cls, port: int) -> InetAddress:
        """Return the wildcard address on ``port``."""
        return cls(_INADDR_ANY, port)

    def __str__(self) -> str:
        return f"{self._ip}:{self._port}"

    def __repr__(self) -> str:
        return f"InetAddress({self._ip!r}, {self._port})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InetAddress):
            return NotImplemented
        return self.sockaddr() == other.sockaddr()

    def __hash__(self) -> int:
        return hash(self.sockaddr())