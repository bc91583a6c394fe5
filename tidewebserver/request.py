"""HTTP request data as parsed from the wire."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RequestMethod(Enum):
    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    OTHER = "OTHER"

    def __str__(self) -> str:
        return self.value


class HttpVersion(Enum):
    HTTP10 = "HTTP1.0"
    HTTP11 = "HTTP1.1"
    OTHER = "Unknown Version"

    def __str__(self) -> str:
        return self.value


@dataclass
class Request:
    """An HTTP request: request line, headers and body."""

    version: HttpVersion = HttpVersion.OTHER
    method: RequestMethod = RequestMethod.OTHER
    url: str = ""
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    def clear(self) -> None:
        """Reset every field to its default."""
        self.version = HttpVersion.OTHER
        self.method = RequestMethod.OTHER
        self.url = ""
        self.body = b""
        self.headers = {}

    def add_header(self, header: str, value: str) -> None:
        """Set ``header`` to ``value``, replacing any earlier value."""
        self.headers[header] = value

    def is_header(self, header: str) -> bool:
        return header in self.headers

    def get_header(self, header: str) -> str:
        """Return the value of ``header``, or an empty string if absent."""
        return self.headers.get(header, "")