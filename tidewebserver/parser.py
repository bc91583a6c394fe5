"""An incremental HTTP request parser."""

from __future__ import annotations

import re
from enum import Enum, auto

from .buffer import Buffer
from .request import HttpVersion, Request, RequestMethod

_CRLF = b"\r\n"
_LENGTH_PATTERN = re.compile(r"\s*([+-]?\d+)")

_METHODS = {
    "GET": RequestMethod.GET,
    "POST": RequestMethod.POST,
    "HEAD": RequestMethod.HEAD,
    "PUT": RequestMethod.PUT,
}

_VERSIONS = {
    "0": HttpVersion.HTTP10,
    "1": HttpVersion.HTTP11,
}


class ParseState(Enum):
    EXPECT_REQUEST_LINE = auto()
    EXPECT_HEADER = auto()
    EXPECT_BODY = auto()
    GOT_ALL = auto()


class ParseError(ValueError):
    """The data is not a well-formed HTTP request."""


def _text(token: bytes | bytearray | memoryview | str) -> str:
    if isinstance(token, str):
        return token
    return bytes(token).decode("latin-1")


def parse_method(token: bytes | str) -> RequestMethod:
    """Map a method token to a RequestMethod; unknown methods are OTHER."""
    return _METHODS.get(_text(token), RequestMethod.OTHER)


def parse_version(token: bytes | str) -> HttpVersion:
    """Map ``HTTP/1.0`` and ``HTTP/1.1`` to versions; anything else is OTHER."""
    text = _text(token)
    if len(text) == 8 and text.startswith("HTTP/1."):
        return _VERSIONS.get(text[7], HttpVersion.OTHER)
    return HttpVersion.OTHER


class Parser:
    """Builds one Request from data that may arrive in pieces."""

    def __init__(self) -> None:
        self._state = ParseState.EXPECT_REQUEST_LINE
        self._request = Request()
        self._remaining = -1

    @property
    def request(self) -> Request:
        return self._request

    def got_all(self) -> bool:
        return self._state is ParseState.GOT_ALL

    def reset(self) -> None:
        """Forget the current request and expect a new request line."""
        self._state = ParseState.EXPECT_REQUEST_LINE
        self._request.clear()
        self._remaining = -1

    def parse_request(self, buffer: Buffer) -> bool:
        """Parse the buffer's readable bytes, consuming what was used.

        Returns whether a whole request has been read. Raises ParseError
        on malformed input.
        """
        consumed = self.parse(buffer.peek())
        buffer.consume(consumed)
        return self.got_all()

    def parse(self, data: bytes | bytearray | memoryview) -> int:
        """Parse ``data`` and return the number of bytes used."""
        data = bytes(data)
        pos = 0
        if self._state is ParseState.EXPECT_REQUEST_LINE:
            end = data.find(_CRLF)
            if end < 0:
                return 0
            self._parse_request_line(data[:end])
            self._state = ParseState.EXPECT_HEADER
            pos = end + 2

        if self._state is ParseState.EXPECT_HEADER:
            while True:
                end = data.find(_CRLF, pos)
                if end < 0:
                    break
                if end == pos:
                    pos += 2
                    self._state = ParseState.EXPECT_BODY
                    break
                self._parse_header(data[pos:end])
                pos = end + 2

        if self._state is ParseState.EXPECT_BODY:
            method = self._request.method
            if method in (RequestMethod.GET, RequestMethod.HEAD):
                self._state = ParseState.GOT_ALL
            elif method is not RequestMethod.OTHER:
                if self._remaining < 0:
                    self._remaining = self._content_length()
                    self._request.body = b""
                chunk = data[pos:pos + self._remaining]
                self._request.body += chunk
                pos += len(chunk)
                self._remaining -= len(chunk)
                if self._remaining == 0:
                    self._state = ParseState.GOT_ALL
        return pos

    def _content_length(self) -> int:
        value = self._request.headers.get("Content-Length")
        if value is None:
            raise ParseError("request has a body but no Content-Length")
        match = _LENGTH_PATTERN.match(value)
        if match is None:
            raise ParseError(f"invalid Content-Length: {value!r}")
        length = int(match.group(1))
        if length < 0:
            raise ParseError(f"negative Content-Length: {value!r}")
        return length

    def _parse_request_line(self, line: bytes) -> None:
        first = line.find(b" ")
        if first < 0:
            raise ParseError(f"malformed request line: {_text(line)!r}")
        second = line.find(b" ", first + 1)
        if second < 0:
            raise ParseError(f"malformed request line: {_text(line)!r}")
        self._request.method = parse_method(line[:first])
        self._request.url = _text(line[first + 1:second])
        self._request.version = parse_version(line[second + 1:])

    def _parse_header(self, line: bytes) -> None:
        mid = line.find(b":")
        if mid < 0:
            raise ParseError(f"malformed header line: {_text(line)!r}")
        name = _text(line[:mid]).rstrip(" ")
        value = _text(line[mid + 1:]).lstrip(" ")
        self._request.add_header(name, value)