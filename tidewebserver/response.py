"""HTTP responses rendered to their wire form."""

from __future__ import annotations

from dataclasses import dataclass, field

_STATUS_TEXT = {
    200: "OK",
    204: "No Content",
    301: "Moved Permanently",
    400: "Bad Request",
    404: "Not Found",
}


def status_text(status: int) -> str:
    """Return the reason phrase for ``status``, or ``Unknown``."""
    return _STATUS_TEXT.get(status, "Unknown")


@dataclass
class Response:
    """An HTTP/1.1 response with status, headers and body."""

    status: int = 400
    body: str = ""
    close_connection: bool = False
    headers: dict[str, str] = field(default_factory=dict, init=False)

    def add_header(self, header: str, value: str) -> None:
        self.headers[header] = value

    def to_string(self) -> str:
        parts = [f"HTTP/1.1 {self.status} {status_text(self.status)}\r\n"]
        if self.close_connection:
            parts.append("Connection: close\r\n")
        else:
            parts.append("Connection: Keep-Alive\r\n")
        if self.body:
            parts.append(f"Content-Length: {len(self.body.encode())}\r\n")
        parts.extend(f"{name}: {self.headers[name]}\r\n" for name in sorted(self.headers))
        parts.append("\r\n")
        parts.append(self.body)
        return "".join(parts)

    def __bytes__(self) -> bytes:
        return self.to_string().encode()