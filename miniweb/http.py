"""HTTP request parsing and response serialisation."""

from __future__ import annotations

import re
from dataclasses import dataclass

PORT = 8080
BUFFER_SIZE = 8192
MAX_EVENTS = 10
WEB_ROOT = "/var/www"
UPLOAD_DIR = "/var/www/uploads"

HEADER_END = b"\r\n\r\n"
_ENCODING = "latin-1"
_LINE_BREAK = re.compile(r"[\r\n]")

NOT_FOUND_PAGE = b"<html><body><h1>404 Not Found</h1></body></html>"
METHOD_NOT_ALLOWED_TEXT = b"405 Method Not Allowed"


@dataclass(frozen=True)
class Request:
    """A parsed request: method, path, header lines and optional body."""

    method: str
    path: str
    headers: tuple[str, ...] = ()
    body: bytes | None = None


@dataclass(frozen=True)
class Response:
    """A complete response ready to be written to a socket."""

    status: int
    reason: str
    content_type: str
    body: bytes = b""
    version: str = "HTTP/1.1"
    close: bool = True

    def to_bytes(self) -> bytes:
        """Serialise the status line, headers and body."""
        lines = [
            f"{self.version} {self.status} {self.reason}",
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
        ]
        if self.close:
            lines.append("Connection: close")
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode(_ENCODING) + self.body


def header_lines(data: bytes) -> list[str]:
    """Return the non-empty lines of the header section, request line first."""
    head, _, _ = data.partition(HEADER_END)
    text = head.decode(_ENCODING)
    return [line for line in _LINE_BREAK.split(text) if line]


def parse_request(data: bytes) -> Request:
    """Parse raw request bytes.

    The method and path are the first two whitespace-separated words.
    The body is everything after the blank line, or None if there is none.
    Raises ValueError when the method or path is missing.
    """
    tokens = data.decode(_ENCODING).split(maxsplit=2)
    if len(tokens) < 2:
        raise ValueError("malformed request line")
    method, path = tokens[0], tokens[1]
    lines = header_lines(data)
    _, separator, body = data.partition(HEADER_END)
    return Request(
        method=method,
        path=path,
        headers=tuple(lines[1:]),
        body=body if separator else None,
    )


def not_found() -> Response:
    """The 404 page."""
    return Response(404, "Not Found", "text/html", NOT_FOUND_PAGE)


def method_not_allowed() -> Response:
    """The 405 reply for unsupported methods."""
    return Response(405, "Method Not Allowed", "text/plain", METHOD_NOT_ALLOWED_TEXT)