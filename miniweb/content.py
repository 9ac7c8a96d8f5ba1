"""Static file lookup and content-type detection."""

from __future__ import annotations

import os
from pathlib import Path

from miniweb.http import Response, not_found

DEFAULT_CONTENT_TYPE = "application/octet-stream"
INDEX_PATH = "/index.html"

CONTENT_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
}


def content_type_for(path: str | os.PathLike[str]) -> str:
    """Content type chosen by the text after the last dot in the path."""
    text = os.fspath(path)
    dot = text.rfind(".")
    if dot < 0:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(text[dot:], DEFAULT_CONTENT_TYPE)


def resolve_path(web_root: str | os.PathLike[str], request_path: str) -> Path:
    """Join the request path onto the web root; "/" means the index page."""
    if request_path == "/":
        request_path = INDEX_PATH
    return Path(f"{os.fspath(web_root)}{request_path}")


def serve_file(web_root: str | os.PathLike[str], request_path: str) -> Response:
    """Build a 200 response with the file's contents, or the 404 page."""
    full_path = resolve_path(web_root, request_path)
    if not os.access(full_path, os.R_OK):
        return not_found()
    try:
        content = full_path.read_bytes()
    except OSError:
        return not_found()
    return Response(200, "OK", content_type_for(full_path), content)