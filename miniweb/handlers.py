"""Request dispatch: static files, deletion and file uploads."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from miniweb.content import serve_file
from miniweb.http import (
    UPLOAD_DIR,
    WEB_ROOT,
    Response,
    method_not_allowed,
    parse_request,
)
from miniweb.multipart import MultipartError, StreamingUpload

_REASONS = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}

UPLOAD_PATH = "/upload"


def _text(status: int, message: str) -> Response:
    return Response(status, _REASONS[status], "text/plain", message.encode("latin-1"))


class RequestHandler:
    """Turn raw request bytes into a response.

    GET serves files below ``web_root``, DELETE removes them and
    ``POST /upload`` stores an uploaded file in ``upload_dir``.
    """

    def __init__(
        self,
        web_root: str | os.PathLike[str] = WEB_ROOT,
        upload_dir: str | os.PathLike[str] = UPLOAD_DIR,
    ) -> None:
        self.web_root = os.fspath(web_root)
        self.upload_dir = os.fspath(upload_dir)

    def handle(self, data: bytes, chunks: Iterable[bytes] = ()) -> Response | None:
        """Answer one request.

        ``data`` is the first read from the client. For an upload the file
        is taken from ``chunks``, the reads that follow it. Returns None
        when the request gets no reply at all.
        """
        if not data:
            return None
        try:
            request = parse_request(data)
        except ValueError:
            return method_not_allowed()
        if request.method == "GET":
            return self.handle_get(request.path)
        if request.method == "POST" and request.path == UPLOAD_PATH:
            return self.handle_upload(chunks)
        if request.method == "DELETE":
            return self.handle_delete(request.path)
        return method_not_allowed()

    def handle_get(self, path: str) -> Response:
        """Serve the file at ``path``, "/" meaning the index page."""
        return serve_file(self.web_root, path)

    def handle_delete(self, path: str) -> Response:
        """Remove the file or empty directory at ``path``."""
        full_path = Path(f"{self.web_root}{path}")
        if not os.path.lexists(full_path):
            return _text(404, "File not found")
        try:
            if full_path.is_dir() and not full_path.is_symlink():
                full_path.rmdir()
            else:
                full_path.unlink()
        except OSError:
            return _text(500, "Failed to delete file")
        return _text(200, "Deleted successfully")

    def handle_upload(self, chunks: Iterable[bytes]) -> Response | None:
        """Store the file carried by ``chunks`` in the upload directory.

        Writing ends at the closing boundary or when the chunks run out.
        Returns None if nothing arrives or the file name is unterminated.
        """
        received = False
        upload = StreamingUpload(self.upload_dir)
        try:
            with upload:
                for chunk in chunks:
                    if not chunk:
                        break
                    received = True
                    if upload.feed(chunk):
                        break
        except MultipartError as exc:
            if exc.message is None:
                return None
            return _text(exc.status, exc.message)
        except OSError:
            return _text(500, "File write error")
        if not received:
            return None
        return _text(200, "File uploaded successfully")