"""Extraction of a single uploaded file from a multipart/form-data body."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from miniweb.http import HEADER_END

FILENAME_MARKER = b'filename="'
END_BOUNDARY = b"\r\n--"
_ENCODING = "latin-1"


class MultipartError(ValueError):
    """An upload that cannot be accepted.

    ``status`` is the HTTP status to answer with and ``message`` the text
    to send.  A ``message`` of None means the request is dropped without
    any reply.
    """

    def __init__(self, message: str | None, status: int = 400) -> None:
        super().__init__(message or "malformed upload")
        self.message = message
        self.status = status


@dataclass(frozen=True)
class Upload:
    """A file name and its contents taken from a request body."""

    filename: str
    content: bytes


def _locate_filename(data: bytes) -> tuple[str, int]:
    """Return the quoted file name and the index of its closing quote."""
    start = data.find(FILENAME_MARKER)
    if start < 0:
        raise MultipartError("No filename found")
    start += len(FILENAME_MARKER)
    end = data.find(b'"', start)
    if end < 0:
        raise MultipartError(None)
    return data[start:end].decode(_ENCODING), end


def _locate_content(data: bytes, after: int) -> int:
    """Return the index where file content starts, past the part headers."""
    header_end = data.find(HEADER_END, after + 1)
    if header_end < 0:
        raise MultipartError("Invalid file format")
    return header_end + len(HEADER_END)


def extract_upload(data: bytes) -> Upload:
    """Pull the uploaded file out of a complete multipart body.

    The content runs from the blank line after the part headers up to the
    first CRLF followed by ``--``.  Raises MultipartError when the file
    name, the part headers or the closing boundary is missing.
    """
    filename, quote = _locate_filename(data)
    content_start = _locate_content(data, quote)
    boundary = data.find(END_BOUNDARY, content_start)
    if boundary < 0:
        raise MultipartError("Boundary not found")
    return Upload(filename, data[content_start:boundary])


class StreamingUpload:
    """Write an upload to disk as its body arrives in chunks.

    The first chunk must hold the part headers with the file name; the
    file is created in ``upload_dir`` under that name.  Writing stops at
    the first CRLF followed by ``--`` found within a chunk.
    """

    def __init__(self, upload_dir: str | os.PathLike[str]) -> None:
        self.upload_dir = os.fspath(upload_dir)
        self.filename: str | None = None
        self.path: Path | None = None
        self.bytes_written = 0
        self.done = False
        self._file: BinaryIO | None = None
        self._started = False

    def __enter__(self) -> StreamingUpload:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def feed(self, chunk: bytes) -> bool:
        """Consume one chunk; return True once the closing boundary is seen."""
        if self.done:
            return True
        if not self._started:
            return self._feed_first(chunk)
        return self._write_until_boundary(chunk)

    def _feed_first(self, chunk: bytes) -> bool:
        filename, quote = _locate_filename(chunk)
        self.filename = filename
        self.path = Path(f"{self.upload_dir}/{filename}")
        try:
            self._file = open(self.path, "wb")
        except OSError as exc:
            raise MultipartError("File write error", status=500) from exc
        try:
            content_start = _locate_content(chunk, quote)
        except MultipartError:
            self.close()
            raise
        self._started = True
        return self._write_until_boundary(chunk[content_start:])

    def _write_until_boundary(self, data: bytes) -> bool:
        boundary = data.find(END_BOUNDARY)
        if boundary >= 0:
            self._write(data[:boundary])
            self.done = True
            self.close()
            return True
        self._write(data)
        return False

    def _write(self, data: bytes) -> None:
        if self._file is None:
            raise MultipartError("File write error", status=500)
        self._file.write(data)
        self.bytes_written += len(data)

    def close(self) -> None:
        """Close the output file if it is still open."""
        if self._file is not None:
            self._file.close()
            self._file = None