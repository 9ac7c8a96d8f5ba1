import pytest

from miniweb.multipart import (
    MultipartError,
    StreamingUpload,
    Upload,
    extract_upload,
)

HEAD = (
    b"------WebKitFormBoundaryX\r\n"
    b'Content-Disposition: form-data; name="file"; filename="hello.txt"\r\n'
    b"Content-Type: text/plain\r\n\r\n"
)
TAIL = b"\r\n------WebKitFormBoundaryX--\r\n"


def test_extract_upload_returns_name_and_content():
    upload = extract_upload(HEAD + b"hello world" + TAIL)
    assert upload == Upload("hello.txt", b"hello world")


def test_extract_upload_binary_content_round_trip():
    payload = bytes(range(256)).replace(b"\r\n--", b"")
    upload = extract_upload(HEAD + payload + TAIL)
    assert upload.content == payload


def test_extract_upload_missing_filename():
    with pytest.raises(MultipartError) as info:
        extract_upload(b"no name here\r\n\r\ndata" + TAIL)
    assert info.value.status == 400
    assert info.value.message == "No filename found"


def test_extract_upload_unterminated_filename_has_no_reply():
    with pytest.raises(MultipartError) as info:
        extract_upload(b'filename="broken')
    assert info.value.message is None


def test_extract_upload_missing_part_headers_end():
    with pytest.raises(MultipartError) as info:
        extract_upload(b'filename="a.txt"\r\nContent-Type: text/plain')
    assert info.value.message == "Invalid file format"


def test_extract_upload_missing_boundary():
    with pytest.raises(MultipartError) as info:
        extract_upload(HEAD + b"content without end")
    assert info.value.message == "Boundary not found"
    assert info.value.status == 400


def test_streaming_single_chunk(tmp_path):
    with StreamingUpload(tmp_path) as upload:
        finished = upload.feed(HEAD + b"hello world" + TAIL)
    assert finished is True
    assert upload.done
    assert upload.filename == "hello.txt"
    assert (tmp_path / "hello.txt").read_bytes() == b"hello world"
    assert upload.bytes_written == len(b"hello world")


def test_streaming_multiple_chunks(tmp_path):
    parts = [b"first part ", b"second part ", b"third"]
    upload = StreamingUpload(tmp_path)
    assert upload.feed(HEAD + parts[0]) is False
    assert upload.feed(parts[1]) is False
    assert upload.feed(parts[2] + TAIL) is True
    assert (tmp_path / "hello.txt").read_bytes() == b"".join(parts)


def test_streaming_without_boundary_keeps_everything_after_close(tmp_path):
    upload = StreamingUpload(tmp_path)
    upload.feed(HEAD + b"abc")
    upload.feed(b"def")
    upload.close()
    assert not upload.done
    assert (tmp_path / "hello.txt").read_bytes() == b"abcdef"


def test_streaming_ignores_chunks_after_done(tmp_path):
    upload = StreamingUpload(tmp_path)
    upload.feed(HEAD + b"data" + TAIL)
    assert upload.feed(b"more bytes") is True
    assert (tmp_path / "hello.txt").read_bytes() == b"data"


def test_streaming_missing_directory_is_server_error(tmp_path):
    upload = StreamingUpload(tmp_path / "absent")
    with pytest.raises(MultipartError) as info:
        upload.feed(HEAD + b"data" + TAIL)
    assert info.value.status == 500
    assert info.value.message == "File write error"


def test_streaming_missing_filename(tmp_path):
    upload = StreamingUpload(tmp_path)
    with pytest.raises(MultipartError) as info:
        upload.feed(b"junk\r\n\r\njunk")
    assert info.value.message == "No filename found"
    assert list(tmp_path.iterdir()) == []


def test_streaming_invalid_format_closes_file(tmp_path):
    upload = StreamingUpload(tmp_path)
    with pytest.raises(MultipartError) as info:
        upload.feed(b'filename="x.bin" but no blank line')
    assert info.value.message == "Invalid file format"
    assert (tmp_path / "x.bin").read_bytes() == b""


def test_streaming_matches_extract_upload(tmp_path):
    body = HEAD + b"same content either way" + TAIL
    expected = extract_upload(body)
    upload = StreamingUpload(tmp_path)
    upload.feed(body)
    assert upload.filename == expected.filename
    assert upload.path.read_bytes() == expected.content