import pytest

from miniweb.http import (
    HEADER_END,
    Request,
    Response,
    header_lines,
    method_not_allowed,
    not_found,
    parse_request,
)


def test_parse_get_request():
    req = parse_request(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
    assert req.method == "GET"
    assert req.path == "/index.html"
    assert req.headers == ("Host: localhost",)
    assert req.body == b""


def test_parse_post_request_with_body():
    data = b"POST /upload HTTP/1.1\r\nHost: localhost\r\nX-A: 1\r\n\r\nhello\r\nworld"
    req = parse_request(data)
    assert req.method == "POST"
    assert req.path == "/upload"
    assert req.headers == ("Host: localhost", "X-A: 1")
    assert req.body == b"hello\r\nworld"


def test_parse_request_without_blank_line_has_no_body():
    req = parse_request(b"DELETE /file.txt HTTP/1.1\r\nHost: localhost\r\n")
    assert req == Request("DELETE", "/file.txt", ("Host: localhost",), None)


@pytest.mark.parametrize("data", [b"", b"   \r\n", b"GET"])
def test_parse_request_rejects_incomplete_request_line(data):
    with pytest.raises(ValueError):
        parse_request(data)


def test_header_lines_skip_empty_tokens():
    data = b"GET / HTTP/1.0\r\n\r\nA: 1\n\nB: 2\r\n\r\nbody\r\nmore"
    assert header_lines(data) == ["GET / HTTP/1.0"]


def test_header_lines_without_separator_uses_whole_buffer():
    data = b"GET / HTTP/1.0\r\nA: 1\n\rB: 2"
    assert header_lines(data) == ["GET / HTTP/1.0", "A: 1", "B: 2"]


def test_response_wire_format():
    wire = Response(200, "OK", "text/plain", b"hi").to_bytes()
    assert wire == (
        b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n"
        b"Content-Length: 2\r\nConnection: close\r\n\r\nhi"
    )


def test_response_without_close_and_older_version():
    wire = Response(200, "OK", "text/html", b"<p>", version="HTTP/1.0", close=False).to_bytes()
    assert wire.startswith(b"HTTP/1.0 200 OK\r\n")
    assert b"Connection" not in wire
    assert wire.endswith(HEADER_END + b"<p>")


def test_response_body_survives_serialisation():
    body = bytes(range(256))
    wire = Response(200, "OK", "application/octet-stream", body).to_bytes()
    head, _, rest = wire.partition(HEADER_END)
    assert rest == body
    assert f"Content-Length: {len(body)}".encode() in head.split(b"\r\n")


def test_not_found():
    resp = not_found()
    assert resp.status == 404
    assert resp.reason == "Not Found"
    assert resp.content_type == "text/html"
    assert resp.body == b"<html><body><h1>404 Not Found</h1></body></html>"
    assert resp.to_bytes().startswith(b"HTTP/1.1 404 Not Found\r\n")


def test_method_not_allowed():
    resp = method_not_allowed()
    assert resp.status == 405
    assert resp.content_type == "text/plain"
    assert resp.body == b"405 Method Not Allowed"
    assert resp.to_bytes().endswith(b"\r\n\r\n405 Method Not Allowed")