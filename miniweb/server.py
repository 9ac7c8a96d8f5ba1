"""Socket servers built on a readiness selector: the HTTP file server and an echo server."""

from __future__ import annotations

import argparse
import logging
import os
import selectors
import socket
import sys
import threading
from collections.abc import Callable, Iterator, Sequence

from miniweb.handlers import RequestHandler
from miniweb.http import BUFFER_SIZE, MAX_EVENTS, PORT, UPLOAD_DIR, WEB_ROOT

log = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
BACKLOG = 10
UPLOAD_READ_TIMEOUT = 1.0
ECHO_BUFFER_SIZE = 1024
ECHO_REPLY = b"RECEIVED"
PROMPT = b"TYPE: "
PROMPT_REPLY = b"You typed: "
PROMPT_BUFFER_SIZE = 100

_LISTENER = "listener"
_WAKE = "wake"
_CLIENT = "client"


def _listen(host: str, port: int, *, blocking: bool) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(BACKLOG)
        sock.setblocking(blocking)
    except OSError:
        sock.close()
        raise
    return sock


class _EventLoop:
    """Accept connections and dispatch readable clients until stopped.

    ``on_readable`` is called with a client socket that has data (or has
    hung up); it returns True when the connection should be closed.
    """

    def __init__(
        self,
        listener: socket.socket,
        on_readable: Callable[[socket.socket], bool],
        *,
        client_blocking: bool,
    ) -> None:
        self._listener = listener
        self._on_readable = on_readable
        self._client_blocking = client_blocking
        self._selector = selectors.DefaultSelector()
        self._wake_reader, self._wake_writer = socket.socketpair()
        self._wake_reader.setblocking(False)
        self._selector.register(listener, selectors.EVENT_READ, _LISTENER)
        self._selector.register(self._wake_reader, selectors.EVENT_READ, _WAKE)
        self._stop_requested = False
        self._idle = threading.Event()
        self._idle.set()
        self._closed = False
        self._lock = threading.Lock()

    def run(self) -> None:
        if self._stop_requested:
            raise RuntimeError("server has been shut down")
        self._idle.clear()
        try:
            while not self._stop_requested:
                for key, _ in self._selector.select():
                    if self._stop_requested:
                        break
                    if key.data == _WAKE:
                        self._drain_wake()
                    elif key.data == _LISTENER:
                        self._accept()
                    elif self._on_readable(key.fileobj):
                        self._drop(key.fileobj)
        finally:
            self._idle.set()

    def stop(self) -> None:
        self._stop_requested = True
        try:
            self._wake_writer.send(b"\0")
        except OSError:
            pass
        self._idle.wait()
        self._close()

    def _drain_wake(self) -> None:
        try:
            while self._wake_reader.recv(MAX_EVENTS):
                pass
        except (BlockingIOError, InterruptedError):
            pass

    def _accept(self) -> None:
        try:
            conn, peer = self._listener.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            log.error("Accept failed: %s", exc)
            return
        conn.setblocking(self._client_blocking)
        self._selector.register(conn, selectors.EVENT_READ, _CLIENT)
        log.info("NEW CLIENT FD:%d %s", conn.fileno(), peer)

    def _drop(self, conn: socket.socket) -> None:
        try:
            self._selector.unregister(conn)
        except (KeyError, ValueError):
            pass
        conn.close()

    def _close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for key in list(self._selector.get_map().values()):
            if key.data == _CLIENT:
                key.fileobj.close()
        self._selector.close()
        self._listener.close()
        self._wake_reader.close()
        self._wake_writer.close()


def _following_reads(conn: socket.socket) -> Iterator[bytes]:
    """Yield further reads from ``conn`` until it goes quiet or closes."""
    conn.settimeout(UPLOAD_READ_TIMEOUT)
    while True:
        try:
            chunk = conn.recv(BUFFER_SIZE)
        except OSError:
            return
        if not chunk:
            return
        yield chunk


class HTTPServer:
    """Serve one request per connection with a RequestHandler."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = PORT,
        handler: RequestHandler | None = None,
    ) -> None:
        self.handler = handler if handler is not None else RequestHandler()
        listener = _listen(host, port, blocking=True)
        self.server_address: tuple[str, int] = listener.getsockname()[:2]
        self._loop = _EventLoop(listener, self._serve_client, client_blocking=True)

    def __enter__(self) -> HTTPServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def serve_forever(self) -> None:
        """Accept and answer clients until shutdown() is called."""
        self._loop.run()

    def shutdown(self) -> None:
        """Stop serve_forever, wait for it to finish and release the sockets."""
        self._loop.stop()

    def _serve_client(self, conn: socket.socket) -> bool:
        try:
            data = conn.recv(BUFFER_SIZE - 1)
        except OSError as exc:
            log.error("Read failed: %s", exc)
            return True
        if data:
            log.info("RECEIVED REQ:\n %s", data.decode("latin-1"))
        response = self.handler.handle(data, _following_reads(conn))
        if response is not None:
            try:
                conn.sendall(response.to_bytes())
            except OSError as exc:
                log.error("Send failed: %s", exc)
        return True


class EchoServer:
    """Acknowledge every message from any number of clients with RECEIVED."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = PORT) -> None:
        listener = _listen(host, port, blocking=False)
        self.server_address: tuple[str, int] = listener.getsockname()[:2]
        self._loop = _EventLoop(listener, self._serve_client, client_blocking=False)

    def __enter__(self) -> EchoServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def serve_forever(self) -> None:
        """Accept clients and acknowledge their messages until shutdown()."""
        self._loop.run()

    def shutdown(self) -> None:
        """Stop serve_forever, wait for it to finish and release the sockets."""
        self._loop.stop()

    def _serve_client(self, conn: socket.socket) -> bool:
        try:
            data = conn.recv(ECHO_BUFFER_SIZE - 1)
        except (BlockingIOError, InterruptedError):
            return False
        except OSError:
            data = b""
        if not data:
            log.info("CLIENT DISCONNECTED")
            return True
        log.info("CLIENT MESSAGE: %s", data.decode("latin-1"))
        try:
            conn.send(ECHO_REPLY)
        except OSError:
            return True
        return False


def _prompt_once(stdin_fd: int = 0, stdout_fd: int = 1) -> bytes:
    """Prompt, wait for input on ``stdin_fd`` and echo what was typed."""
    os.write(stdout_fd, PROMPT)
    with selectors.DefaultSelector() as selector:
        selector.register(stdin_fd, selectors.EVENT_READ)
        if not selector.select():
            return b""
    data = os.read(stdin_fd, PROMPT_BUFFER_SIZE - 1)
    if data:
        os.write(stdout_fd, PROMPT_REPLY + data)
    return data


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="miniweb", description="Serve files over HTTP or run the echo server."
    )
    parser.add_argument(
        "--mode",
        choices=("http", "echo", "prompt"),
        default="http",
        help="http file server, echo server, or a single stdin prompt",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--web-root", default=WEB_ROOT)
    parser.add_argument("--upload-dir", default=UPLOAD_DIR)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server chosen on the command line; return the exit status."""
    args = _parse_args(argv)
    if args.mode == "prompt":
        _prompt_once()
        return 0
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        if args.mode == "echo":
            server: HTTPServer | EchoServer = EchoServer(args.host, args.port)
        else:
            server = HTTPServer(
                args.host, args.port, RequestHandler(args.web_root, args.upload_dir)
            )
    except OSError as exc:
        print(f"Bind failed: {exc}", file=sys.stderr)
        return 1
    print(f"Server is listening on port {server.server_address[1]}...")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())