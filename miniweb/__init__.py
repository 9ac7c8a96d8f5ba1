"""A small HTTP file server with GET, DELETE and multipart upload handling, and an echo server."""

__version__ = "0.1.0"
__all__ = ["content", "handlers", "http", "multipart", "server"]