# miniweb

miniweb is a small HTTP/1.x server with no dependencies. It serves files from
a web root, deletes files on request and stores multipart file uploads. It also
includes a simple message echo server.

## Behaviour

The server handles one request per connection and closes the connection after
it replies.

- `GET /path` serves `<web root>/path`. `GET /` serves `/index.html`.
- `DELETE /path` removes `<web root>/path`. This works for a file or an empty
  directory.
- `POST /upload` stores an uploaded file in the upload directory.
- Any other method, or a request line with no path, gets the 405 response.

### GET

The `Content-Type` depends on the file extension:

| Extension        | Content-Type             |
| ---------------- | ------------------------ |
| `.html`, `.htm`  | `text/html`              |
| `.css`           | `text/css`               |
| `.js`            | `application/javascript` |
| `.json`          | `application/json`       |
| `.jpg`, `.jpeg`  | `image/jpeg`             |
| `.png`           | `image/png`              |
| `.gif`           | `image/gif`              |
| `.pdf`           | `application/pdf`        |
| `.txt`           | `text/plain`             |

Any other extension gets `application/octet-stream`. A file that is missing or
unreadable gets a `404 Not Found` HTML page.

### DELETE

- `200 Deleted successfully` when the file or empty directory is removed.
- `404 File not found` when nothing exists at the path.
- `500 Failed to delete file` when the removal fails.

### POST /upload

The file name comes from the first `filename="..."` in the body. The content
starts after the blank line that ends that part's headers. It ends at the first
`\r\n--`. The file is written to `<upload dir>/<filename>`.

- `200 File uploaded successfully` when the file is stored.
- `400 No filename found` when the body has no `filename="`.
- `400 Invalid file format` when the part headers are not followed by a blank
  line.
- `500 File write error` when the file cannot be created.

### Response headers

Every response has these headers:

- `HTTP/1.1`
- `Content-Type`
- `Content-Length`
- `Connection: close`

## Installation

```
pip install .
```

## Command line

```
miniweb [--mode {http,echo,prompt}] [--host HOST] [--port PORT]
        [--web-root DIR] [--upload-dir DIR]
```

| Option         | Default            | Meaning                        |
| -------------- | ------------------ | ------------------------------ |
| `--mode`       | `http`             | Which mode to run (see below). |
| `--host`       | `0.0.0.0`          | Address to listen on.          |
| `--port`       | `8080`             | Port to listen on.             |
| `--web-root`   | `/var/www`         | Directory that files are served from and deleted in. |
| `--upload-dir` | `/var/www/uploads` | Directory that uploads are written to. |

The modes are:

- `http` runs the file server.
- `echo` runs the echo server.
- `prompt` prints `TYPE: `, waits for one line on standard input and echoes it
  back as `You typed: ...`.

If the server cannot bind, miniweb prints `Bind failed: ...` and exits with
status 1. Otherwise it prints `Server is listening on port N...` and logs each
request it receives. Ctrl-C stops it.

Try it with curl:

```
curl http://localhost:8080/
curl -X DELETE http://localhost:8080/uploads/notes.txt
```

## Using it as a library

```python
from miniweb.handlers import RequestHandler
from miniweb.server import HTTPServer

handler = RequestHandler("/srv/site", "/srv/site/uploads")
with HTTPServer("127.0.0.1", 8080, handler) as server:
    server.serve_forever()
```

`serve_forever()` runs until another thread calls `shutdown()`. `shutdown()`
waits for the loop to finish and then closes the sockets. `server_address`
holds the address that was actually bound, so port `0` picks a free port.

The module contents are:

- **`miniweb.http`**
  - `parse_request(data)` returns a `Request` with `method`, `path`, `headers`
    and `body`. It raises `ValueError` when the method or the path is missing.
  - `header_lines(data)` lists the lines of the header section.
  - `Response(...).to_bytes()` builds the wire form of a response.
  - `not_found()` and `method_not_allowed()` return the standard error
    responses.
- **`miniweb.content`**
  - `content_type_for(path)` returns the content type for a path.
  - `resolve_path(web_root, request_path)` returns the file path for a request
    path.
  - `serve_file(web_root, request_path)` returns the response for a GET
    request.
- **`miniweb.multipart`**
  - `extract_upload(data)` returns an `Upload` (`filename`, `content`) from a
    complete body. It raises `MultipartError` when the body is malformed.
  - `StreamingUpload(upload_dir)` writes an upload to disk as chunks are passed
    to `feed()`.
- **`miniweb.handlers`**
  - `RequestHandler.handle(data, chunks)` turns the first read from a client
    into a `Response`. It returns `None` when no reply should be sent.
- **`miniweb.server`**
  - `HTTPServer` is the file server.
  - `EchoServer` accepts any number of clients and logs each message it reads.
    It answers every message with `RECEIVED` and drops the client on
    disconnect.

## Limitations

- The request line and headers are taken from a single read of at most 8191
  bytes.
- An upload body is taken only from the reads that follow the first one. Bytes
  of the body that arrive in the same read as the headers are not used. Reading
  stops after one second without data. If no further data arrives, or the file
  name has no closing quote, the connection is closed without a reply.
- The upload directory is not created. It must already exist.
- Request paths are joined onto the web root as given. No normalisation is
  done, and nothing is checked against `..`. Do not expose the server to
  untrusted clients.
- There is no keep-alive, range support, directory listing or TLS.

## Running the tests

```
pip install .[test]
pytest
```