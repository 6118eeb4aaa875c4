"""
=============================================================================
httphead: INCREMENTAL HTTP/1.1 REQUEST-HEAD READER
=============================================================================

Reads the head of an HTTP/1.1 request (request line + headers) from a raw
socket, however the bytes are fragmented, within a total time budget and a
per-line size cap, and reports exactly why when it cannot.

    from httphead import read_request_head, ReadOptions, ReadError

    try:
        head = read_request_head(sock, ReadOptions(completion_timeout=5000))
    except ReadError as e:
        ...
    else:
        head.method        # Method.GET
        head.target        # AbsPath("/")
        head.headers       # [Header("host", "example.test"), ...]
        head.host          # ParsedHost("example.test", None)

=============================================================================
PACKAGE LAYOUT
=============================================================================

    httphead/
    ├── reader.py          read_request_head(): the whole pipeline
    ├── config.py          ReadOptions, ServerConfig
    ├── server.py          HeadServer: accept → read head → answer
    ├── core/
    │   ├── line_reader.py bytes → CRLF lines, size cap
    │   ├── deadline.py    cumulative time budget
    │   ├── connection.py  client socket wrapper
    │   └── socket_server.py listen / accept loop
    └── http/
        ├── request.py     request-line and header-line grammar
        ├── host.py        parse_host()
        ├── message.py     Method, AbsPath, Header, ParsedHost, RequestHead
        ├── errors.py      ReadError and its subclasses
        ├── response.py    HTTPResponse serialization
        └── status_codes.py

=============================================================================
"""

__version__ = "1.0.0"

from .config import ReadOptions, ServerConfig
from .reader import read_request_head
from .http import (
    ReadError,
    StartLineInvalid,
    HeaderLineInvalid,
    TransportLimitExceeded,
    ConnectionClosed,
    DeadlineExceeded,
    HostMissing,
    HostInvalid,
    HostParseError,
    Method,
    RequestTarget,
    AbsPath,
    Header,
    ParsedHost,
    RequestHead,
    parse_host,
)
from .server import HeadServer

__all__ = [
    "read_request_head",
    "parse_host",
    "ReadOptions",
    "ServerConfig",
    "HeadServer",
    "ReadError",
    "StartLineInvalid",
    "HeaderLineInvalid",
    "TransportLimitExceeded",
    "ConnectionClosed",
    "DeadlineExceeded",
    "HostMissing",
    "HostInvalid",
    "HostParseError",
    "Method",
    "RequestTarget",
    "AbsPath",
    "Header",
    "ParsedHost",
    "RequestHead",
    "__version__",
]
