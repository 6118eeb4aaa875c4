"""
HTTP/1.1 request-head grammar, data model and errors.

Everything in this package is pure: it works on bytes and strings that
have already been read. Reading from sockets lives in httphead.core and
httphead.reader.
"""

from .errors import (
    ReadError,
    StartLineInvalid,
    HeaderLineInvalid,
    TransportLimitExceeded,
    ConnectionClosed,
    DeadlineExceeded,
    HostMissing,
    HostInvalid,
    HostParseError,
)
from .message import Method, RequestTarget, AbsPath, Header, ParsedHost, RequestHead
from .host import parse_host
from .request import (
    parse_start_line,
    parse_header_line,
    read_start_line,
    read_header_block,
    validate_host,
    is_blank_line,
)
from .response import HTTPResponse, json_response
from .status_codes import HTTPStatus

__all__ = [
    # Errors
    "ReadError",
    "StartLineInvalid",
    "HeaderLineInvalid",
    "TransportLimitExceeded",
    "ConnectionClosed",
    "DeadlineExceeded",
    "HostMissing",
    "HostInvalid",
    "HostParseError",

    # Data model
    "Method",
    "RequestTarget",
    "AbsPath",
    "Header",
    "ParsedHost",
    "RequestHead",

    # Grammar
    "parse_host",
    "parse_start_line",
    "parse_header_line",
    "read_start_line",
    "read_header_block",
    "validate_host",
    "is_blank_line",

    # Responses
    "HTTPResponse",
    "json_response",
    "HTTPStatus",
]
