"""
=============================================================================
REQUEST-HEAD READ ERRORS
=============================================================================

Every way a head-read can fail, as one closed exception hierarchy.

    ReadError
    ├── StartLineInvalid          bad request line / unknown method
    ├── HeaderLineInvalid         header line without a colon
    ├── TransportLimitExceeded    a single line is longer than the cap
    ├── ConnectionClosed          peer went away before the head was complete
    ├── DeadlineExceeded          the cumulative time budget ran out
    ├── HostMissing               no Host header
    └── HostInvalid               Host header does not parse

=============================================================================
WHICH ERRORS CAN WE ANSWER?
=============================================================================

Each error carries the HTTP status the server should reply with, in the
same way HTTPParseError carries a status code:

    ┌────────────────────────┬────────┬──────────────────────────────────┐
    │  Error                 │ Status │ Why                              │
    ├────────────────────────┼────────┼──────────────────────────────────┤
    │  StartLineInvalid      │  400   │ Syntax error                     │
    │  HeaderLineInvalid     │  400   │ Syntax error                     │
    │  HostMissing           │  400   │ RFC 7230 §5.4: Host is mandatory │
    │  HostInvalid           │  400   │ RFC 7230 §5.4                    │
    │  DeadlineExceeded      │  408   │ Client too slow                  │
    │  TransportLimitExceeded│  431   │ Line too large                   │
    │  ConnectionClosed      │  None  │ Nobody left to answer            │
    └────────────────────────┴────────┴──────────────────────────────────┘

=============================================================================
"""

import errno
from typing import Optional

from .status_codes import HTTPStatus


class ReadError(Exception):
    """
    Base class for all request-head read failures.

    Catch this to handle every outcome of read_request_head() that is not
    a successfully parsed head.

    Attributes:
        status_code: HTTP status to reply with, or None when no reply
                     can be sent.
    """

    status_code: Optional[HTTPStatus] = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request head"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class StartLineInvalid(ReadError):
    """The request line is not ``METHOD SP TARGET SP VERSION CRLF``."""

    default_message = "Invalid request line"

    def __init__(self, line: bytes):
        super().__init__(f"Invalid request line: {line!r}")
        self.line = line  # Raw offending line, CRLF included


class HeaderLineInvalid(ReadError):
    """A header-section line has no ``name: value`` shape."""

    default_message = "Invalid header line"

    def __init__(self, line: bytes):
        super().__init__(f"Invalid header line: {line!r}")
        self.line = line


class TransportLimitExceeded(ReadError):
    """
    A single line grew past the configured maximum length.

    The code mirrors what a line-oriented transport reports when a packet
    is too long for its buffer: errno.EMSGSIZE ("Message too long").
    """

    status_code = HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE
    default_message = "Line too long"

    def __init__(self, code: int = errno.EMSGSIZE):
        super().__init__(f"Line too long ({errno.errorcode.get(code, code)})")
        self.code = code


class ConnectionClosed(ReadError):
    """The peer closed the connection before a complete head arrived."""

    status_code = None
    default_message = "Connection closed by peer"


class DeadlineExceeded(ReadError):
    """The completion timeout elapsed before the head was complete."""

    status_code = HTTPStatus.REQUEST_TIMEOUT
    default_message = "Request head not received in time"


class HostMissing(ReadError):
    """No ``host`` header was sent."""

    default_message = "Missing Host header"


class HostInvalid(ReadError):
    """The ``host`` header value does not match the host grammar."""

    default_message = "Invalid Host header"


class HostParseError(ValueError):
    """Raised by parse_host() for text outside the host grammar."""
