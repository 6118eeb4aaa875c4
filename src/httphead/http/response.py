"""
=============================================================================
HTTP RESPONSE SERIALIZATION
=============================================================================

The server only ever says a few short things back: "got your head" or
"here is why I rejected it". HTTPResponse turns that into bytes:

    HTTP/1.1 400 Bad Request\r\n          ← Status line
    Content-Type: application/json\r\n
    Content-Length: 33\r\n                ← Auto-calculated
    Date: Sun, 18 Oct 2026 10:00:00 GMT\r\n
    Server: httphead/1.0\r\n
    Connection: close\r\n
    \r\n                                  ← End of head
    {"error": "Missing Host header"}      ← Body

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
import json

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """A response to be written to the client socket."""

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. ``HTTP/1.1 200 OK``"""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self, server_name: str = "httphead/1.0") -> bytes:
        """
        Serialize for socket.sendall().

        Content-Length, Date and Server are filled in unless already set.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("iso-8859-1") + b"\r\n"
        return header_bytes + self.body


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an IMF-fixdate (RFC 7231 §7.1.1.1).

    Example: Sun, 18 Oct 2026 10:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def json_response(status: HTTPStatus, data: Any, close: bool = True) -> HTTPResponse:
    """
    Build a JSON response.

    Args:
        status: Status code to send.
        data: Anything json.dumps() accepts.
        close: Add ``Connection: close`` (the server never keeps a
               connection open after answering).
    """
    response = HTTPResponse(
        status=status,
        headers={"Content-Type": "application/json; charset=utf-8"},
        body=json.dumps(data).encode("utf-8"),
    )
    if close:
        response.set_header("Connection", "close")
    return response
