"""
=============================================================================
REQUEST-HEAD DATA MODEL
=============================================================================

The values a successful head-read produces:

    GET /index.html HTTP/1.1\r\n        ──►  Method.GET
                                             AbsPath("/index.html")
                                             version "HTTP/1.1"
    Host: Example.TEST:8080\r\n         ──►  Header("host", "Example.TEST:8080")
    Accept: */*\r\n                     ──►  Header("accept", "*/*")
    \r\n                                     ParsedHost("example.test", 8080)

All of these are plain values: created per read, never shared between
connections.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional


class Method(str, Enum):
    """
    The HTTP methods a request line may carry (RFC 7231 §4 + PATCH).

    The set is closed: an unknown token is a request-line error, there is
    no "extension method" fallback. Members compare equal to their token:

        >>> Method("GET") is Method.GET
        True
        >>> Method.GET == "GET"
        True
    """

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"
    TRACE = "TRACE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"

    @classmethod
    def from_token(cls, token: str) -> Optional["Method"]:
        """Look up a method by its exact (case-sensitive) token."""
        try:
            return cls(token)
        except ValueError:
            return None


class RequestTarget:
    """
    Base class for request-target forms (RFC 7230 §5.3).

    Only the origin/absolute-path form is produced today. Authority-form
    (CONNECT host:port) and asterisk-form (OPTIONS *) fit in as further
    subclasses.
    """

    __slots__ = ()


@dataclass(frozen=True)
class AbsPath(RequestTarget):
    """Absolute-path target, e.g. ``/users?page=1``."""

    path: str

    def __str__(self) -> str:
        return self.path


class Header(NamedTuple):
    """
    One header field. The name is stored lower-cased.

    A NamedTuple, so ``Header("host", "a") == ("host", "a")``.
    """

    name: str
    value: str


class ParsedHost(NamedTuple):
    """Result of parse_host(): lower-cased hostname and optional port."""

    hostname: str
    port: Optional[int] = None


@dataclass
class RequestHead:
    """
    A fully read and validated request head.

    Attributes:
        method:   The request method.
        target:   The request target (an AbsPath).
        headers:  Header fields in arrival order, duplicates kept.
        version:  Version token from the request line ("HTTP/1.1").
        host:     The validated Host header.
        leftover: Bytes received after the blank line (start of the body).
                  Depends on how the peer chunked its writes, so it is
                  ignored by ==.
    """

    method: Method
    target: RequestTarget
    headers: list[Header] = field(default_factory=list)
    version: str = "HTTP/1.1"
    host: ParsedHost = ParsedHost("")
    leftover: bytes = field(default=b"", compare=False, repr=False)

    def as_tuple(self) -> tuple[Method, RequestTarget, list[Header]]:
        """The ``(method, target, headers)`` triple."""
        return (self.method, self.target, self.headers)

    def get_header(self, name: str) -> Optional[str]:
        """Value of the first header called ``name`` (any case), or None."""
        name = name.lower()
        for header in self.headers:
            if header.name == name:
                return header.value
        return None

    def to_dict(self) -> dict:
        """JSON-friendly view, used for responses and logs."""
        return {
            "method": self.method.value,
            "target": str(self.target),
            "version": self.version,
            "headers": [[h.name, h.value] for h in self.headers],
            "host": {"hostname": self.host.hostname, "port": self.host.port},
        }
