"""
=============================================================================
REQUEST-HEAD GRAMMAR
=============================================================================

Turns individual lines (as produced by LineReader) into request-head
values. Nothing in here touches a socket: every function takes a complete
line and either returns a value or raises a ReadError.

    ┌─ REQUEST LINE ─────────────────────────────────────────────────────┐
    │    GET /api/users HTTP/1.1\r\n        parse_start_line()           │
    │    ─┬─ ─────┬──── ────┬───                                          │
    │   Method  Target   Version                                          │
    └─────────────────────────────────────────────────────────────────────┘
    ┌─ HEADERS ───────────────────────────────────────────────────────────┐
    │    Host: example.com\r\n             parse_header_line()           │
    │    Accept: */*\r\n                   (one call per line)            │
    └─────────────────────────────────────────────────────────────────────┘
    ┌─ BLANK LINE ────────────────────────────────────────────────────────┐
    │    \r\n                              is_blank_line()                │
    └─────────────────────────────────────────────────────────────────────┘

Lines are decoded as ISO-8859-1: every byte maps to one character, so
decoding never fails and obs-text bytes survive untouched.

=============================================================================
REGEX PATTERN EXPLAINED
=============================================================================

REQUEST_LINE_PATTERN: ([A-Z]+) ([^ CTL]+) (HTTP/\\d\\.\\d)\\r\\n

    ([A-Z]+)        METHOD, checked against Method afterwards
    ` `             exactly one space (SP)
    ([^ CTL]+)      TARGET, no spaces or control characters
    ` `             exactly one space
    (HTTP/\\d\\.\\d)    VERSION
    \\r\\n            the line terminator

Used with fullmatch(), so "GET  / HTTP/1.1" (two spaces) or a trailing
token is rejected rather than silently split differently.

=============================================================================
"""

import logging
import re
from typing import Iterator

from .errors import HeaderLineInvalid, HostInvalid, HostMissing, HostParseError, StartLineInvalid
from .host import parse_host
from .message import AbsPath, Header, Method, ParsedHost, RequestTarget


logger = logging.getLogger(__name__)

BLANK_LINE = b"\r\n"

REQUEST_LINE_PATTERN = re.compile(
    r"([A-Z]+) ([^ \x00-\x1f\x7f]+) (HTTP/\d\.\d)\r\n", re.ASCII
)

# Optional whitespace around a header value (RFC 7230 OWS)
OWS = " \t"


def is_blank_line(line: bytes) -> bool:
    """True for the empty CRLF line that ends the head."""
    return line == BLANK_LINE


def parse_start_line(line: bytes) -> tuple[Method, RequestTarget, str]:
    """
    Parse a request line.

    Args:
        line: The raw line, CRLF included.

    Returns:
        (method, target, version)

    Raises:
        StartLineInvalid: With the raw line, if it does not have exactly
                          three single-space separated tokens, the method
                          is unknown or the target has an unsupported form.
    """
    match = REQUEST_LINE_PATTERN.fullmatch(line.decode("iso-8859-1"))
    if match is None:
        raise StartLineInvalid(line)

    method_token, target_token, version = match.groups()

    method = Method.from_token(method_token)
    if method is None:
        raise StartLineInvalid(line)

    target = parse_target(target_token)
    if target is None:
        raise StartLineInvalid(line)

    return method, target, version


def parse_target(token: str):
    """
    Decode a request-target token.

    Only the absolute-path form is understood; other forms return None.
    """
    if token.startswith("/"):
        return AbsPath(token)
    return None


def parse_header_line(line: bytes) -> Header:
    """
    Parse one ``name: value`` header line.

    The line is split at the FIRST colon, so values may contain colons
    ("Host: example.com:8080"). The name is lower-cased, the value trimmed.

    Raises:
        HeaderLineInvalid: With the raw line, if there is no colon or the
                           name before it is empty.
    """
    text = line.decode("iso-8859-1")
    if text.endswith("\r\n"):
        text = text[:-2]

    name, colon, value = text.partition(":")
    if not colon or not name:
        raise HeaderLineInvalid(line)

    return Header(name.lower(), value.strip(OWS))


def read_start_line(lines: Iterator[bytes]) -> tuple[Method, RequestTarget, str]:
    """
    Skip any leading blank lines, then parse the request line.

    RFC 7230 §3.5: a server SHOULD ignore at least one empty line received
    before the request line. We ignore any number of them.
    """
    line = next(lines)
    while is_blank_line(line):
        line = next(lines)
    return parse_start_line(line)


def read_header_block(lines: Iterator[bytes]) -> list[Header]:
    """
    Parse header lines up to and including the blank line.

    Nothing after the blank line is pulled from ``lines``: those bytes
    belong to the body.

    Returns:
        Headers in arrival order. Duplicates are kept as separate entries.
    """
    headers: list[Header] = []
    for line in lines:
        if is_blank_line(line):
            break
        headers.append(parse_header_line(line))
    return headers


def validate_host(headers: list[Header]) -> ParsedHost:
    """
    Find and check the Host header.

    The first ``host`` header wins if the client sent several.

    Raises:
        HostMissing: No host header at all.
        HostInvalid: The value does not match the host grammar.
    """
    for header in headers:
        if header.name == "host":
            try:
                return parse_host(header.value)
            except HostParseError:
                logger.debug(f"Rejected Host header: {header.value!r}")
                raise HostInvalid() from None
    raise HostMissing()
