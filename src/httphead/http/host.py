"""
=============================================================================
HOST HEADER GRAMMAR
=============================================================================

HTTP/1.1 requires every request to name the host it is meant for
(RFC 7230 §5.4), so a server can tell virtual hosts apart:

    Host: example.com:8080
          ─────┬───── ──┬─
               │        └── port (optional, digits only)
               └─────────── hostname

The grammar accepted here is deliberately narrow:

    host = *( ALPHA / DIGIT / "-" / "." / "_" / "~" ) [ ":" 1*DIGIT ]

    ┌──────────────────────────┬────────────────────────────────────┐
    │  Input                   │  Result                            │
    ├──────────────────────────┼────────────────────────────────────┤
    │  "example.com"           │  ("example.com", None)             │
    │  "Example.COM:8080"      │  ("example.com", 8080)             │
    │  ""                      │  ("", None)                        │
    │  "example.com:bad"       │  HostParseError                    │
    │  "https://example.com"   │  HostParseError  (":" then "/")    │
    │  "#"                     │  HostParseError                    │
    └──────────────────────────┴────────────────────────────────────┘

parse_host() is pure: no socket, no state, safe to call from anywhere.

=============================================================================
"""

import re

from .errors import HostParseError
from .message import ParsedHost


# ASCII only: "\d" would also accept non-ASCII digits like "٣".
HOST_PATTERN = re.compile(r"([A-Za-z0-9\-._~]*)(?::([0-9]+))?", re.ASCII)


def parse_host(text: str) -> ParsedHost:
    """
    Parse a Host header value into (hostname, port).

    Args:
        text: The header value, already trimmed.

    Returns:
        ParsedHost with a lower-cased hostname and the port as int
        (or None when no port was given).

    Raises:
        HostParseError: If any character falls outside the grammar.

    Example:
        >>> parse_host("Example.com:8080")
        ParsedHost(hostname='example.com', port=8080)
    """
    match = HOST_PATTERN.fullmatch(text)
    if match is None:
        raise HostParseError()

    hostname, port = match.groups()
    if port is None:
        return ParsedHost(hostname.lower(), None)

    # int() refuses very long digit strings (sys.set_int_max_str_digits)
    try:
        port_number = int(port)
    except ValueError:
        raise HostParseError() from None
    return ParsedHost(hostname.lower(), port_number)
