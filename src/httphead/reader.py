"""
=============================================================================
READING A REQUEST HEAD FROM A SOCKET
=============================================================================

read_request_head() is the one call that ties everything together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    read_request_head(sock, options)                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Deadline.from_millis(completion_timeout)     ← budget starts now  │
    │        │                                                             │
    │   LineReader(sock, max_line_length, deadline)  ← bytes → lines      │
    │        │                                                             │
    │        ├──► read_start_line()      skip blank lines, parse line 1   │
    │        ├──► read_header_block()    header lines until blank line    │
    │        └──► validate_host()        Host present and well-formed     │
    │                                                                      │
    │   RequestHead(...)                             ← or first ReadError │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The first failure wins and nothing partial is returned. The call never
retries; the caller decides what happens to the connection afterwards.

Usage:
    try:
        head = read_request_head(sock, ReadOptions(completion_timeout=5000))
    except DeadlineExceeded:
        ...  # client too slow
    except ReadError as e:
        ...  # e.status_code says what to answer, if anything

=============================================================================
"""

import logging
from typing import Optional

from .config import ReadOptions
from .core.deadline import Deadline
from .core.line_reader import ByteSource, LineReader
from .http.message import RequestHead
from .http.request import read_header_block, read_start_line, validate_host


logger = logging.getLogger(__name__)


def read_request_head(sock: ByteSource, options: Optional[ReadOptions] = None) -> RequestHead:
    """
    Read and validate one HTTP/1.1 request head from ``sock``.

    Args:
        sock: A connected socket (or anything with recv/settimeout/gettimeout).
        options: Deadline and size limits. Defaults to no deadline and a
                 2 KB line cap.

    Returns:
        The parsed RequestHead. Bytes that arrived after the blank line
        are in ``head.leftover``.

    Raises:
        StartLineInvalid, HeaderLineInvalid: Syntax errors.
        TransportLimitExceeded: A line was longer than max_line_length.
        ConnectionClosed: The peer closed before the head was complete.
        DeadlineExceeded: completion_timeout elapsed.
        HostMissing, HostInvalid: Host header problems.
        ValueError: If ``options`` is nonsensical (checked before any recv).
    """
    options = options or ReadOptions()
    options.validate()

    deadline = Deadline.from_millis(options.completion_timeout)
    reader = LineReader(
        sock,
        max_line_length=options.max_line_length,
        recv_size=options.recv_size,
        deadline=deadline,
    )

    # The deadline drives the socket timeout while we read; put the
    # caller's timeout back afterwards.
    previous_timeout = sock.gettimeout() if deadline.is_bounded else None

    try:
        lines = iter(reader)
        method, target, version = read_start_line(lines)
        headers = read_header_block(lines)
        host = validate_host(headers)
    finally:
        if deadline.is_bounded:
            try:
                sock.settimeout(previous_timeout)
            except OSError:
                pass  # Socket already closed

    logger.debug(
        f"Read {method.value} {target} {version} "
        f"({len(headers)} headers, {deadline.elapsed * 1000:.1f} ms)"
    )

    return RequestHead(
        method=method,
        target=target,
        headers=headers,
        version=version,
        host=host,
        leftover=reader.leftover,
    )
