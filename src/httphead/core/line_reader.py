"""
=============================================================================
LINE ASSEMBLY OVER A BYTE STREAM
=============================================================================

TCP delivers bytes, not lines. The request head is made of CRLF-terminated
lines, so before anything can be parsed the stream has to be cut back into
lines, whatever size the pieces arrived in:

    recv() → b"GET / HT"
    recv() → b"TP/1.1\r\nHost: a\r"
    recv() → b"\n\r\n"

    read_line() → b"GET / HTTP/1.1\r\n"
    read_line() → b"Host: a\r\n"
    read_line() → b"\r\n"

=============================================================================
HOW IT WORKS
=============================================================================

    ┌──────────────────────────────────────────────────────────────────┐
    │                         read_line()                              │
    ├──────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   ┌──────────────────────────┐                                  │
    │   │ CRLF in buffer?          │── yes ──► too long? ──► raise    │
    │   └────────────┬─────────────┘               │                   │
    │                │ no                          └──► cut & return  │
    │   ┌────────────▼─────────────┐                                  │
    │   │ buffer > max length?     │── yes ──► TransportLimitExceeded │
    │   └────────────┬─────────────┘                                  │
    │                │ no                                              │
    │   ┌────────────▼─────────────┐                                  │
    │   │ recv() within deadline   │── b"" ──► ConnectionClosed       │
    │   └────────────┬─────────────┘── timeout ──► DeadlineExceeded   │
    │                │                                                 │
    │                └──── append, loop                                │
    └──────────────────────────────────────────────────────────────────┘

Lines already in the buffer are always handed out before the next recv(),
so a head that arrived in one piece never waits on the socket again.

The length cap counts the CRLF. Whether a line is too long is decided by
the line itself, never by how it was chunked: a buffer holding no CRLF is
a prefix of a single line, so once it is longer than the cap the line is
too.

=============================================================================
"""

import errno
import logging
import socket
from typing import Iterator, Optional, Protocol

from ..config import DEFAULT_MAX_LINE_LENGTH, DEFAULT_RECV_SIZE
from ..http.errors import ConnectionClosed, DeadlineExceeded, TransportLimitExceeded
from .deadline import Deadline


logger = logging.getLogger(__name__)

CRLF = b"\r\n"


class ByteSource(Protocol):
    """What LineReader needs from a socket. socket.socket and Connection fit."""

    def recv(self, bufsize: int) -> bytes: ...

    def settimeout(self, value: Optional[float]) -> None: ...

    def gettimeout(self) -> Optional[float]: ...


class LineReader:
    """
    Buffered CRLF line reader with a per-line size cap and a deadline.

    Args:
        source: Where the bytes come from.
        max_line_length: Longest accepted line, CRLF included.
        recv_size: Bytes asked for per recv() call.
        deadline: Shared time budget; None means wait as long as the
                  source itself allows.

    Example:
        reader = LineReader(sock, max_line_length=1024)
        for line in reader:
            if line == b"\\r\\n":
                break
    """

    def __init__(
        self,
        source: ByteSource,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
        recv_size: int = DEFAULT_RECV_SIZE,
        deadline: Optional[Deadline] = None,
    ):
        self.source = source
        self.max_line_length = max_line_length
        self.recv_size = recv_size
        self.deadline = deadline or Deadline()

        self._buffer = bytearray()
        # Bytes before this offset are known to hold no CRLF
        self._scanned = 0

    @property
    def leftover(self) -> bytes:
        """Bytes received but not yet returned as a line."""
        return bytes(self._buffer)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            yield self.read_line()

    def read_line(self) -> bytes:
        """
        Return the next line, CRLF included.

        Raises:
            TransportLimitExceeded: The line is longer than max_line_length.
            ConnectionClosed: The stream ended before the line did.
            DeadlineExceeded: The deadline passed while waiting for bytes.
        """
        while True:
            end = self._buffer.find(CRLF, self._scanned)
            if end != -1:
                line_length = end + len(CRLF)
                if line_length > self.max_line_length:
                    self._overflow(line_length)
                line = bytes(self._buffer[:line_length])
                del self._buffer[:line_length]
                self._scanned = 0
                return line

            if len(self._buffer) > self.max_line_length:
                self._overflow(len(self._buffer))

            # Keep the last byte in the scan window: it may be the CR of a
            # CRLF split across two chunks.
            self._scanned = max(0, len(self._buffer) - 1)

            chunk = self._recv()
            if not chunk:
                # Never hand out a partial line as if it were complete
                self._buffer.clear()
                self._scanned = 0
                raise ConnectionClosed()

            self._buffer += chunk

    def _overflow(self, length: int):
        logger.debug(f"Line of at least {length} bytes exceeds limit {self.max_line_length}")
        self._buffer.clear()
        self._scanned = 0
        raise TransportLimitExceeded(errno.EMSGSIZE)

    def _recv(self) -> bytes:
        """
        One recv() bounded by what is left of the deadline.

        Returns:
            The received bytes; b"" when the peer closed or reset.
        """
        if self.deadline.is_bounded:
            remaining = self.deadline.remaining()
            if remaining <= 0:
                self._buffer.clear()
                raise DeadlineExceeded()
            self.source.settimeout(remaining)

        try:
            return self.source.recv(self.recv_size)
        except socket.timeout:
            self._buffer.clear()
            raise DeadlineExceeded() from None
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError):
            return b""
        except OSError as e:
            if e.errno == errno.EMSGSIZE:
                self._buffer.clear()
                raise TransportLimitExceeded(e.errno) from e
            logger.debug(f"recv() failed: {e}")
            raise ConnectionClosed(f"Connection lost: {e}") from e
