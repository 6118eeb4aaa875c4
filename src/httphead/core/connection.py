"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket.

A Connection quacks like a socket on the receive side (recv, settimeout,
gettimeout), so it can be handed straight to read_request_head(), and adds
what the server needs around it: an id for log lines, a state for
debugging, a send that reports failure instead of raising, and a proper
TCP close.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     │             └───────────────────────────────┤  (peer gone, error)
     └─────────────────────────────────────────────┘

One connection carries one request head: there is no keep-alive loop.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from .deadline import Deadline


logger = logging.getLogger(__name__)

# Upper bounds for reading what the client still sends after our response
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states, for logs and debugging."""
    NEW = "new"              # Just accepted
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_received: Total bytes read from the client so far.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_received: int = 0

    def __post_init__(self):
        # Blocking mode; read_request_head() applies its own deadline
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # RECEIVING: the socket-like surface LineReader reads from
    # =========================================================================

    def recv(self, bufsize: int) -> bytes:
        """
        Receive up to ``bufsize`` bytes.

        Returns b"" when the client has closed its side. Timeouts and
        other socket errors propagate to the caller unchanged.
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(bufsize)
        self.bytes_received += len(data)
        return data

    def settimeout(self, value: Optional[float]):
        self.socket.settimeout(value)

    def gettimeout(self) -> Optional[float]:
        return self.socket.gettimeout()

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> bool:
        """
        Send all of ``data`` to the client.

        Returns:
            True if send succeeded, False if the connection is gone.
        """
        self.state = ConnectionState.WRITING

        try:
            # sendall() loops until every byte is written
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully. Safe to call more than once.

        1. shutdown(SHUT_WR): send FIN, we are done writing
        2. drain what the client still sends, up to DRAIN_TIMEOUT
           seconds or DRAIN_LIMIT bytes
        3. close(): release the file descriptor

        Skipping the drain can turn our close into a RST, and a RST may
        make the client discard a response it has not read yet.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        # Bounded in time and bytes
        drain = Deadline(timeout=DRAIN_TIMEOUT)
        drained = 0
        try:
            while drained < DRAIN_LIMIT and not drain.expired:
                self.socket.settimeout(drain.remaining())
                data = self.socket.recv(1024)
                if not data:
                    break
                drained += len(data)
        except (socket.timeout, OSError):
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        """
        Context manager entry:

            with conn:
                head = read_request_head(conn)
            # closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
