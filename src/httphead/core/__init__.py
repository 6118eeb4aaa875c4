"""
=============================================================================
CORE: SOCKETS, LINES, DEADLINES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer     listen / accept loop, one Connection per client   │
    │  Connection       socket wrapper: recv, send, graceful close        │
    │  LineReader       bytes in any chunking → CRLF lines, size-capped   │
    │  Deadline         one time budget across many recv() calls          │
    └─────────────────────────────────────────────────────────────────────┘

Thread-per-connection: every accepted Connection is read in its own
thread, so one slow client never holds up another. Nothing here is shared
between connections.

=============================================================================
"""

from .deadline import Deadline
from .line_reader import LineReader
from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Deadline",
    "LineReader",
    "Connection",
    "ConnectionState",
    "SocketServer",
]
