"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

The socket primitives the head reader relies on:

    listen()   socket() + setsockopt() + bind() + listen()
    port       the port actually bound (useful with port=0)
    accept()   wait for a client, wrap it in a Connection
    send / close live on Connection

plus serve_forever(), an accept loop that hands every Connection to a
callback until shutdown() is called.

    ┌───────────────────────┐
    │   Listening Socket    │ ◄── created once by listen()
    └───────────┬───────────┘
                │ accept()
        ┌───────┼───────┐
        ▼       ▼       ▼
     Client  Client  Client     one Connection (and one thread) each
"""

import socket
import signal
import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .connection import Connection

if TYPE_CHECKING:
    from ..config import ServerConfig


logger = logging.getLogger(__name__)

# accept() wakes up this often to notice shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP server: owns the listening socket, produces Connections.

    Usage:
        server = SocketServer(config)
        server.listen()
        print(server.port)
        server.serve_forever(handle_connection)   # blocks until shutdown()
    """

    def __init__(self, config: "ServerConfig"):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def port(self) -> int:
        """The bound port. Differs from config.port when that was 0."""
        if self._socket is None:
            raise RuntimeError("Server is not listening")
        return self._socket.getsockname()[1]

    @property
    def address(self) -> Tuple[str, int]:
        return (self.config.host, self.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Allow immediate rebind after restart (skip TIME_WAIT)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are tiny; do not let Nagle delay them
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def listen(self) -> socket.socket:
        """
        Create, bind and start listening.

        Raises:
            OSError: If the address cannot be bound (in use, no permission).
        """
        sock = self._create_socket()
        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        self._socket = sock
        self._running = True
        host, port = self.address
        logger.info(f"Listening on {host}:{port}")
        return sock

    def accept(self) -> Optional[Connection]:
        """
        Wait for one client.

        Returns:
            A Connection, or None if no client arrived within the poll
            interval (so callers can check for shutdown).

        Raises:
            OSError: If the listening socket failed or was closed.
        """
        if self._socket is None:
            raise RuntimeError("Server is not listening")

        try:
            client_socket, client_address = self._socket.accept()
        except socket.timeout:
            return None

        conn = Connection(socket=client_socket, address=client_address)
        logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")
        return conn

    def serve_forever(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown(), passing each to the handler.

        listen() is called first if it has not been already. The
        listening socket is closed on the way out.
        """
        if self._socket is None:
            self.listen()

        self._setup_signals()
        try:
            while self._running:
                try:
                    conn = self.accept()
                except OSError as e:
                    if self._running:
                        logger.error(f"Accept error: {e}")
                    break

                if conn is not None:
                    connection_handler(conn)
        finally:
            self._cleanup()

    def shutdown(self):
        """Stop the accept loop. Idempotent; callable from any thread."""
        logger.info("Shutting down socket server...")
        self._running = False

    def _setup_signals(self):
        """
        Turn SIGTERM/SIGINT into a graceful shutdown.

        Python only allows signal handlers in the main thread; when served
        from another thread (tests), signals are left alone.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        logger.info("Socket server stopped")
