"""
=============================================================================
HEAD SERVER
=============================================================================

A small server around read_request_head(): it accepts connections, reads
one request head from each, and answers with what it found.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      PER-CONNECTION FLOW                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept() ──► new thread ──► read_request_head(conn, options)     │
    │                                    │                                 │
    │                   ┌────────────────┼─────────────────┐              │
    │                   ▼                ▼                 ▼              │
    │               RequestHead     ReadError with     ConnectionClosed   │
    │                   │           a status code          │              │
    │                   ▼                ▼                 │              │
    │               200 + JSON      4xx + JSON error       │              │
    │                   │                │                 │              │
    │                   └────────────────┴────────┬────────┘              │
    │                                             ▼                        │
    │                                        conn.close()                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every connection is closed after one answer: no keep-alive, no body
reading, no pipelining.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional

from .config import ServerConfig
from .core.connection import Connection
from .core.socket_server import SocketServer
from .http.errors import ReadError
from .http.message import RequestHead
from .http.response import HTTPResponse, json_response
from .http.status_codes import HTTPStatus
from .reader import read_request_head


logger = logging.getLogger(__name__)

HeadHandler = Callable[[RequestHead], HTTPResponse]


def describe_head(head: RequestHead) -> HTTPResponse:
    """Default handler: echo the parsed head back as JSON."""
    return json_response(HTTPStatus.OK, head.to_dict())


class HeadServer:
    """
    Accepts connections and reads one request head from each.

    Example:
        server = HeadServer(ServerConfig(port=8080, completion_timeout=5000))
        server.run()   # blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None, handler: HeadHandler = describe_head):
        self.config = config or ServerConfig()
        self.config.validate()
        self.handler = handler

        self._socket_server = SocketServer(self.config)
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()

    @property
    def port(self) -> int:
        return self._socket_server.port

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def listen(self) -> int:
        """Bind and listen without serving yet; returns the bound port."""
        self._socket_server.listen()
        return self.port

    def run(self):
        """Serve until shutdown() or Ctrl+C."""
        self._setup_logging()
        try:
            self._socket_server.serve_forever(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._join_workers(timeout=5.0)

    def shutdown(self):
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("httphead").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for ``conn`` (called by the accept loop)."""
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"httphead-{conn.id}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _process_connection(self, conn: Connection):
        """Read one head from ``conn``, answer, close. Runs in a worker thread."""
        try:
            with conn:
                self._serve_one(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def _serve_one(self, conn: Connection):
        try:
            head = read_request_head(conn, self.config.read_options())
        except ReadError as e:
            if e.status_code is None:
                logger.info(f"[{conn.id}] {conn.client_ip}:{conn.client_port}: {e}")
                return
            logger.warning(f"[{conn.id}] {conn.client_ip}:{conn.client_port}: {e} -> {int(e.status_code)}")
            self._send(conn, json_response(e.status_code, {"error": e.__class__.__name__}))
            return

        logger.info(f"[{conn.id}] {conn.client_ip}:{conn.client_port} {head.method.value} {head.target} {head.host.hostname}")

        try:
            response = self.handler(head)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            response = json_response(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "Internal Server Error"})

        self._send(conn, response)

    def _send(self, conn: Connection, response: HTTPResponse):
        response.headers.setdefault("Connection", "close")
        conn.send(response.to_bytes(self.config.server_name))

    def _join_workers(self, timeout: float):
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)
