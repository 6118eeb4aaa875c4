"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Generator, Iterable, Optional, Union
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httphead import HeadServer, ServerConfig


@pytest.fixture
def sample_request() -> bytes:
    """A minimal valid request head with two headers."""
    return (
        b"GET / HTTP/1.1\r\n"
        b"host: example.test\r\n"
        b"x-foo: bar\r\n"
        b"\r\n"
    )


class ScriptedSocket:
    """
    In-memory stand-in for a connected socket.

    recv() hands out the scripted chunks in order (never more than
    ``bufsize`` bytes at once). An exception instance in the script is
    raised instead of returning data. Once the script is used up recv()
    returns b"", i.e. the peer closed.
    """

    def __init__(self, chunks: Iterable[Union[bytes, BaseException]] = ()):
        self._chunks = list(chunks)
        self._timeout: Optional[float] = None
        self.timeouts: list[Optional[float]] = []
        self.recv_calls = 0

    def recv(self, bufsize: int) -> bytes:
        self.recv_calls += 1
        if not self._chunks:
            return b""

        chunk = self._chunks.pop(0)
        if isinstance(chunk, BaseException):
            raise chunk

        if len(chunk) > bufsize:
            self._chunks.insert(0, chunk[bufsize:])
            chunk = chunk[:bufsize]
        return chunk

    def settimeout(self, value: Optional[float]):
        self._timeout = value
        self.timeouts.append(value)

    def gettimeout(self) -> Optional[float]:
        return self._timeout


@pytest.fixture
def scripted_socket():
    """Factory: scripted_socket([b"GET / ", b"HTTP/1.1\\r\\n", ...])."""
    return ScriptedSocket


class StreamFeeder:
    """
    Writes chunks into one end of a socketpair from a background thread,
    so the other end sees real, delayed TCP-like arrivals.
    """

    def __init__(self):
        self._pairs: list[tuple[socket.socket, socket.socket]] = []
        self._threads: list[threading.Thread] = []

    def __call__(
        self,
        chunks: Iterable[bytes],
        delay: float = 0.0,
        close: bool = True,
    ) -> socket.socket:
        """
        Start feeding ``chunks`` with ``delay`` seconds before each one.

        Returns:
            The receiving socket. The sending side is shut down after the
            last chunk when ``close`` is True, and kept open otherwise.
        """
        server_side, client_side = socket.socketpair()
        self._pairs.append((server_side, client_side))

        def write():
            try:
                for chunk in chunks:
                    if delay:
                        time.sleep(delay)
                    client_side.sendall(chunk)
                if close:
                    client_side.shutdown(socket.SHUT_WR)
            except OSError:
                pass  # Reader gave up and closed its end

        thread = threading.Thread(target=write, daemon=True)
        self._threads.append(thread)
        thread.start()
        return server_side

    def cleanup(self):
        for server_side, client_side in self._pairs:
            server_side.close()
            client_side.close()
        for thread in self._threads:
            thread.join(timeout=5.0)


@pytest.fixture
def feed() -> Generator[StreamFeeder, None, None]:
    """Feed byte chunks through a real socketpair."""
    feeder = StreamFeeder()
    yield feeder
    feeder.cleanup()


def split_every(data: bytes, size: int) -> list[bytes]:
    """Cut ``data`` into pieces of ``size`` bytes."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class RunningServer:
    """HeadServer running in a background thread."""

    def __init__(self, server: HeadServer):
        self.server = server
        self.port = server.listen()
        self._thread = threading.Thread(target=server.run, daemon=True)

    def start(self):
        self._thread.start()

    def stop(self):
        self.server.shutdown()
        self._thread.join(timeout=5.0)

    def request(self, data: bytes, delay_chunks: Optional[list[bytes]] = None, delay: float = 0.0) -> bytes:
        """
        Send ``data`` (or ``delay_chunks`` spaced by ``delay``), then read
        the whole response until the server closes.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            try:
                for chunk in delay_chunks or [data]:
                    if delay:
                        time.sleep(delay)
                    sock.sendall(chunk)
            except OSError:
                pass  # Server already answered and closed

            response = b""
            while True:
                try:
                    chunk = sock.recv(4096)
                except ConnectionResetError:
                    break
                if not chunk:
                    break
                response += chunk
            return response


@pytest.fixture
def head_server() -> Generator[RunningServer, None, None]:
    """A HeadServer on a free port with a 500 ms completion timeout."""
    server = HeadServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        completion_timeout=500,
        max_line_length=1024,
        log_level="WARNING",
    ))

    running = RunningServer(server)
    running.start()

    yield running

    running.stop()
