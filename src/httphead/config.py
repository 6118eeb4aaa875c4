"""
=============================================================================
CONFIGURATION
=============================================================================

Two dataclasses, one per layer:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig        Where to listen, how to log                   │
    │       │                                                              │
    │       └──► read_options()                                            │
    │                 │                                                    │
    │                 ▼                                                    │
    │   ReadOptions         How one request head is read                  │
    │                       (deadline, line cap, recv size)               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

ReadOptions is all read_request_head() needs, so the reader can be used
without the server at all.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HTTPHEAD_HOST         Server host (default: 127.0.0.1)
    HTTPHEAD_PORT         Server port (default: 8080)
    HTTPHEAD_TIMEOUT_MS   Completion timeout in ms (default: 10000, 0 = none)
    HTTPHEAD_MAX_LINE     Max request/header line length (default: 2048)
    HTTPHEAD_LOG_LEVEL    Logging level (default: INFO)

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_MAX_LINE_LENGTH = 2048
DEFAULT_RECV_SIZE = 4096


@dataclass
class ReadOptions:
    """
    Options for a single read_request_head() call.

    Attributes:
        completion_timeout: Milliseconds the WHOLE head may take to arrive,
                            counted from the start of the call across all
                            recv() calls. None = no deadline.
        max_line_length: Longest request line or header line accepted,
                         CRLF included.
        recv_size: How many bytes to ask the socket for at a time.
    """

    completion_timeout: Optional[int] = None
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    recv_size: int = DEFAULT_RECV_SIZE

    def validate(self) -> None:
        """Raise ValueError on nonsensical values."""
        if self.completion_timeout is not None and self.completion_timeout <= 0:
            raise ValueError("completion_timeout must be > 0 (or None for no deadline)")

        if self.max_line_length < 2:
            raise ValueError("max_line_length must leave room for CRLF")

        if self.recv_size < 1:
            raise ValueError("recv_size must be >= 1")


@dataclass
class ServerConfig:
    """
    Configuration for the head-reading server.

    Development:
        ServerConfig(port=8080, log_level="DEBUG")

    Behind a load balancer:
        ServerConfig(host="0.0.0.0", completion_timeout=5000)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Accept queue length before the OS starts refusing connections."""

    # ─────────────────────────────────────────────────────────────────────
    # HEAD READING
    # ─────────────────────────────────────────────────────────────────────

    completion_timeout: Optional[int] = 10_000
    """
    Milliseconds a client gets to send its whole request head.
    None waits forever, which lets one slow client pin a thread.
    """

    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    """Longest request line / header line, CRLF included."""

    recv_size: int = DEFAULT_RECV_SIZE
    """Bytes per recv() call."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    server_name: str = "httphead/1.0"
    """Value of the Server response header."""

    def read_options(self) -> ReadOptions:
        """The per-request options this server reads heads with."""
        return ReadOptions(
            completion_timeout=self.completion_timeout,
            max_line_length=self.max_line_length,
            recv_size=self.recv_size,
        )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from HTTPHEAD_* environment variables.

        HTTPHEAD_TIMEOUT_MS=0 disables the completion timeout.
        """
        timeout_ms = int(os.getenv("HTTPHEAD_TIMEOUT_MS", "10000"))
        return cls(
            host=os.getenv("HTTPHEAD_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTPHEAD_PORT", "8080")),
            completion_timeout=timeout_ms or None,
            max_line_length=int(os.getenv("HTTPHEAD_MAX_LINE", str(DEFAULT_MAX_LINE_LENGTH))),
            log_level=os.getenv("HTTPHEAD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately rather than on
        the first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {self.log_level}")

        self.read_options().validate()
