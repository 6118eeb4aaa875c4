"""
Command-line entry point.

    python -m httphead                       # 127.0.0.1:8080, 10 s budget
    python -m httphead --port 3000 -t 2000   # 2 s to send the whole head
    python -m httphead -t 0                  # no completion timeout

Then, from another terminal:

    curl -v http://127.0.0.1:8080/hello
    printf 'GET / HTTP/1.1\\r\\n\\r\\n' | nc 127.0.0.1 8080     # 400, no Host
"""

import argparse
import sys

from . import __version__
from .config import DEFAULT_MAX_LINE_LENGTH, ServerConfig
from .server import HeadServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httphead",
        description="Serve HTTP/1.1 request heads back as JSON",
    )

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout-ms", "-t",
        type=int,
        default=10_000,
        help="Milliseconds a client gets to send its whole head, 0 = no limit (default: 10000)"
    )

    parser.add_argument(
        "--max-line",
        type=int,
        default=DEFAULT_MAX_LINE_LENGTH,
        help=f"Longest request/header line in bytes (default: {DEFAULT_MAX_LINE_LENGTH})"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httphead {__version__}"
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        completion_timeout=args.timeout_ms or None,
        max_line_length=args.max_line,
        log_level=args.log_level,
    )

    try:
        server = HeadServer(config)
    except ValueError as e:
        print(f"httphead: {e}", file=sys.stderr)
        return 2

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
