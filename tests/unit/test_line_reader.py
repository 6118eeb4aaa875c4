"""
Unit tests for CRLF line assembly.
"""

import errno
import socket

import pytest

from httphead.core.deadline import Deadline
from httphead.core.line_reader import LineReader
from httphead.http.errors import ConnectionClosed, DeadlineExceeded, TransportLimitExceeded


class TestLineReader:
    """Tests for LineReader.read_line()."""

    def test_single_chunk(self, scripted_socket):
        """Test that lines keep their CRLF terminator."""
        reader = LineReader(scripted_socket([b"GET / HTTP/1.1\r\nhost: a\r\n\r\n"]))

        assert reader.read_line() == b"GET / HTTP/1.1\r\n"
        assert reader.read_line() == b"host: a\r\n"
        assert reader.read_line() == b"\r\n"

    def test_line_split_across_chunks(self, scripted_socket):
        """Test reassembly of a line delivered in pieces."""
        reader = LineReader(scripted_socket([b"GE", b"T / HT", b"TP/1.1\r\n"]))

        assert reader.read_line() == b"GET / HTTP/1.1\r\n"

    def test_crlf_split_across_chunks(self, scripted_socket):
        """Test a terminator whose CR and LF arrive separately."""
        reader = LineReader(scripted_socket([b"host: a\r", b"\nx: y\r", b"\n"]))

        assert reader.read_line() == b"host: a\r\n"
        assert reader.read_line() == b"x: y\r\n"

    def test_one_byte_at_a_time(self, scripted_socket):
        """Test the worst possible fragmentation."""
        data = b"GET / HTTP/1.1\r\nhost: a\r\n\r\n"
        reader = LineReader(scripted_socket([bytes([b]) for b in data]))

        assert [reader.read_line() for _ in range(3)] == [
            b"GET / HTTP/1.1\r\n",
            b"host: a\r\n",
            b"\r\n",
        ]

    def test_lone_lf_is_not_a_terminator(self, scripted_socket):
        """Test that LF-only endings never produce a line."""
        reader = LineReader(scripted_socket([b"GET / HTTP/1.1\nhost: a\n\n"]))

        with pytest.raises(ConnectionClosed):
            reader.read_line()

    def test_buffered_lines_do_not_recv(self, scripted_socket):
        """Test that buffered lines are served before touching the socket."""
        sock = scripted_socket([b"a\r\nb\r\n"])
        reader = LineReader(sock)

        reader.read_line()
        reader.read_line()

        assert sock.recv_calls == 1

    def test_leftover(self, scripted_socket):
        """Test that bytes after the last line read stay available."""
        reader = LineReader(scripted_socket([b"\r\nbody bytes"]))

        assert reader.read_line() == b"\r\n"
        assert reader.leftover == b"body bytes"

    def test_iteration(self, scripted_socket):
        """Test that the reader is a lazy iterator of lines."""
        reader = LineReader(scripted_socket([b"a\r\nb\r\n"]))
        lines = iter(reader)

        assert next(lines) == b"a\r\n"
        assert next(lines) == b"b\r\n"
        with pytest.raises(ConnectionClosed):
            next(lines)

    def test_recv_size_is_respected(self, scripted_socket):
        """Test that recv() is asked for recv_size bytes at a time."""
        sock = scripted_socket([b"abcdefgh\r\n"])
        reader = LineReader(sock, recv_size=3)

        assert reader.read_line() == b"abcdefgh\r\n"
        assert sock.recv_calls == 4


class TestLineReaderClose:
    """Tests for end-of-stream handling."""

    def test_closed_before_any_byte(self, scripted_socket):
        """Test a peer that closes without sending anything."""
        reader = LineReader(scripted_socket([]))

        with pytest.raises(ConnectionClosed):
            reader.read_line()

    def test_partial_line_is_discarded(self, scripted_socket):
        """Test that an unterminated line is never returned."""
        reader = LineReader(scripted_socket([b"GET / HTTP/1.1\r\nhost: exam"]))

        assert reader.read_line() == b"GET / HTTP/1.1\r\n"
        with pytest.raises(ConnectionClosed):
            reader.read_line()
        assert reader.leftover == b""

    @pytest.mark.parametrize("error", [
        ConnectionResetError(errno.ECONNRESET, "reset"),
        BrokenPipeError(errno.EPIPE, "broken pipe"),
        ConnectionAbortedError(errno.ECONNABORTED, "aborted"),
    ])
    def test_reset_counts_as_closed(self, scripted_socket, error):
        """Test that an abrupt disconnect is reported as ConnectionClosed."""
        reader = LineReader(scripted_socket([b"GET", error]))

        with pytest.raises(ConnectionClosed):
            reader.read_line()

    def test_other_socket_errors_count_as_closed(self, scripted_socket):
        """Test that an unusable socket is reported as ConnectionClosed."""
        reader = LineReader(scripted_socket([OSError(errno.EBADF, "bad fd")]))

        with pytest.raises(ConnectionClosed):
            reader.read_line()


class TestLineReaderLimit:
    """Tests for the per-line size cap."""

    def test_line_at_limit_is_accepted(self, scripted_socket):
        """Test a line of exactly max_line_length bytes, CRLF included."""
        line = b"a" * 8 + b"\r\n"
        reader = LineReader(scripted_socket([line]), max_line_length=10)

        assert reader.read_line() == line

    def test_line_over_limit_in_one_chunk(self, scripted_socket):
        """Test a complete line one byte too long."""
        reader = LineReader(scripted_socket([b"a" * 9 + b"\r\n"]), max_line_length=10)

        with pytest.raises(TransportLimitExceeded) as exc_info:
            reader.read_line()

        assert exc_info.value.code == errno.EMSGSIZE

    def test_line_over_limit_byte_by_byte(self, scripted_socket):
        """Test that the same line is rejected however it is chunked."""
        data = b"a" * 9 + b"\r\n"
        reader = LineReader(scripted_socket([bytes([b]) for b in data]), max_line_length=10)

        with pytest.raises(TransportLimitExceeded):
            reader.read_line()

    def test_unterminated_line_over_limit(self, scripted_socket):
        """Test that a never-ending line fails without waiting for more."""
        sock = scripted_socket([b"GET /" + b"a" * 3000])
        reader = LineReader(sock, max_line_length=2048, recv_size=8192)

        with pytest.raises(TransportLimitExceeded):
            reader.read_line()

        assert sock.recv_calls == 1

    def test_limit_applies_per_line(self, scripted_socket):
        """Test that short lines before a long one do not count against it."""
        reader = LineReader(
            scripted_socket([b"abc\r\ndef\r\n" + b"x" * 20 + b"\r\n"]),
            max_line_length=10,
        )

        assert reader.read_line() == b"abc\r\n"
        assert reader.read_line() == b"def\r\n"
        with pytest.raises(TransportLimitExceeded):
            reader.read_line()

    def test_transport_size_error(self, scripted_socket):
        """Test that EMSGSIZE from the transport becomes TransportLimitExceeded."""
        reader = LineReader(scripted_socket([OSError(errno.EMSGSIZE, "Message too long")]))

        with pytest.raises(TransportLimitExceeded) as exc_info:
            reader.read_line()

        assert exc_info.value.code == errno.EMSGSIZE


class TestLineReaderDeadline:
    """Tests for deadline handling inside LineReader."""

    def test_socket_timeout_is_set_from_deadline(self, scripted_socket):
        """Test that each recv() gets at most the remaining budget."""
        sock = scripted_socket([b"a\r\n"])
        reader = LineReader(sock, deadline=Deadline.from_millis(5000))

        reader.read_line()

        assert len(sock.timeouts) == 1
        assert 0 < sock.timeouts[0] <= 5.0

    def test_unbounded_deadline_leaves_timeout_alone(self, scripted_socket):
        """Test that no deadline means no settimeout() calls."""
        sock = scripted_socket([b"a\r\n"])
        LineReader(sock).read_line()

        assert sock.timeouts == []

    def test_expired_deadline_does_not_recv(self, scripted_socket):
        """Test that an exhausted budget fails before blocking again."""
        sock = scripted_socket([b"a\r\n"])
        reader = LineReader(sock, deadline=Deadline(timeout=0.0))

        with pytest.raises(DeadlineExceeded):
            reader.read_line()

        assert sock.recv_calls == 0

    def test_socket_timeout_becomes_deadline_exceeded(self, scripted_socket):
        """Test that a recv() timeout is reported as DeadlineExceeded."""
        reader = LineReader(
            scripted_socket([b"GET", socket.timeout("timed out")]),
            deadline=Deadline.from_millis(1000),
        )

        with pytest.raises(DeadlineExceeded):
            reader.read_line()

        assert reader.leftover == b""
