"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server ever answers with. A head reader only has a
handful of things to say:

    ┌────────┬──────────────────────────────────────────────────────────┐
    │  200   │ Head read and validated                                  │
    │  400   │ Bad request line, bad header line, missing/invalid Host │
    │  408   │ Client did not finish the head within the time budget   │
    │  431   │ A request line or header line was too long              │
    │  500   │ Something broke on our side                             │
    └────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

        >>> HTTPStatus.REQUEST_TIMEOUT == 408
        True
        >>> HTTPStatus.REQUEST_TIMEOUT.phrase
        'Request Timeout'
    """

    OK = 200                                # Head accepted
    BAD_REQUEST = 400                       # Malformed request syntax
    REQUEST_TIMEOUT = 408                   # Client took too long to send request
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431   # Line over the size cap
    INTERNAL_SERVER_ERROR = 500             # Unexpected server error (catch-all)

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line:

            HTTP/1.1 408 Request Timeout
                     ─── ───────────────
                      │         └── phrase
                      └──────────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
