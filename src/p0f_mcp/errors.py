"""Exceptions raised by the p0f client."""

from __future__ import annotations


class P0fError(Exception):
    """Base class for everything the client raises about a lookup."""


class TransportError(P0fError, ConnectionError):
    """The daemon socket could not be opened, written, or read."""


class ConnectionClosed(TransportError):
    """The daemon closed the connection before a full record arrived."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Connection closed after {received} of {expected} bytes"
        )
        self.expected = expected
        self.received = received


class ProtocolError(P0fError):
    """The peer sent something that is not a valid p0f response."""

    def __init__(self, message: str, value: int | None = None) -> None:
        super().__init__(message)
        self.value = value


class QueryRejected(P0fError):
    """The daemon answered the query with a bad-query status."""


class NoMatch(P0fError):
    """The daemon has no record of the queried address."""

    def __init__(self, address: str | None = None) -> None:
        if address is None:
            message = "No match"
        else:
            message = f"No match for {address}"
        super().__init__(message)
        self.address = address
