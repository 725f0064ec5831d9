"""Client for the p0f v3 passive fingerprinting daemon's query socket."""

from .client import P0fClient, parse_address, query, query_text
from .errors import (
    P0fError,
    TransportError,
    ConnectionClosed,
    ProtocolError,
    QueryRejected,
    NoMatch,
)
from .models.response import Response
from .protocol.codes import AddressFamily, MatchQuality, SoftwareMismatch, StatusCode
from .transport.unix_connection import UnixConnection

__version__ = "0.1.0"
