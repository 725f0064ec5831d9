"""Query driver: one encoded request out, one decoded response back."""

from __future__ import annotations

import ipaddress
import logging
import socket

from .models.response import Response
from .protocol.parser import decode_response
from .protocol.request import IPAddress, build_request, encode_request
from .protocol.wire import RESPONSE_SIZE
from .transport.unix_connection import DEFAULT_SOCKET_PATH, UnixConnection

logger = logging.getLogger(__name__)


def parse_address(text: str) -> IPAddress:
    """Parse an IPv4 or IPv6 address string.

    Raises:
        ValueError: If ``text`` is not an IP address.
    """
    try:
        return ipaddress.ip_address(text.strip())
    except ValueError:
        raise ValueError(f"Couldn't parse {text!r} as an IP address") from None


def _as_connection(connection: UnixConnection | socket.socket) -> UnixConnection:
    if isinstance(connection, UnixConnection):
        return connection
    return UnixConnection.from_socket(connection)


def query(
    connection: UnixConnection | socket.socket,
    address: IPAddress,
    strict_codes: bool = False,
) -> Response:
    """Ask the daemon about ``address`` over an open connection.

    The connection may be reused for further queries once this returns.

    Raises:
        TransportError: The socket failed or closed mid-record
            (``ConnectionClosed``).
        ProtocolError: The reply was not a valid p0f response.
        QueryRejected: The daemon rejected the query.
        NoMatch: The daemon has no data for ``address``.
    """
    conn = _as_connection(connection)
    request = build_request(address)
    logger.debug("Querying %s as %s", address, request.family.name)
    data = conn.send_and_receive(encode_request(request), RESPONSE_SIZE)
    return decode_response(data, strict_codes=strict_codes, address=str(address))


def query_text(
    connection: UnixConnection | socket.socket,
    text: str,
    strict_codes: bool = False,
) -> Response:
    """Like :func:`query`, taking the address as a string."""
    return query(connection, parse_address(text), strict_codes=strict_codes)


class P0fClient:
    """Owns a connection to one p0f daemon and answers lookups on it.

    Usage::

        with P0fClient("/var/run/p0f.sock") as client:
            print(client.get_addr_info("192.168.1.1"))
    """

    def __init__(
        self,
        socket_path: str = DEFAULT_SOCKET_PATH,
        timeout: float | None = None,
        strict_codes: bool = False,
    ) -> None:
        self.strict_codes = strict_codes
        self._connection = UnixConnection(socket_path, timeout=timeout)

    @property
    def connection(self) -> UnixConnection:
        return self._connection

    @property
    def connected(self) -> bool:
        return self._connection.connected

    def connect(self) -> None:
        self._connection.open()

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> P0fClient:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_ip_info(self, ip: IPAddress) -> Response:
        """Look up a parsed address."""
        return query(self._connection, ip, strict_codes=self.strict_codes)

    def get_addr_info(self, text: str) -> Response:
        """Look up an address given as text (IPv4 or IPv6)."""
        return self.get_ip_info(parse_address(text))
