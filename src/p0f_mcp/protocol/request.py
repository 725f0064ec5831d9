"""Query construction: address classification and request encoding."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

from .codes import AddressFamily
from .wire import ADDRESS_SIZE, QUERY_MAGIC, QUERY_SIZE, QUERY_STRUCT

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class Request:
    """A single query for one address."""

    family: AddressFamily
    address: bytes

    def __post_init__(self) -> None:
        if len(self.address) != ADDRESS_SIZE:
            raise ValueError(
                f"Address field must be {ADDRESS_SIZE} bytes, got {len(self.address)}"
            )

    def to_bytes(self) -> bytes:
        return encode_request(self)

    def to_ip(self) -> IPAddress:
        """Recover the queried address from the 16-byte field."""
        if self.family == AddressFamily.IPV4:
            return ipaddress.IPv4Address(self.address[:4])
        return ipaddress.IPv6Address(self.address)

    def __repr__(self) -> str:
        return f"Request(family={self.family.name}, address={self.to_ip()})"


def classify_address(ip: IPAddress) -> tuple[AddressFamily, bytes]:
    """Pick the address family tag and the 16-byte address field for ``ip``.

    IPv4 addresses, and IPv6 addresses that are IPv4-mapped
    (``::ffff:a.b.c.d``), are sent as IPv4: four address bytes followed by
    twelve zero bytes. Anything else is sent as the full 16 IPv6 bytes.
    """
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    packed = ip.packed
    if len(packed) == 4:
        return AddressFamily.IPV4, packed + b"\x00" * (ADDRESS_SIZE - 4)
    return AddressFamily.IPV6, packed


def build_request(ip: IPAddress) -> Request:
    """Build the query for ``ip``."""
    family, address = classify_address(ip)
    return Request(family=family, address=address)


def encode_request(request: Request) -> bytes:
    """Serialize a request to its 21-byte wire form."""
    return QUERY_STRUCT.pack(QUERY_MAGIC, int(request.family), request.address)


def decode_request(data: bytes) -> Request:
    """Parse a wire-form query back into a Request.

    The client never receives queries; this is what a daemon (or a test
    double of one) does with the bytes it reads.

    Raises:
        ValueError: On a wrong length, magic, or family tag.
    """
    if len(data) != QUERY_SIZE:
        raise ValueError(f"Query must be {QUERY_SIZE} bytes, got {len(data)}")

    magic, family, address = QUERY_STRUCT.unpack(data)
    if magic != QUERY_MAGIC:
        raise ValueError(f"Bad query magic 0x{magic:08X}")
    try:
        family = AddressFamily(family)
    except ValueError:
        raise ValueError(f"Unknown address family {family}") from None
    return Request(family=family, address=address)
