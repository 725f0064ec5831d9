"""Byte layouts of the p0f v3 query API.

All multi-byte integers are little-endian and both records are packed.

Query (21 bytes)::

    +----------+--------+------------------+
    | Magic    | Family | Address          |
    | u32      | u8     | 16 bytes         |
    +----------+--------+------------------+

Response (232 bytes)::

    +-------+--------+-----------------------------+----------+--------+--------+-----------------+
    | Magic | Status | 7 x u32 counters/timestamps | Distance | Bad SW | Match Q| 6 x 32-byte text|
    | u32   | u32    | 28 bytes                    | i16      | u8     | u8     | 192 bytes       |
    +-------+--------+-----------------------------+----------+--------+--------+-----------------+

- Timestamps are seconds since the UNIX epoch.
- Text fields are NUL-padded; bytes after the first NUL are padding.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

QUERY_MAGIC = 0x50304601
RESPONSE_MAGIC = 0x50304602

ADDRESS_SIZE = 16
TEXT_FIELD_SIZE = 32
DISTANCE_UNKNOWN = -1

BYTE_ORDER = "<"


@dataclass(frozen=True)
class WireField:
    """One field of a fixed layout: its name and ``struct`` code."""

    name: str
    code: str

    @property
    def size(self) -> int:
        return struct.calcsize(BYTE_ORDER + self.code)


QUERY_FIELDS: tuple[WireField, ...] = (
    WireField("magic", "I"),
    WireField("family", "B"),
    WireField("address", f"{ADDRESS_SIZE}s"),
)

TEXT_FIELDS = (
    "os_name",
    "os_flavor",
    "http_name",
    "http_flavor",
    "link_type",
    "language",
)

RESPONSE_FIELDS: tuple[WireField, ...] = (
    WireField("magic", "I"),
    WireField("status", "I"),
    WireField("first_seen", "I"),
    WireField("last_seen", "I"),
    WireField("total_conn", "I"),
    WireField("uptime_min", "I"),
    WireField("up_mod_days", "I"),
    WireField("last_nat", "I"),
    WireField("last_chg", "I"),
    WireField("distance", "h"),
    WireField("bad_sw", "B"),
    WireField("os_match_quality", "B"),
) + tuple(WireField(name, f"{TEXT_FIELD_SIZE}s") for name in TEXT_FIELDS)


def layout_struct(fields: tuple[WireField, ...]) -> struct.Struct:
    """Compile a field table into a packed little-endian ``struct.Struct``."""
    return struct.Struct(BYTE_ORDER + "".join(f.code for f in fields))


def field_offsets(fields: tuple[WireField, ...]) -> dict[str, int]:
    """Map each field name to its byte offset within the record."""
    offsets: dict[str, int] = {}
    offset = 0
    for f in fields:
        offsets[f.name] = offset
        offset += f.size
    return offsets


QUERY_STRUCT = layout_struct(QUERY_FIELDS)
RESPONSE_STRUCT = layout_struct(RESPONSE_FIELDS)

QUERY_SIZE = QUERY_STRUCT.size  # 21
RESPONSE_SIZE = RESPONSE_STRUCT.size  # 232


def fixed_text(buf: bytes, capacity: int = TEXT_FIELD_SIZE) -> str:
    """Decode a NUL-padded fixed-size text buffer.

    Stops at the first zero byte, or at ``capacity`` bytes when there is
    none. Anything after the logical string is padding and is dropped.
    """
    buf = buf[:capacity]
    end = buf.find(b"\x00")
    if end != -1:
        buf = buf[:end]
    return buf.decode("utf-8", errors="replace")
