"""Numeric code tables used on the p0f query API.

Every code carries its explicit wire value; nothing relies on ordinal
position. Values outside a table are rendered as ``TypeName(value)``.
"""

from __future__ import annotations

from enum import IntEnum


class AddressFamily(IntEnum):
    """Address type tag sent in a query."""

    IPV4 = 4
    IPV6 = 6


class StatusCode(IntEnum):
    """Status word of a daemon response."""

    BAD_QUERY = 0x00
    OK = 0x10
    NO_MATCH = 0x20


class MatchQuality(IntEnum):
    """How confidently the OS signature matched."""

    NORMAL = 0
    FUZZY = 1
    GENERIC = 2
    BOTH = 3


class SoftwareMismatch(IntEnum):
    """Agreement between the declared User-Agent and the observed stack."""

    NONE = 0
    OS_MISMATCH = 1
    MISMATCH = 2


def lookup_code(enum_cls: type[IntEnum], value: int) -> IntEnum | None:
    """Return the member of ``enum_cls`` for ``value``, or None if unknown."""
    try:
        return enum_cls(value)
    except ValueError:
        return None


def render_code(enum_cls: type[IntEnum], value: int) -> str:
    """Render a code as its member name, falling back to ``Type(value)``."""
    member = lookup_code(enum_cls, value)
    if member is None:
        return f"{enum_cls.__name__}({int(value)})"
    return member.name


def code_table(enum_cls: type[IntEnum]) -> dict[str, int]:
    return {member.name: member.value for member in enum_cls}
