"""Response decoding for daemon replies."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import IntEnum

from ..errors import NoMatch, ProtocolError, QueryRejected
from ..models.response import Response
from .codes import MatchQuality, SoftwareMismatch, StatusCode, lookup_code
from .wire import RESPONSE_FIELDS, RESPONSE_MAGIC, RESPONSE_SIZE, RESPONSE_STRUCT, fixed_text

logger = logging.getLogger(__name__)

_FIELD_NAMES = tuple(f.name for f in RESPONSE_FIELDS)


def unpack_response(data: bytes) -> dict[str, int | bytes]:
    """Split a raw response record into its named wire fields.

    Raises:
        ProtocolError: If ``data`` is not exactly one response record.
    """
    if len(data) != RESPONSE_SIZE:
        raise ProtocolError(
            f"Response must be {RESPONSE_SIZE} bytes, got {len(data)}",
            value=len(data),
        )
    return dict(zip(_FIELD_NAMES, RESPONSE_STRUCT.unpack(data)))


def epoch_to_datetime(seconds: int) -> datetime:
    """Convert UNIX epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def decode_code(
    enum_cls: type[IntEnum], value: int, strict: bool = False
) -> IntEnum | int:
    """Map a raw code byte onto ``enum_cls``.

    Unknown values are returned as plain ints, or rejected with
    ProtocolError when ``strict`` is set.
    """
    member = lookup_code(enum_cls, value)
    if member is not None:
        return member
    if strict:
        raise ProtocolError(f"Unknown {enum_cls.__name__} value {value}", value=value)
    logger.warning("Unknown %s value %d", enum_cls.__name__, value)
    return value


def check_status(fields: dict[str, int | bytes], address: str | None = None) -> None:
    """Validate magic and status, raising for every non-OK outcome."""
    magic = fields["magic"]
    if magic != RESPONSE_MAGIC:
        raise ProtocolError(f"Bad response magic 0x{magic:08X}", value=magic)

    status = lookup_code(StatusCode, fields["status"])
    logger.debug("Response status: %s", status.name if status is not None else fields["status"])

    if status is StatusCode.OK:
        return
    if status is StatusCode.BAD_QUERY:
        raise QueryRejected("Bad query")
    if status is StatusCode.NO_MATCH:
        raise NoMatch(address)
    raise ProtocolError(
        f"Unrecognized response status 0x{fields['status']:X}",
        value=fields["status"],
    )


def decode_response(
    data: bytes, strict_codes: bool = False, address: str | None = None
) -> Response:
    """Decode a full response record into a Response.

    Args:
        data: Exactly ``RESPONSE_SIZE`` bytes read from the daemon.
        strict_codes: Reject unknown bad_sw / match-quality codes instead of
            passing them through as ints.
        address: The queried address, only used in the NoMatch message.

    Raises:
        ProtocolError: Wrong size, bad magic, unknown status, or (strict
            mode) an unknown code.
        QueryRejected: The daemon flagged the query as malformed.
        NoMatch: The daemon has nothing on this address.
    """
    fields = unpack_response(data)
    check_status(fields, address)

    return Response(
        first_seen=epoch_to_datetime(fields["first_seen"]),
        last_seen=epoch_to_datetime(fields["last_seen"]),
        total_conn=fields["total_conn"],
        uptime_min=fields["uptime_min"],
        up_mod_days=fields["up_mod_days"],
        last_nat=epoch_to_datetime(fields["last_nat"]),
        last_chg=epoch_to_datetime(fields["last_chg"]),
        distance=fields["distance"],
        bad_sw=decode_code(SoftwareMismatch, fields["bad_sw"], strict_codes),
        os_match_quality=decode_code(
            MatchQuality, fields["os_match_quality"], strict_codes
        ),
        os_name=fixed_text(fields["os_name"]),
        os_flavor=fixed_text(fields["os_flavor"]),
        http_name=fixed_text(fields["http_name"]),
        http_flavor=fixed_text(fields["http_flavor"]),
        link_type=fixed_text(fields["link_type"]),
        language=fixed_text(fields["language"]),
    )
