"""Protocol layer: code tables, byte layouts, query encoding, response decoding."""

from .codes import AddressFamily, StatusCode, MatchQuality, SoftwareMismatch
from .request import Request, build_request, classify_address, encode_request
from .wire import QUERY_SIZE, RESPONSE_SIZE, fixed_text
