"""MCP server entry point for p0f lookups.

Exposes the daemon's passive fingerprint data via the Model Context
Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import P0fClient, parse_address, query
from .config import AppConfig, load_config
from .errors import NoMatch, P0fError, ProtocolError, QueryRejected
from .protocol.codes import (
    AddressFamily,
    MatchQuality,
    SoftwareMismatch,
    StatusCode,
    code_table,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "p0f",
    instructions="Passive OS fingerprint lookups against a local p0f daemon",
)

# Global connection state
_config: AppConfig = AppConfig()
_client: P0fClient | None = None


def _get_client() -> P0fClient:
    """Get the active client, raising if not connected."""
    if _client is None or not _client.connected:
        raise RuntimeError(
            "Not connected to p0f. Use the 'connect' tool first."
        )
    return _client


def _lookup_one(client: P0fClient, address: str) -> dict[str, Any]:
    """Query one address and shape the outcome for a tool result."""
    try:
        ip = parse_address(address)
    except ValueError as e:
        return {"address": address, "error": str(e)}

    try:
        response = query(client.connection, ip, strict_codes=client.strict_codes)
    except NoMatch:
        return {"address": str(ip), "match": False}
    except (QueryRejected, ProtocolError) as e:
        return {"address": str(ip), "error": str(e)}

    result: dict[str, Any] = {"address": str(ip), "match": True}
    result.update(response.to_dict())
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(socket_path: str | None = None) -> dict[str, Any]:
    """Open a connection to the p0f daemon's query socket.

    Args:
        socket_path: Path given to p0f's -s option. Defaults to the
            configured socket.
    """
    global _client
    if _client is not None and _client.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "socket_path": _client.connection.info.socket_path,
        }

    path = socket_path or _config.daemon.socket_path
    client = P0fClient(
        path,
        timeout=_config.daemon.timeout,
        strict_codes=_config.daemon.strict_codes,
    )
    try:
        client.connect()
    except P0fError as e:
        return {"connected": False, "error": str(e)}

    _client = client
    return {"connected": True, "socket_path": path}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the daemon."""
    global _client
    if _client is None:
        return {"disconnected": True}
    _client.close()
    _client = None
    return {"disconnected": True}


# ─── LOOKUP TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def lookup(address: str) -> dict[str, Any]:
    """Retrieve everything p0f has observed about one host.

    Returns the OS guess, match quality, uptime, network distance, HTTP
    fingerprint, link type and language. ``match`` is False when the
    daemon has never seen the address.

    Args:
        address: IPv4 or IPv6 address.
    """
    return _lookup_one(_get_client(), address)


@mcp.tool()
def lookup_many(addresses: list[str]) -> dict[str, Any]:
    """Look up several hosts, one after another on the same connection.

    Args:
        addresses: IPv4 or IPv6 addresses.
    """
    client = _get_client()
    results = [_lookup_one(client, address) for address in addresses]
    return {
        "count": len(results),
        "matched": sum(1 for r in results if r.get("match")),
        "results": results,
    }


# ─── RESOURCES ────────────────────────────────────────────────────────

@mcp.resource("p0f://daemon/status")
def resource_daemon_status() -> str:
    """Connection state and socket path."""
    if _client is None:
        return json.dumps({
            "connected": False,
            "socket_path": _config.daemon.socket_path,
        })
    info = _client.connection.info
    return json.dumps({
        "connected": _client.connected,
        "socket_path": info.socket_path,
        "timeout": info.timeout,
        "exchanges": info.exchanges,
    })


@mcp.resource("p0f://codes")
def resource_codes() -> str:
    """Numeric code tables used in p0f responses."""
    return json.dumps({
        "address_family": code_table(AddressFamily),
        "status": code_table(StatusCode),
        "os_match_quality": code_table(MatchQuality),
        "bad_sw": code_table(SoftwareMismatch),
    }, indent=2)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    global _config
    _config = load_config()
    logging.basicConfig(level=_config.logging.level.upper())
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
