"""Shared test fixtures: response records and an in-process fake daemon."""

from __future__ import annotations

import socket
import threading
import time

import pytest

from p0f_mcp.protocol.request import decode_request
from p0f_mcp.protocol.wire import (
    QUERY_SIZE,
    RESPONSE_MAGIC,
    RESPONSE_STRUCT,
    TEXT_FIELD_SIZE,
)


def build_response_bytes(**overrides) -> bytes:
    """Pack a response record, OK status and plausible values by default."""
    values = {
        "magic": RESPONSE_MAGIC,
        "status": 0x10,
        "first_seen": 1_600_000_000,
        "last_seen": 1_600_000_600,
        "total_conn": 12,
        "uptime_min": 4321,
        "up_mod_days": 49,
        "last_nat": 0,
        "last_chg": 1_600_000_300,
        "distance": 3,
        "bad_sw": 0,
        "os_match_quality": 0,
        "os_name": b"Linux",
        "os_flavor": b"3.11 and newer",
        "http_name": b"Firefox",
        "http_flavor": b"10.x or newer",
        "link_type": b"Ethernet or modem",
        "language": b"English",
    }
    values.update(overrides)
    for name in ("os_name", "os_flavor", "http_name", "http_flavor", "link_type", "language"):
        if isinstance(values[name], str):
            values[name] = pack_text(values[name])
    return RESPONSE_STRUCT.pack(
        values["magic"],
        values["status"],
        values["first_seen"],
        values["last_seen"],
        values["total_conn"],
        values["uptime_min"],
        values["up_mod_days"],
        values["last_nat"],
        values["last_chg"],
        values["distance"],
        values["bad_sw"],
        values["os_match_quality"],
        values["os_name"],
        values["os_flavor"],
        values["http_name"],
        values["http_flavor"],
        values["link_type"],
        values["language"],
    )


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    buf = b""
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            break
        buf += chunk
    return buf


def pack_text(text: str, capacity: int = TEXT_FIELD_SIZE) -> bytes:
    """Encode ``text`` into a NUL-padded fixed-size text field."""
    raw = text.encode("utf-8")[:capacity]
    return raw + b"\x00" * (capacity - len(raw))


class FakeDaemon:
    """Serves canned replies on one end of a socket pair.

    Each entry in ``replies`` answers one query, in order, after ``delay``
    seconds. After the last reply the daemon closes its end.
    """

    def __init__(
        self, sock: socket.socket, replies: list[bytes], delay: float = 0.0
    ) -> None:
        self.sock = sock
        self.replies = list(replies)
        self.delay = delay
        self.requests = []
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self) -> None:
        try:
            for reply in self.replies:
                data = _recv_exact(self.sock, QUERY_SIZE)
                if len(data) < QUERY_SIZE:
                    return
                self.requests.append(decode_request(data))
                if self.delay:
                    time.sleep(self.delay)
                try:
                    self.sock.sendall(reply)
                except OSError:
                    # client gave up and hung up
                    return
        finally:
            self.sock.close()

    def start(self) -> FakeDaemon:
        self.thread.start()
        return self

    def join(self) -> None:
        self.thread.join(timeout=5)


@pytest.fixture
def response_bytes():
    return build_response_bytes


@pytest.fixture
def fake_daemon():
    """Factory: ``fake_daemon(replies)`` -> (client_socket, FakeDaemon)."""
    opened: list[socket.socket] = []
    daemons: list[FakeDaemon] = []

    def factory(replies: list[bytes], delay: float = 0.0, timeout: float = 5):
        client_sock, server_sock = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
        client_sock.settimeout(timeout)
        opened.append(client_sock)
        daemon = FakeDaemon(server_sock, replies, delay).start()
        daemons.append(daemon)
        return client_sock, daemon

    yield factory

    for sock in opened:
        sock.close()
    for daemon in daemons:
        daemon.join()
