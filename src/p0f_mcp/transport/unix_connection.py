"""UNIX domain socket connection to a running p0f daemon.

p0f listens on the path given to its ``-s`` option. Each query is one
fixed-size write answered by one fixed-size read; there are no request IDs,
so a connection carries at most one outstanding query at a time.
"""

from __future__ import annotations

import logging
import socket
import threading
import weakref
from dataclasses import dataclass

from ..errors import ConnectionClosed, TransportError

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_PATH = "/var/run/p0f.sock"

# One exchange lock per adopted socket, shared by every wrapper of it
_socket_locks: weakref.WeakKeyDictionary[socket.socket, threading.Lock] = (
    weakref.WeakKeyDictionary()
)
_socket_locks_guard = threading.Lock()


def _lock_for(sock: socket.socket) -> threading.Lock:
    with _socket_locks_guard:
        lock = _socket_locks.get(sock)
        if lock is None:
            lock = threading.Lock()
            _socket_locks[sock] = lock
        return lock


@dataclass
class ConnectionInfo:
    """Where the connection points and how many exchanges it has served."""

    socket_path: str = ""
    timeout: float | None = None
    exchanges: int = 0


class UnixConnection:
    """Manages the stream socket to the p0f daemon.

    Usage::

        conn = UnixConnection("/var/run/p0f.sock")
        conn.open()
        reply = conn.send_and_receive(query_bytes, RESPONSE_SIZE)
        conn.close()
    """

    def __init__(
        self,
        socket_path: str = DEFAULT_SOCKET_PATH,
        timeout: float | None = None,
    ) -> None:
        self._socket_path = socket_path
        self._timeout = timeout
        self._sock: socket.socket | None = None
        self._connected = False
        self._lock = threading.Lock()
        self._info = ConnectionInfo(socket_path=socket_path, timeout=timeout)

    @classmethod
    def from_socket(cls, sock: socket.socket) -> UnixConnection:
        """Adopt an already-connected stream socket.

        Ownership passes to the returned connection: closing it, or a failed
        exchange on it, closes the socket. Every connection adopting the same
        socket shares one exchange lock.
        """
        try:
            peer = sock.getpeername()
        except OSError:
            peer = ""
        conn = cls(socket_path=peer if isinstance(peer, str) else str(peer))
        conn._sock = sock
        conn._timeout = sock.gettimeout()
        conn._info.timeout = conn._timeout
        conn._lock = _lock_for(sock)
        conn._connected = sock.fileno() != -1
        return conn

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def info(self) -> ConnectionInfo:
        return self._info

    def open(self) -> ConnectionInfo:
        """Connect to the daemon socket.

        Raises:
            TransportError: If the socket cannot be reached.
        """
        if self._connected:
            return self._info

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self._timeout)
        try:
            sock.connect(self._socket_path)
        except OSError as e:
            sock.close()
            raise TransportError(
                f"Could not connect to p0f socket {self._socket_path!r}. "
                f"Ensure p0f is running with -s pointing at this path. "
                f"Last error: {e}"
            ) from e

        self._sock = sock
        self._connected = True
        logger.info("Connected to p0f at %s", self._socket_path)
        return self._info

    def close(self) -> None:
        """Close the socket."""
        if not self._connected:
            return

        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
        finally:
            self._sock = None
            self._connected = False
            logger.info("Disconnected from %s", self._socket_path)

    def __enter__(self) -> UnixConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def write(self, data: bytes) -> int:
        """Write all of ``data`` to the daemon.

        Returns:
            Number of bytes written.

        Raises:
            ConnectionError: If not connected.
            TransportError: If the write fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to p0f")

        try:
            self._sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Write to p0f failed: {e}") from e
        return len(data)

    def read(self, size: int) -> bytes:
        """Read exactly ``size`` bytes from the daemon.

        Raises:
            ConnectionError: If not connected.
            ConnectionClosed: If the peer hangs up before ``size`` bytes.
            TransportError: If the read fails.
        """
        if not self._connected:
            raise ConnectionError("Not connected to p0f")

        buf = bytearray()
        while len(buf) < size:
            try:
                chunk = self._sock.recv(size - len(buf))
            except OSError as e:
                raise TransportError(f"Read from p0f failed: {e}") from e
            if not chunk:
                raise ConnectionClosed(expected=size, received=len(buf))
            buf += chunk
        return bytes(buf)

    def send_and_receive(self, data: bytes, response_size: int) -> bytes:
        """Send one query and read its fixed-size reply.

        The write completes before any reading starts, and the whole turn
        holds the connection lock so concurrent callers are serialized.
        A failed turn leaves an unknown number of reply bytes in flight, so
        the connection is closed before the error propagates.

        Args:
            data: Encoded query.
            response_size: Exact size of the reply record.

        Returns:
            The raw reply bytes.
        """
        with self._lock:
            try:
                self.write(data)
                response = self.read(response_size)
            except TransportError:
                logger.warning("Exchange failed, closing %s", self._socket_path)
                self.close()
                raise
            self._info.exchanges += 1
        logger.debug(
            "Exchange %d: sent %d bytes, received %d bytes",
            self._info.exchanges,
            len(data),
            len(response),
        )
        return response
