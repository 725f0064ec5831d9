"""Transport layer: the daemon's UNIX stream socket."""

from .unix_connection import UnixConnection, DEFAULT_SOCKET_PATH
