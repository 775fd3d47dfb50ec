from __future__ import annotations

import logging
import socket
import threading
from typing import Optional

from netreversi.errors import TransportError

logger = logging.getLogger(__name__)


class SocketTransport:
    """Line-oriented duplex stream over a connected socket.

    Reads happen on one thread; writes are serialized by a lock so commands
    from the shell can interleave with heartbeat replies from the receive loop.
    """

    ENCODING = "ascii"

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._reader = sock.makefile("r", encoding=self.ENCODING, newline="\n")
        self._write_lock = threading.Lock()
        self._closed = False

    @classmethod
    def connect(cls, host: str, port: int, timeout: Optional[float] = 10.0) -> "SocketTransport":
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise TransportError(f"Cannot connect to {host}:{port}: {exc}") from exc
        # The timeout only bounds the connect; reads block until a line or EOF.
        sock.settimeout(None)
        logger.info("Connected to %s:%s", host, port)
        return cls(sock)

    @property
    def closed(self) -> bool:
        return self._closed

    def readline(self) -> str:
        """Return the next line including its terminator, or "" at end of stream."""
        try:
            line = self._reader.readline()
        except UnicodeDecodeError as exc:
            self._reader.close()
            raise TransportError(f"Non-ASCII data from server: {exc}") from exc
        except (OSError, ValueError) as exc:
            # ValueError: the reader was already closed after end of stream.
            raise TransportError(f"Read failed: {exc}") from exc
        if not line:
            self._reader.close()
        return line

    def write(self, line: str):
        data = line.encode(self.ENCODING)
        with self._write_lock:
            if self._closed:
                raise TransportError("Transport is closed")
            try:
                self._sock.sendall(data)
            except OSError as exc:
                raise TransportError(f"Write failed: {exc}") from exc

    def close(self):
        with self._write_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already disconnected by the peer.
            pass
        # The reader is released by the receive thread once it sees end of stream.
        self._sock.close()
