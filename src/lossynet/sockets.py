"""
Deadline-aware connection primitives on top of socket.socket.

Python sockets only know per-socket timeouts. These wrappers add absolute
read and write deadlines, checked with select() before every call, and
the write/read/close surface the lossy adapters wrap.
"""

import logging
import select
import socket
import time
from typing import Any, Callable, Optional

from .exceptions import ConnectionClosedError, DeadlineExceededError

logger = logging.getLogger(__name__)

DEFAULT_READ_SIZE = 65535

# Not available on every platform; without it sends stay blocking.
_DONTWAIT = getattr(socket, "MSG_DONTWAIT", 0)


def _wait_until(sock: socket.socket, deadline: Optional[float], writing: bool, operation: str) -> None:
    """Block until sock is ready or raise once deadline has passed."""
    if deadline is None:
        return
    remaining = deadline - time.time()
    if remaining <= 0:
        raise DeadlineExceededError(operation)
    if writing:
        _, ready, _ = select.select([], [sock], [], remaining)
    else:
        ready, _, _ = select.select([sock], [], [], remaining)
    if not ready:
        raise DeadlineExceededError(operation)


class _DeadlineSocket:
    """Shared deadline and lifecycle handling for the socket wrappers."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._read_deadline: Optional[float] = None
        self._write_deadline: Optional[float] = None
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_addr(self) -> Any:
        return self.sock.getsockname()

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise ConnectionClosedError(operation)

    def close(self) -> None:
        """Close the socket. Closing twice raises ConnectionClosedError."""
        self._check_open("close")
        self._closed = True
        self.sock.close()

    def set_deadline(self, deadline: Optional[float]) -> None:
        """Set both read and write deadlines; None clears them."""
        self._check_open("set_deadline")
        self._read_deadline = deadline
        self._write_deadline = deadline

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        self._check_open("set_read_deadline")
        self._read_deadline = deadline

    def set_write_deadline(self, deadline: Optional[float]) -> None:
        self._check_open("set_write_deadline")
        self._write_deadline = deadline

    def _send_once(self, send: Callable[[int], int], operation: str) -> int:
        """
        Call send(flags) once it can make progress before the write deadline.

        With a deadline set, the remaining time is recomputed before every
        attempt and the send itself never blocks, so a peer that stops
        reading raises DeadlineExceededError instead of hanging the caller.
        """
        while True:
            if self._write_deadline is None:
                return send(0)
            _wait_until(self.sock, self._write_deadline, True, operation)
            try:
                return send(_DONTWAIT)
            except BlockingIOError:
                continue


class SocketConn(_DeadlineSocket):
    """Connected stream or datagram socket with deadlines."""

    @property
    def remote_addr(self) -> Any:
        return self.sock.getpeername()

    def read(self, size: int = DEFAULT_READ_SIZE) -> bytes:
        self._check_open("read")
        _wait_until(self.sock, self._read_deadline, False, "read")
        return self.sock.recv(size)

    def write(self, data: bytes) -> int:
        self._check_open("write")
        view = memoryview(data).cast("B")
        sent = self._send_once(lambda flags: self.sock.send(view, flags), "write")
        while sent < len(view):
            rest = view[sent:]
            sent += self._send_once(lambda flags: self.sock.send(rest, flags), "write")
        return sent


class SocketPacketConn(_DeadlineSocket):
    """Unconnected datagram socket with deadlines."""

    def read_from(self, size: int = DEFAULT_READ_SIZE) -> tuple[bytes, Any]:
        self._check_open("read_from")
        _wait_until(self.sock, self._read_deadline, False, "read_from")
        return self.sock.recvfrom(size)

    def write_to(self, data: bytes, addr: Any) -> int:
        self._check_open("write_to")
        return self._send_once(lambda flags: self.sock.sendto(data, flags, addr), "write_to")


def listen_udp(host: str = "127.0.0.1", port: int = 0) -> SocketPacketConn:
    """Bind a UDP socket and return it as a packet connection."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind((host, port))
    logger.debug(f"Listening on udp {sock.getsockname()}")
    return SocketPacketConn(sock)


def dial_udp(address: tuple[str, int], local_address: Optional[tuple[str, int]] = None) -> SocketConn:
    """Create a UDP socket connected to address."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    if local_address is not None:
        sock.bind(local_address)
    sock.connect(address)
    logger.debug(f"Dialed udp {address} from {sock.getsockname()}")
    return SocketConn(sock)


def stream_pair() -> tuple[SocketConn, SocketConn]:
    """Return two connected byte-stream connections."""
    left, right = socket.socketpair()
    return SocketConn(left), SocketConn(right)
