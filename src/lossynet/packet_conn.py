"""
Lossy packet connection.

Wraps a connectionless datagram endpoint so that its sends behave like an
unreliable link while reads pass straight through.
"""

from typing import Any, Optional

from .conn import _LossyBase
from .profile import ImpairmentProfile


class LossyPacketConn(_LossyBase):
    """
    Datagram endpoint with impaired sends.

    Each write carries its destination, which is kept with the payload
    until the delayed delivery happens.

    Example:
        >>> pc = LossyPacketConn(listen_udp(), ImpairmentProfile.simple(0.0, 0.05, 0.1))
        >>> pc.write_to(b"ping", ("127.0.0.1", 9999))
        4
    """

    def _send(self, payload: bytes, destination: Any) -> int:
        return self._conn.write_to(payload, destination)

    def write_to(self, data: bytes, addr: Any) -> int:
        """
        Send data to addr through the simulated link.

        Returns len(data) as soon as the payload is accepted. Raises
        whatever the wrapped endpoint raises when it is closed or the
        write deadline has passed.
        """
        return self._engine.schedule(data, addr)

    def read_from(self, *args: Any, **kwargs: Any) -> tuple[bytes, Any]:
        return self._conn.read_from(*args, **kwargs)


def wrap_packet_conn(
    conn: Any,
    min_latency: float,
    max_latency: float,
    loss_rate: float,
    bandwidth: int = 0,
    header_overhead: int = 0,
    seed: Optional[int] = None,
) -> LossyPacketConn:
    """
    Wrap a datagram endpoint with a lossy packet connection.

    Takes the same parameters as wrap_conn.
    """
    profile = ImpairmentProfile(
        bandwidth=bandwidth,
        min_latency=min_latency,
        max_latency=max_latency,
        loss_rate=loss_rate,
        header_overhead=header_overhead,
    )
    return LossyPacketConn(conn, profile, seed=seed)
