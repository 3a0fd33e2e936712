"""
Lossy stream connection.

Wraps a byte-stream connection so that its writes behave like an
unreliable link while reads pass straight through.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Optional

from .engine import WriteImpairmentEngine
from .profile import ImpairmentProfile

logger = logging.getLogger(__name__)


class _LossyBase(ABC):
    """Lifecycle and deadline handling shared by the lossy adapters."""

    def __init__(
        self,
        conn: Any,
        profile: ImpairmentProfile,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        self._conn = conn
        self.profile = profile
        self._engine = WriteImpairmentEngine(profile, self._send, rng=rng, seed=seed)
        logger.info(
            f"Wrapped {type(conn).__name__} with profile {profile.name}: "
            f"bandwidth={profile.bandwidth}B/s "
            f"latency={profile.min_latency * 1000:.1f}-{profile.max_latency * 1000:.1f}ms "
            f"loss={profile.loss_rate:.2%} overhead={profile.header_overhead}B"
        )

    @abstractmethod
    def _send(self, payload: bytes, destination: Any) -> int:
        """Hand a payload to the wrapped connection's real send."""
        pass

    def __getattr__(self, name: str) -> Any:
        # Everything not impaired is the wrapped connection's business.
        conn = self.__dict__.get("_conn")
        if conn is None or name.startswith("__"):
            raise AttributeError(name)
        return getattr(conn, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def conn(self) -> Any:
        """The wrapped connection."""
        return self._conn

    @property
    def closed(self) -> bool:
        return self._engine.closed

    @property
    def local_addr(self) -> Any:
        return self._conn.local_addr

    def close(self) -> None:
        """Close the wrapped connection; pending deliveries are discarded."""
        return self._engine.close(self._conn.close)

    def set_deadline(self, deadline: Optional[float]) -> None:
        """
        Set read and write deadlines as absolute time.time() timestamps.

        Once the write deadline has passed, writes skip impairment and fail
        the way the wrapped connection fails them.
        """
        return self._engine.set_write_deadline(deadline, self._conn.set_deadline)

    def set_write_deadline(self, deadline: Optional[float]) -> None:
        return self._engine.set_write_deadline(deadline, self._conn.set_write_deadline)

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        return self._conn.set_read_deadline(deadline)


class LossyConn(_LossyBase):
    """
    Stream connection with impaired writes.

    Example:
        >>> left, right = stream_pair()
        >>> lossy = LossyConn(left, ImpairmentProfile.simple(0.01, 0.1, 0.25))
        >>> lossy.write(b"ping")
        4
    """

    def _send(self, payload: bytes, destination: Any) -> int:
        return self._conn.write(payload)

    @property
    def remote_addr(self) -> Any:
        return self._conn.remote_addr

    def write(self, data: bytes) -> int:
        """
        Write data through the simulated link.

        Returns len(data) as soon as the payload is accepted. Raises
        whatever the wrapped connection raises when the connection is
        closed or the write deadline has passed.
        """
        return self._engine.schedule(data)

    def read(self, *args: Any, **kwargs: Any) -> bytes:
        return self._conn.read(*args, **kwargs)


def wrap_conn(
    conn: Any,
    min_latency: float,
    max_latency: float,
    loss_rate: float,
    bandwidth: int = 0,
    header_overhead: int = 0,
    seed: Optional[int] = None,
) -> LossyConn:
    """
    Wrap a stream connection with a lossy connection.

    Args:
        conn: Connection to wrap; owned by the returned object from now on.
        min_latency: Minimum one-way latency in seconds.
        max_latency: Maximum one-way latency in seconds.
        loss_rate: Chance of a write to be dropped, in [0, 1).
        bandwidth: Bytes/second, 0 or negative for unlimited.
        header_overhead: Header size of the underlying protocol, billed
            against bandwidth only.
        seed: Seed for the random source, for reproducible runs.

    Returns:
        LossyConn wrapping conn.
    """
    profile = ImpairmentProfile(
        bandwidth=bandwidth,
        min_latency=min_latency,
        max_latency=max_latency,
        loss_rate=loss_rate,
        header_overhead=header_overhead,
    )
    return LossyConn(conn, profile, seed=seed)
