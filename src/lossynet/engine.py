"""
Write impairment engine.

Decides, for every outbound payload of a wrapped connection, whether it
is dropped, how long it is delayed and how it queues for the simulated
finite-bandwidth link, and eventually hands it to the real send.
"""

import itertools
import logging
import random
import threading
import time
from typing import Any, Callable, Optional, TypeVar

from .profile import ImpairmentProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

# send(payload, destination) -> bytes written; destination is None for streams
SendFunc = Callable[[bytes, Any], int]


class WriteImpairmentEngine:
    """
    Impairs the write path of one wrapped connection.

    Two locks with disjoint duties coordinate the work:

    - the state lock guards ``closed``, ``write_deadline`` and every call
      into the underlying connection, so the real connection never sees
      concurrent calls from the adapter and from delayed deliveries;
    - the throttle lock is held only while a payload sleeps for its
      transmission time, which serializes bandwidth consumption across
      in-flight payloads like a single shared link.

    Every accepted payload gets its own daemon thread that nobody joins.
    The latency sleep happens outside both locks, so payloads sent close
    together may be delivered out of order.

    Example:
        >>> engine = WriteImpairmentEngine(ImpairmentProfile.simple(0.01, 0.05, 0.1), send)
        >>> engine.schedule(b"hello")
        5
    """

    def __init__(
        self,
        profile: ImpairmentProfile,
        send: SendFunc,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            profile: Impairments to apply.
            send: Real send operation of the underlying connection.
            rng: Random source shared by all deliveries of this engine.
                Anything with a ``random()`` method returning floats in
                [0, 1) works. Created from ``seed`` when not given.
            seed: Seed for the engine's own random source.
        """
        self.profile = profile
        self._send = send
        self._rng = rng if rng is not None else random.Random(seed)
        self._state_lock = threading.Lock()
        self._throttle_lock = threading.Lock()
        self._closed = False
        self._write_deadline: Optional[float] = None
        self._task_ids = itertools.count(1)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def write_deadline(self) -> Optional[float]:
        return self._write_deadline

    def _bypass(self) -> bool:
        # Caller holds the state lock.
        if self._closed:
            return True
        return self._write_deadline is not None and self._write_deadline <= time.time()

    def schedule(self, payload: bytes, destination: Any = None) -> int:
        """
        Accept a payload for transmission over the simulated link.

        When the connection is closed or its write deadline has passed, the
        payload goes straight to the real send and its result or exception
        is returned to the caller unchanged. Otherwise the payload is
        accepted and its length returned at once; whether it is eventually
        delivered is never reported.

        Args:
            payload: Bytes to send. A copy is taken, so the caller may
                reuse its buffer.
            destination: Peer address for datagram sends, None for streams.

        Returns:
            Number of bytes accepted.
        """
        payload = memoryview(payload).tobytes()
        with self._state_lock:
            if self._bypass():
                logger.debug(
                    f"Bypassing impairment for {len(payload)} bytes "
                    f"(closed={self._closed})"
                )
                return self._send(payload, destination)

        task = threading.Thread(
            target=self._deliver,
            args=(payload, destination),
            name=f"lossynet-deliver-{next(self._task_ids)}",
            daemon=True,
        )
        task.start()
        return len(payload)

    def _deliver(self, payload: bytes, destination: Any) -> None:
        """Run one accepted payload through throttle, loss and latency."""
        with self._throttle_lock:
            transmission_time = self.profile.transmission_time(len(payload))
            if transmission_time > 0:
                time.sleep(transmission_time)

        if self._rng.random() < self.profile.loss_rate:
            return

        spread = self.profile.max_latency - self.profile.min_latency
        latency = self.profile.min_latency + spread * self._rng.random()
        if latency > 0:
            time.sleep(latency)

        with self._state_lock:
            if self._closed:
                logger.debug(f"Connection closed, discarding {len(payload)} bytes")
                return
            try:
                self._send(payload, destination)
            except Exception as e:
                logger.debug(f"Discarded delivery error: {e}")

    def close(self, close_underlying: Callable[[], T]) -> T:
        """
        Mark the connection closed and close the underlying connection.

        Deliveries still in flight become no-ops once they reach the
        state lock. Errors from close_underlying propagate.
        """
        with self._state_lock:
            self._closed = True
            logger.debug("Connection closed")
            return close_underlying()

    def set_write_deadline(
        self, deadline: Optional[float], set_underlying: Callable[[Optional[float]], T]
    ) -> T:
        """
        Record the write deadline and forward it to the underlying connection.

        The deadline only affects the bypass check of later writes;
        deliveries already scheduled are not cancelled.
        """
        with self._state_lock:
            self._write_deadline = deadline
            return set_underlying(deadline)
