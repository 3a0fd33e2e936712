"""Pytest configuration and fixtures for lossynet tests."""

import threading
import time

import pytest

from lossynet import dial_udp, listen_udp
from lossynet.exceptions import ConnectionClosedError, DeadlineExceededError


class RecordingConn:
    """In-memory connection that records every write with its arrival time."""

    def __init__(self):
        self.writes = []
        self.closed = False
        self.write_deadline = None
        self.read_deadline = None
        self.local_addr = ("127.0.0.1", 40000)
        self.remote_addr = ("127.0.0.1", 40001)
        self._cond = threading.Condition()

    def _record(self, data, addr):
        if self.closed:
            raise ConnectionClosedError("write")
        if self.write_deadline is not None and self.write_deadline <= time.time():
            raise DeadlineExceededError("write")
        with self._cond:
            self.writes.append((time.monotonic(), bytes(data), addr))
            self._cond.notify_all()
        return len(data)

    def write(self, data):
        return self._record(data, None)

    def write_to(self, data, addr):
        return self._record(data, addr)

    def read(self, size=65535):
        return b"inbound"

    def read_from(self, size=65535):
        return b"inbound", self.remote_addr

    def close(self):
        if self.closed:
            raise ConnectionClosedError("close")
        self.closed = True

    def set_deadline(self, deadline):
        self.read_deadline = deadline
        self.write_deadline = deadline

    def set_read_deadline(self, deadline):
        self.read_deadline = deadline

    def set_write_deadline(self, deadline):
        self.write_deadline = deadline

    @property
    def payloads(self):
        with self._cond:
            return [payload for _, payload, _ in self.writes]

    def wait_for(self, count, timeout=5.0):
        """Wait until at least count writes arrived; return whether they did."""
        with self._cond:
            return self._cond.wait_for(lambda: len(self.writes) >= count, timeout)


class ScriptedRandom:
    """Random source returning a fixed sequence of values."""

    def __init__(self, values):
        self._values = list(values)
        self._lock = threading.Lock()
        self.calls = 0

    def random(self):
        with self._lock:
            value = self._values[self.calls % len(self._values)]
            self.calls += 1
            return value


def wait_until(predicate, timeout=5.0, interval=0.001):
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def recording_conn():
    """Fresh in-memory recording connection."""
    return RecordingConn()


@pytest.fixture
def udp_pair():
    """Loopback UDP listener and a UDP connection dialed to it."""
    listener = listen_udp()
    conn = dial_udp(listener.local_addr)
    yield listener, conn
    for c in (conn, listener):
        if not c.closed:
            c.close()


@pytest.fixture
def sample_profile_data():
    """Sample profile data for testing."""
    return {
        "description": "Test profile",
        "bandwidth": 65536,
        "min_latency_ms": 20,
        "max_latency_ms": 100,
        "loss_pct": 1.0,
        "header_overhead": "udp4_min",
    }


@pytest.fixture
def sample_profiles_yaml(tmp_path):
    """Create a temporary profiles YAML file."""
    content = """
profiles:
  test_profile:
    description: "Test profile"
    bandwidth: 65536
    min_latency_ms: 20
    max_latency_ms: 100
    loss_pct: 1.0
    header_overhead: udp4_min

  ideal:
    description: "No impairments"
    loss_pct: 0
"""
    profiles_file = tmp_path / "profiles.yaml"
    profiles_file.write_text(content)
    return str(profiles_file)


def wait_for_deliveries(timeout=30.0):
    """Wait until no delivery thread of any engine is alive."""
    return wait_until(
        lambda: not any(
            t.name.startswith("lossynet-deliver") for t in threading.enumerate()
        ),
        timeout=timeout,
    )
