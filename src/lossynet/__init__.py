"""
lossynet - bandwidth, latency and packet loss simulation for connections.

This package wraps stream connections and datagram endpoints so that
their outbound path behaves like an unreliable network: limited
bandwidth, random one-way latency and probabilistic packet loss. Reads
are left untouched.

Example:
    >>> from lossynet import dial_udp, listen_udp, wrap_conn, UDPV4_MIN_HEADER_OVERHEAD
    >>> server = listen_udp()
    >>> conn = wrap_conn(dial_udp(server.local_addr), 0.01, 0.05, 0.25,
    ...                  bandwidth=64 * 1024, header_overhead=UDPV4_MIN_HEADER_OVERHEAD)
    >>> conn.write(b"ping")
    4

Using profiles:
    >>> profiles = load_profiles("configs/profiles.yaml")
    >>> conn = LossyConn(dial_udp(server.local_addr), profiles["lossy_wifi"])
"""

from .conn import LossyConn, wrap_conn
from .engine import WriteImpairmentEngine
from .exceptions import (
    ConnectionClosedError,
    DeadlineExceededError,
    InvalidProfileError,
    LossyNetError,
    ProfileLoadError,
    ProfileNotFoundError,
)
from .overhead import (
    HEADER_OVERHEADS,
    IPV4_MAX_HEADER_OVERHEAD,
    IPV4_MIN_HEADER_OVERHEAD,
    IPV6_HEADER_OVERHEAD,
    UDPV4_MAX_HEADER_OVERHEAD,
    UDPV4_MIN_HEADER_OVERHEAD,
    UDPV6_HEADER_OVERHEAD,
)
from .packet_conn import LossyPacketConn, wrap_packet_conn
from .profile import ImpairmentProfile, get_profile, load_profiles
from .sockets import SocketConn, SocketPacketConn, dial_udp, listen_udp, stream_pair

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "ImpairmentProfile",
    "WriteImpairmentEngine",
    "LossyConn",
    "LossyPacketConn",
    # Socket primitives
    "SocketConn",
    "SocketPacketConn",
    "dial_udp",
    "listen_udp",
    "stream_pair",
    # Exceptions
    "LossyNetError",
    "InvalidProfileError",
    "ProfileNotFoundError",
    "ProfileLoadError",
    "DeadlineExceededError",
    "ConnectionClosedError",
    # Convenience functions
    "wrap_conn",
    "wrap_packet_conn",
    "load_profiles",
    "get_profile",
    # Header overheads
    "HEADER_OVERHEADS",
    "IPV4_MIN_HEADER_OVERHEAD",
    "IPV4_MAX_HEADER_OVERHEAD",
    "IPV6_HEADER_OVERHEAD",
    "UDPV4_MIN_HEADER_OVERHEAD",
    "UDPV4_MAX_HEADER_OVERHEAD",
    "UDPV6_HEADER_OVERHEAD",
    # Version
    "__version__",
]
