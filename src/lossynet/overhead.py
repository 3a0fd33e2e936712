"""
Header overhead sizes of common transport stacks, in bytes.

These are used as ``header_overhead`` of an impairment profile so that
bandwidth limiting also bills the headers a real link would carry.
"""

IPV4_MIN_HEADER_OVERHEAD = 20
"""IPv4 header without options."""

IPV4_MAX_HEADER_OVERHEAD = 60
"""IPv4 header with the maximum amount of options."""

IPV6_HEADER_OVERHEAD = 40
"""Fixed IPv6 header."""

UDP_HEADER_SIZE = 8

UDPV4_MIN_HEADER_OVERHEAD = IPV4_MIN_HEADER_OVERHEAD + UDP_HEADER_SIZE
UDPV4_MAX_HEADER_OVERHEAD = IPV4_MAX_HEADER_OVERHEAD + UDP_HEADER_SIZE
UDPV6_HEADER_OVERHEAD = IPV6_HEADER_OVERHEAD + UDP_HEADER_SIZE

# Names accepted for header_overhead in profile files
HEADER_OVERHEADS: dict[str, int] = {
    "none": 0,
    "ipv4_min": IPV4_MIN_HEADER_OVERHEAD,
    "ipv4_max": IPV4_MAX_HEADER_OVERHEAD,
    "ipv6": IPV6_HEADER_OVERHEAD,
    "udp4_min": UDPV4_MIN_HEADER_OVERHEAD,
    "udp4_max": UDPV4_MAX_HEADER_OVERHEAD,
    "udp6": UDPV6_HEADER_OVERHEAD,
}
