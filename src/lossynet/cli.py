#!/usr/bin/env python3
"""
Command line demo for lossynet.

Sends a burst of datagrams over loopback UDP through a lossy connection
and reports what made it to the other side.

Usage:
    lossynet --profile poor_cellular
    lossynet --bandwidth 1024 --min-latency-ms 1000 --max-latency-ms 2000 --loss-pct 25
    lossynet --list-profiles
"""

import argparse
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from .conn import LossyConn
from .exceptions import DeadlineExceededError, LossyNetError
from .overhead import UDPV4_MIN_HEADER_OVERHEAD
from .profile import ImpairmentProfile, get_profile, load_profiles, resolve_header_overhead
from .sockets import dial_udp, listen_udp

logger = logging.getLogger("lossynet.cli")

MAX_UDP_PAYLOAD = 65507


@dataclass
class DemoResult:
    """Outcome of one demo run."""

    messages_sent: int = 0
    bytes_sent: int = 0
    messages_received: int = 0
    bytes_received: int = 0
    duration_sec: float = 0.0

    @property
    def loss_rate(self) -> float:
        if self.messages_sent == 0:
            return 0.0
        return 1.0 - self.messages_received / self.messages_sent


def run_demo(
    profile: ImpairmentProfile,
    count: int = 32,
    step: int = 64,
    idle_timeout: float = 5.0,
    seed: Optional[int] = None,
) -> DemoResult:
    """
    Send count datagrams of step, 2*step, ... bytes and count what arrives.

    Args:
        profile: Impairments applied to the sending side.
        count: Number of datagrams to send.
        step: Size increment between consecutive datagrams.
        idle_timeout: Seconds without traffic after which receiving stops.
        seed: Seed for the lossy connection's random source.

    Returns:
        DemoResult with sent/received totals. duration_sec excludes the
        final idle timeout.
    """
    result = DemoResult()

    with listen_udp() as listener:
        with LossyConn(dial_udp(listener.local_addr), profile, seed=seed) as conn:
            sender_addr = conn.local_addr
            start_time = time.monotonic()
            for i in range(1, count + 1):
                message = os.urandom(i * step)
                conn.write(message)
                result.messages_sent += 1
                result.bytes_sent += len(message)
            logger.info(
                f"Sent {result.messages_sent} messages with total size of "
                f"{result.bytes_sent} bytes"
            )

            while True:
                listener.set_read_deadline(time.time() + idle_timeout)
                try:
                    data, addr = listener.read_from(MAX_UDP_PAYLOAD)
                except DeadlineExceededError:
                    break
                if addr != sender_addr:
                    logger.warning(f"Ignoring datagram from unexpected sender {addr}")
                    continue
                result.messages_received += 1
                result.bytes_received += len(data)

            result.duration_sec = max(0.0, time.monotonic() - start_time - idle_timeout)

    return result


def build_profile(args: argparse.Namespace) -> ImpairmentProfile:
    """Build the impairment profile selected on the command line."""
    if args.profile:
        return get_profile(load_profiles(args.profiles), args.profile)
    return ImpairmentProfile(
        bandwidth=args.bandwidth,
        min_latency=args.min_latency_ms / 1000.0,
        max_latency=args.max_latency_ms / 1000.0,
        loss_rate=args.loss_pct / 100.0,
        header_overhead=resolve_header_overhead(args.header_overhead),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send datagrams through a simulated lossy link"
    )
    parser.add_argument(
        "--profile", "-p",
        default=None,
        help="Impairment profile to use (overrides the explicit impairment flags)"
    )
    parser.add_argument(
        "--profiles",
        default="configs/profiles.yaml",
        help="Path to impairment profiles config"
    )
    parser.add_argument(
        "--list-profiles",
        action="store_true",
        help="List available impairment profiles"
    )
    parser.add_argument(
        "--bandwidth",
        type=int,
        default=1024,
        help="Bandwidth in bytes/second, 0 for unlimited"
    )
    parser.add_argument(
        "--min-latency-ms",
        type=float,
        default=1000.0,
        help="Minimum one-way latency in milliseconds"
    )
    parser.add_argument(
        "--max-latency-ms",
        type=float,
        default=2000.0,
        help="Maximum one-way latency in milliseconds"
    )
    parser.add_argument(
        "--loss-pct",
        type=float,
        default=25.0,
        help="Packet loss percentage"
    )
    parser.add_argument(
        "--header-overhead",
        default=str(UDPV4_MIN_HEADER_OVERHEAD),
        help="Header overhead in bytes or a name such as udp4_min"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        default=32,
        help="Number of messages to send"
    )
    parser.add_argument(
        "--step",
        type=int,
        default=64,
        help="Size increment in bytes between consecutive messages"
    )
    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=5.0,
        help="Stop receiving after this many seconds without traffic"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible loss and latency"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.count * args.step > MAX_UDP_PAYLOAD:
        parser.error(f"--count * --step must not exceed {MAX_UDP_PAYLOAD} bytes")

    if args.header_overhead.isdigit():
        args.header_overhead = int(args.header_overhead)

    try:
        if args.list_profiles:
            print("\nAvailable impairment profiles:")
            for name, profile in load_profiles(args.profiles).items():
                print(f"  - {name}: {profile.description}")
            return 0

        profile = build_profile(args)
    except LossyNetError as e:
        logger.error(str(e))
        return 1

    result = run_demo(
        profile,
        count=args.count,
        step=args.step,
        idle_timeout=args.idle_timeout,
        seed=args.seed,
    )

    print(f"Sent {result.messages_sent} messages with total size of {result.bytes_sent} bytes")
    print(
        f"Received {result.messages_received} messages with total size of "
        f"{result.bytes_received} bytes in {result.duration_sec:.3f} seconds"
    )
    print(f"Observed loss: {result.loss_rate:.1%}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
