"""
Impairment profile data class for lossynet.

Defines the ImpairmentProfile dataclass that describes how the outbound
path of a wrapped connection misbehaves, and helpers to load named
profiles from a YAML file.
"""

import logging
from dataclasses import dataclass
from typing import Union

import yaml

from .exceptions import InvalidProfileError, ProfileLoadError, ProfileNotFoundError
from .overhead import HEADER_OVERHEADS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpairmentProfile:
    """
    Impairment configuration for a wrapped connection.

    Attributes:
        name: Identifier for the profile (default: "custom").
        description: Human-readable description of the simulated link.
        bandwidth: Link capacity in bytes/second. 0 or a negative value
            means unlimited, e.g. 1024 * 1024 for an 8 Mbit/s link.
        min_latency: Lower bound of the one-way latency in seconds.
        max_latency: Upper bound of the one-way latency in seconds.
            Must be equal to or greater than min_latency.
        loss_rate: Probability in [0, 1) that a payload is dropped.
        header_overhead: Bytes added to every payload for bandwidth
            accounting only. Ignored when bandwidth is unlimited.

    With a limited bandwidth and an idle link, a payload is delivered after
    (len(payload) + header_overhead) / bandwidth + uniform(min_latency, max_latency).
    """

    name: str = "custom"
    description: str = ""
    bandwidth: int = 0
    min_latency: float = 0.0
    max_latency: float = 0.0
    loss_rate: float = 0.0
    header_overhead: int = 0

    def __post_init__(self):
        if self.min_latency < 0:
            raise InvalidProfileError("min_latency", "must not be negative")
        if self.max_latency < self.min_latency:
            raise InvalidProfileError(
                "max_latency", "must be equal to or greater than min_latency"
            )
        if not 0.0 <= self.loss_rate <= 1.0:
            raise InvalidProfileError("loss_rate", "must be within [0, 1]")
        if self.header_overhead < 0:
            raise InvalidProfileError("header_overhead", "must not be negative")
        if self.loss_rate == 1.0:
            logger.warning(f"Profile {self.name} drops every payload (loss_rate=1)")

    @classmethod
    def simple(
        cls, min_latency: float, max_latency: float, loss_rate: float
    ) -> "ImpairmentProfile":
        """Create a profile with unlimited bandwidth and no header overhead."""
        return cls(min_latency=min_latency, max_latency=max_latency, loss_rate=loss_rate)

    @property
    def unlimited_bandwidth(self) -> bool:
        return self.bandwidth <= 0

    @property
    def time_per_byte(self) -> float:
        """Seconds one byte occupies the simulated link, 0 when unlimited."""
        if self.unlimited_bandwidth:
            return 0.0
        return 1.0 / self.bandwidth

    def billing_size(self, payload_len: int) -> int:
        """Bytes billed against the bandwidth for a payload of payload_len."""
        return payload_len + self.header_overhead

    def transmission_time(self, payload_len: int) -> float:
        """Seconds a payload of payload_len holds the simulated link."""
        return self.billing_size(payload_len) * self.time_per_byte

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "ImpairmentProfile":
        """
        Create an ImpairmentProfile from a dictionary.

        Latencies are given in milliseconds and loss as a percentage, the
        way they are written in profile files.

        Args:
            name: Profile name/identifier.
            data: Dictionary containing profile parameters.

        Returns:
            ImpairmentProfile instance with the specified parameters.

        Raises:
            InvalidProfileError: If a parameter is out of range or the
                header overhead name is unknown.

        Example:
            >>> profile = ImpairmentProfile.from_dict("slow", {"max_latency_ms": 100, "loss_pct": 1.0})
            >>> profile.max_latency
            0.1
        """
        min_latency_ms = data.get("min_latency_ms", 0)
        return cls(
            name=name,
            description=data.get("description", ""),
            bandwidth=data.get("bandwidth") or 0,
            min_latency=min_latency_ms / 1000.0,
            max_latency=data.get("max_latency_ms", min_latency_ms) / 1000.0,
            loss_rate=data.get("loss_pct", 0.0) / 100.0,
            header_overhead=resolve_header_overhead(data.get("header_overhead", 0)),
        )


def resolve_header_overhead(value: Union[int, str]) -> int:
    """
    Turn a header overhead given as bytes or as a well-known name into bytes.

    Raises:
        InvalidProfileError: If the name is not in HEADER_OVERHEADS.
    """
    if isinstance(value, str):
        try:
            return HEADER_OVERHEADS[value.lower()]
        except KeyError:
            raise InvalidProfileError(
                "header_overhead",
                f"unknown name {value!r}, expected one of {sorted(HEADER_OVERHEADS)}",
            )
    return int(value)


def load_profiles(path: str) -> dict[str, ImpairmentProfile]:
    """
    Load impairment profiles from YAML file.

    Args:
        path: Path to YAML file containing profile definitions.

    Returns:
        Mapping of profile name to ImpairmentProfile.

    Raises:
        ProfileLoadError: If file cannot be read or parsed.
        InvalidProfileError: If a profile has out of range parameters.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ProfileLoadError(path, "file not found")
    except yaml.YAMLError as e:
        raise ProfileLoadError(path, f"invalid YAML: {e}")

    if not data:
        raise ProfileLoadError(path, "empty file")

    profiles_data = data.get("profiles", {})
    if not profiles_data:
        raise ProfileLoadError(path, "no profiles defined")

    profiles = {
        name: ImpairmentProfile.from_dict(name, config or {})
        for name, config in profiles_data.items()
    }

    logger.info(f"Loaded {len(profiles)} impairment profiles from {path}")
    return profiles


def get_profile(profiles: dict[str, ImpairmentProfile], name: str) -> ImpairmentProfile:
    """
    Look up a profile by name.

    Raises:
        ProfileNotFoundError: If no profile with that name was loaded.
    """
    if name not in profiles:
        raise ProfileNotFoundError(name)
    return profiles[name]
