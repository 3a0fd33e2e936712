"""Tests for ImpairmentProfile dataclass and profile loading."""

import dataclasses
from pathlib import Path

import pytest

from lossynet import ImpairmentProfile, get_profile, load_profiles
from lossynet.exceptions import InvalidProfileError, ProfileLoadError, ProfileNotFoundError
from lossynet.overhead import (
    HEADER_OVERHEADS,
    IPV4_MAX_HEADER_OVERHEAD,
    IPV4_MIN_HEADER_OVERHEAD,
    IPV6_HEADER_OVERHEAD,
    UDPV4_MAX_HEADER_OVERHEAD,
    UDPV4_MIN_HEADER_OVERHEAD,
    UDPV6_HEADER_OVERHEAD,
)


def test_profile_defaults():
    """Test ImpairmentProfile default values."""
    profile = ImpairmentProfile()

    assert profile.name == "custom"
    assert profile.description == ""
    assert profile.bandwidth == 0
    assert profile.min_latency == 0.0
    assert profile.max_latency == 0.0
    assert profile.loss_rate == 0.0
    assert profile.header_overhead == 0
    assert profile.unlimited_bandwidth is True


def test_profile_is_immutable():
    """Test that a profile cannot be changed after creation."""
    profile = ImpairmentProfile(bandwidth=1024)

    with pytest.raises(dataclasses.FrozenInstanceError):
        profile.bandwidth = 2048


def test_simple_profile():
    """Test the latency and loss only constructor."""
    profile = ImpairmentProfile.simple(0.01, 0.05, 0.2)

    assert profile.min_latency == 0.01
    assert profile.max_latency == 0.05
    assert profile.loss_rate == 0.2
    assert profile.bandwidth == 0
    assert profile.header_overhead == 0


class TestDerivedValues:
    """Tests for bandwidth accounting helpers."""

    def test_time_per_byte(self):
        profile = ImpairmentProfile(bandwidth=1000)

        assert profile.time_per_byte == pytest.approx(0.001)

    @pytest.mark.parametrize("bandwidth", [0, -1, -1024])
    def test_unlimited_bandwidth(self, bandwidth):
        profile = ImpairmentProfile(bandwidth=bandwidth, header_overhead=28)

        assert profile.unlimited_bandwidth is True
        assert profile.time_per_byte == 0.0
        assert profile.transmission_time(1500) == 0.0

    def test_transmission_time_includes_header_overhead(self):
        profile = ImpairmentProfile(bandwidth=1024, header_overhead=24)

        assert profile.billing_size(1000) == 1024
        assert profile.transmission_time(1000) == pytest.approx(1.0)


class TestValidation:
    """Tests for parameter validation."""

    def test_negative_min_latency(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            ImpairmentProfile(min_latency=-0.1)

        assert exc_info.value.field == "min_latency"

    def test_max_latency_below_min(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            ImpairmentProfile(min_latency=0.2, max_latency=0.1)

        assert exc_info.value.field == "max_latency"

    @pytest.mark.parametrize("loss_rate", [-0.01, 1.01])
    def test_loss_rate_out_of_range(self, loss_rate):
        with pytest.raises(InvalidProfileError):
            ImpairmentProfile(loss_rate=loss_rate)

    def test_negative_header_overhead(self):
        with pytest.raises(InvalidProfileError):
            ImpairmentProfile(header_overhead=-1)

    def test_invalid_profile_error_is_value_error(self):
        with pytest.raises(ValueError):
            ImpairmentProfile(min_latency=1.0, max_latency=0.5)

    def test_total_loss_is_accepted(self, caplog):
        profile = ImpairmentProfile(name="blackhole", loss_rate=1.0)

        assert profile.loss_rate == 1.0
        assert "blackhole" in caplog.text

    def test_fixed_latency(self):
        profile = ImpairmentProfile(min_latency=0.05, max_latency=0.05)

        assert profile.min_latency == profile.max_latency


class TestHeaderOverheads:
    """Tests for the predefined header overhead sizes."""

    def test_sizes(self):
        assert IPV4_MIN_HEADER_OVERHEAD == 20
        assert IPV4_MAX_HEADER_OVERHEAD == 60
        assert IPV6_HEADER_OVERHEAD == 40
        assert UDPV4_MIN_HEADER_OVERHEAD == 28
        assert UDPV4_MAX_HEADER_OVERHEAD == 68
        assert UDPV6_HEADER_OVERHEAD == 48

    def test_names(self):
        assert HEADER_OVERHEADS["udp4_min"] == UDPV4_MIN_HEADER_OVERHEAD
        assert HEADER_OVERHEADS["udp6"] == UDPV6_HEADER_OVERHEAD
        assert HEADER_OVERHEADS["none"] == 0


def test_profile_from_dict(sample_profile_data):
    """Test ImpairmentProfile.from_dict factory method."""
    profile = ImpairmentProfile.from_dict("my_profile", sample_profile_data)

    assert profile.name == "my_profile"
    assert profile.description == "Test profile"
    assert profile.bandwidth == 65536
    assert profile.min_latency == pytest.approx(0.02)
    assert profile.max_latency == pytest.approx(0.1)
    assert profile.loss_rate == pytest.approx(0.01)
    assert profile.header_overhead == 28


def test_profile_from_dict_missing_fields():
    """Test from_dict with minimal data."""
    profile = ImpairmentProfile.from_dict("minimal", {})

    assert profile.name == "minimal"
    assert profile.description == ""
    assert profile.bandwidth == 0
    assert profile.max_latency == 0.0
    assert profile.loss_rate == 0.0


def test_profile_from_dict_fixed_latency():
    """Test that max latency defaults to min latency."""
    profile = ImpairmentProfile.from_dict("fixed", {"min_latency_ms": 50})

    assert profile.min_latency == pytest.approx(0.05)
    assert profile.max_latency == pytest.approx(0.05)


def test_profile_from_dict_numeric_header_overhead():
    """Test header overhead given in bytes."""
    profile = ImpairmentProfile.from_dict("raw", {"header_overhead": 52})

    assert profile.header_overhead == 52


def test_profile_from_dict_unknown_header_overhead():
    """Test error on an unknown header overhead name."""
    with pytest.raises(InvalidProfileError) as exc_info:
        ImpairmentProfile.from_dict("bad", {"header_overhead": "carrier_pigeon"})

    assert "carrier_pigeon" in str(exc_info.value)


class TestProfileLoading:
    """Tests for profile loading functionality."""

    def test_load_profiles(self, sample_profiles_yaml):
        """Test loading profiles from YAML file."""
        profiles = load_profiles(sample_profiles_yaml)

        assert len(profiles) == 2
        assert "test_profile" in profiles
        assert "ideal" in profiles

        profile = profiles["test_profile"]
        assert profile.bandwidth == 65536
        assert profile.loss_rate == pytest.approx(0.01)

    def test_load_profiles_file_not_found(self):
        """Test error when profile file doesn't exist."""
        with pytest.raises(ProfileLoadError) as exc_info:
            load_profiles("/nonexistent/path.yaml")

        assert "file not found" in str(exc_info.value)

    def test_load_profiles_invalid_yaml(self, tmp_path):
        """Test error on invalid YAML."""
        bad_yaml = tmp_path / "bad.yaml"
        bad_yaml.write_text("{{invalid yaml")

        with pytest.raises(ProfileLoadError) as exc_info:
            load_profiles(str(bad_yaml))

        assert "invalid YAML" in str(exc_info.value)

    def test_load_profiles_empty_file(self, tmp_path):
        """Test error on empty file."""
        empty_file = tmp_path / "empty.yaml"
        empty_file.write_text("")

        with pytest.raises(ProfileLoadError) as exc_info:
            load_profiles(str(empty_file))

        assert "empty file" in str(exc_info.value)

    def test_load_profiles_no_profiles(self, tmp_path):
        """Test error when the file defines no profiles."""
        no_profiles = tmp_path / "none.yaml"
        no_profiles.write_text("profiles: {}\n")

        with pytest.raises(ProfileLoadError) as exc_info:
            load_profiles(str(no_profiles))

        assert "no profiles defined" in str(exc_info.value)

    def test_get_profile(self, sample_profiles_yaml):
        """Test getting a profile by name."""
        profiles = load_profiles(sample_profiles_yaml)

        profile = get_profile(profiles, "ideal")

        assert profile.name == "ideal"
        assert profile.description == "No impairments"

    def test_get_profile_not_found(self, sample_profiles_yaml):
        """Test getting non-existent profile raises."""
        profiles = load_profiles(sample_profiles_yaml)

        with pytest.raises(ProfileNotFoundError) as exc_info:
            get_profile(profiles, "nonexistent")

        assert exc_info.value.profile_name == "nonexistent"

    def test_shipped_profiles_load(self):
        """Test that the bundled profiles file is valid."""
        path = Path(__file__).parent.parent / "configs" / "profiles.yaml"

        profiles = load_profiles(str(path))

        assert "poor_cellular" in profiles
        assert profiles["poor_cellular"].header_overhead == UDPV4_MAX_HEADER_OVERHEAD
