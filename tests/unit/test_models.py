"""Unit tests for data models."""

import dataclasses
from types import MappingProxyType

import pytest

from pciids.core.models import (
    CLASS_ID_WIDTH,
    VENDOR_ID_WIDTH,
    Device,
    DeviceClass,
    ProgramInterface,
    Subsystem,
    Vendor,
    canonical_id,
)


class TestCanonicalId:
    """Tests for identifier canonicalization."""

    def test_lowercases(self) -> None:
        """Test that hex identifiers are lowercased."""
        assert canonical_id("0E11", VENDOR_ID_WIDTH) == "0e11"
        assert canonical_id("0C", CLASS_ID_WIDTH) == "0c"

    @pytest.mark.parametrize(
        "value,width",
        [("123", 4), ("12345", 4), ("12g4", 4), ("", 2), ("1", 2), (" 12", 2), ("0x12", 4)],
    )
    def test_rejects_malformed(self, value: str, width: int) -> None:
        """Test that wrong widths and non-hex characters raise ValueError."""
        with pytest.raises(ValueError):
            canonical_id(value, width)


class TestOrdering:
    """Tests for natural ordering."""

    def test_subsystem_sort_key(self) -> None:
        """Test that subsystems order by subvendor then subdevice, ignoring names."""
        subsystems = [
            Subsystem("8086", "002e", "A"),
            Subsystem("1028", "0134", "Z"),
            Subsystem("8086", "001e", "B"),
        ]

        ordered = sorted(subsystems, key=lambda s: s.sort_key)

        assert [s.name for s in ordered] == ["Z", "B", "A"]

    def test_id_sort_key(self) -> None:
        """Test that single-ID records order by ID."""
        assert Vendor("8086", "Intel").sort_key == "8086"
        assert Device("1237", "PMC", "8086").sort_key == "1237"
        assert ProgramInterface("30", "XHCI").sort_key == "30"


class TestRecords:
    """Tests for record immutability and defaults."""

    def test_frozen(self) -> None:
        """Test that records cannot be modified."""
        vendor = Vendor("8086", "Intel")

        with pytest.raises(dataclasses.FrozenInstanceError):
            vendor.name = "Other"  # type: ignore[misc]

    def test_default_children_are_empty_and_read_only(self) -> None:
        """Test that records without children get empty read-only mappings."""
        device_class = DeviceClass("ff", "Unassigned class")

        assert isinstance(device_class.subclasses, MappingProxyType)
        assert device_class.subclasses == {}
        assert Device("0001", "Device", "1234").subsystems == ()

    def test_records_hashable(self) -> None:
        """Test that records with child mappings can still be hashed."""
        vendor = Vendor("8086", "Intel", MappingProxyType({}))

        assert hash(vendor) == hash(Vendor("8086", "Intel"))
