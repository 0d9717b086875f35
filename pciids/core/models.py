"""Data models for pciids."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

VENDOR_ID_WIDTH = 4
CLASS_ID_WIDTH = 2

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def canonical_id(value: str, width: int) -> str:
    """Validate a hexadecimal identifier and return its canonical (lowercase) form.

    Raises:
        ValueError: if the value is not exactly `width` hex digits
    """
    if len(value) != width or not set(value) <= _HEX_DIGITS:
        raise ValueError(f"Expected {width} hex digits, got {value!r}")
    return value.lower()


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class Subsystem:
    """A board-level variant of a device."""

    subvendor_id: str
    subdevice_id: str
    name: str

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.subvendor_id, self.subdevice_id)


@dataclass(frozen=True)
class Device:
    """A product offered by a vendor."""

    id: str
    name: str
    vendor_id: str
    subsystems: tuple[Subsystem, ...] = ()

    @property
    def sort_key(self) -> str:
        return self.id


@dataclass(frozen=True)
class Vendor:
    """A hardware manufacturer and its devices."""

    id: str
    name: str
    devices: Mapping[str, Device] = field(default_factory=_empty_mapping, hash=False, repr=False)

    @property
    def sort_key(self) -> str:
        return self.id


@dataclass(frozen=True)
class ProgramInterface:
    """A programming interface of a device subclass."""

    id: str
    name: str

    @property
    def sort_key(self) -> str:
        return self.id


@dataclass(frozen=True)
class DeviceSubclass:
    """A subclass within a device class."""

    id: str
    name: str
    class_id: str
    program_interfaces: Mapping[str, ProgramInterface] = field(
        default_factory=_empty_mapping, hash=False, repr=False
    )

    @property
    def sort_key(self) -> str:
        return self.id


@dataclass(frozen=True)
class DeviceClass:
    """A top-level device class."""

    id: str
    name: str
    subclasses: Mapping[str, DeviceSubclass] = field(
        default_factory=_empty_mapping, hash=False, repr=False
    )

    @property
    def sort_key(self) -> str:
        return self.id


class LoadStats:
    """Statistics from a load operation."""

    def __init__(self) -> None:
        self.lines: int = 0
        self.ignored: int = 0  # comment and blank lines
        self.vendors: int = 0
        self.devices: int = 0
        self.subsystems: int = 0
        self.classes: int = 0
        self.subclasses: int = 0
        self.program_interfaces: int = 0
        self.duplicates: int = 0

    def as_dict(self) -> dict[str, int]:
        return dict(vars(self))

    def __repr__(self) -> str:
        return (
            f"LoadStats(lines={self.lines}, ignored={self.ignored}, "
            f"vendors={self.vendors}, devices={self.devices}, "
            f"subsystems={self.subsystems}, "
            f"classes={self.classes}, subclasses={self.subclasses}, "
            f"program_interfaces={self.program_interfaces}, duplicates={self.duplicates})"
        )
