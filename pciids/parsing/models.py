"""Data models for parser results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pciids.core.models import (
    Device,
    DeviceClass,
    DeviceSubclass,
    LoadStats,
    ProgramInterface,
    Subsystem,
    Vendor,
)


class LineKind(Enum):
    """Kinds of record lines in a pci.ids file."""

    VENDOR = "vendor"
    DEVICE = "device"
    SUBSYSTEM = "subsystem"
    CLASS = "class"
    SUBCLASS = "subclass"
    PROG_IF = "prog_if"


@dataclass(frozen=True)
class ParsedLine:
    """A classified record line (before it is folded into a hierarchy)."""

    kind: LineKind
    depth: int
    ids: tuple[str, ...]
    name: str
    line_number: int
    raw: str

    @property
    def id(self) -> str:
        return self.ids[0]


@dataclass
class PendingDevice:
    """A device still being parsed."""

    id: str
    name: str
    vendor_id: str
    subsystems: list[Subsystem] = field(default_factory=list)

    def freeze(self) -> Device:
        return Device(
            id=self.id,
            name=self.name,
            vendor_id=self.vendor_id,
            subsystems=tuple(self.subsystems),
        )


@dataclass
class PendingVendor:
    """A vendor still being parsed."""

    id: str
    name: str
    devices: dict[str, PendingDevice] = field(default_factory=dict)

    def freeze(self) -> Vendor:
        devices = {device_id: d.freeze() for device_id, d in self.devices.items()}
        return Vendor(id=self.id, name=self.name, devices=MappingProxyType(devices))


@dataclass
class PendingSubclass:
    """A device subclass still being parsed."""

    id: str
    name: str
    class_id: str
    program_interfaces: dict[str, ProgramInterface] = field(default_factory=dict)

    def freeze(self) -> DeviceSubclass:
        return DeviceSubclass(
            id=self.id,
            name=self.name,
            class_id=self.class_id,
            program_interfaces=MappingProxyType(dict(self.program_interfaces)),
        )


@dataclass
class PendingClass:
    """A device class still being parsed."""

    id: str
    name: str
    subclasses: dict[str, PendingSubclass] = field(default_factory=dict)

    def freeze(self) -> DeviceClass:
        subclasses = {subclass_id: s.freeze() for subclass_id, s in self.subclasses.items()}
        return DeviceClass(id=self.id, name=self.name, subclasses=MappingProxyType(subclasses))


@dataclass
class ParseResult:
    """Result of parsing a pci.ids stream."""

    vendors: MappingProxyType[str, Vendor]
    classes: MappingProxyType[str, DeviceClass]
    stats: LoadStats
