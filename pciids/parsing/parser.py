"""State machine that folds pci.ids lines into the vendor and class hierarchies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from enum import Enum
from types import MappingProxyType
from typing import IO, Any, Union

from pciids.core.exceptions import ParseError
from pciids.core.models import LoadStats, ProgramInterface, Subsystem
from pciids.parsing.lines import classify_line
from pciids.parsing.models import (
    LineKind,
    ParsedLine,
    ParseResult,
    PendingClass,
    PendingDevice,
    PendingSubclass,
    PendingVendor,
)

logger = logging.getLogger(__name__)

LineSource = Union[IO[bytes], IO[str], Iterable[bytes], Iterable[str]]

ENCODING = "utf-8"


class ParserState(Enum):
    """Position of the parser within the two hierarchies."""

    AWAITING_VENDOR_OR_CLASS = "awaiting_vendor_or_class"
    IN_VENDOR = "in_vendor"
    IN_DEVICE = "in_device"
    IN_CLASS = "in_class"
    IN_SUBCLASS = "in_subclass"


_VENDOR_STATES = (ParserState.IN_VENDOR, ParserState.IN_DEVICE)
_CLASS_STATES = (ParserState.IN_CLASS, ParserState.IN_SUBCLASS)


class PciIdsParser:
    """Parser for pci.ids streams."""

    def parse(self, source: LineSource) -> ParseResult:
        """Parse a whole stream into fresh vendor and class mappings.

        The source is consumed completely but not closed.

        Raises:
            ParseError: on the first structurally invalid line
        """
        builder = _HierarchyBuilder()
        for line_number, line in _iter_lines(source):
            builder.feed(line, line_number)
        return builder.finish()


def _iter_lines(source: LineSource) -> Iterator[tuple[int, str]]:
    """Yield (line number, text) pairs, decoding bytes line by line."""
    for line_number, raw in enumerate(source, start=1):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode(ENCODING)
            except UnicodeDecodeError as e:
                text = raw.decode(ENCODING, errors="replace")
                raise ParseError(f"Cannot decode line ({e.reason})", line_number, text) from e
        yield line_number, raw


class _HierarchyBuilder:
    """Tracks the current parent at each depth while lines are fed in."""

    def __init__(self) -> None:
        self.stats = LoadStats()
        self.state = ParserState.AWAITING_VENDOR_OR_CLASS

        self._vendors: dict[str, PendingVendor] = {}
        self._classes: dict[str, PendingClass] = {}

        self._vendor: PendingVendor | None = None
        self._device: PendingDevice | None = None
        self._class: PendingClass | None = None
        self._subclass: PendingSubclass | None = None

    @property
    def in_class_section(self) -> bool:
        return self.state in _CLASS_STATES

    def feed(self, line: str, line_number: int) -> None:
        """Fold one line into the hierarchy."""
        self.stats.lines += 1
        parsed = classify_line(line, line_number, self.in_class_section)
        if parsed is None:
            self.stats.ignored += 1
            return

        if parsed.kind == LineKind.VENDOR:
            self._start_vendor(parsed)
        elif parsed.kind == LineKind.DEVICE:
            self._start_device(parsed)
        elif parsed.kind == LineKind.SUBSYSTEM:
            self._add_subsystem(parsed)
        elif parsed.kind == LineKind.CLASS:
            self._start_class(parsed)
        elif parsed.kind == LineKind.SUBCLASS:
            self._start_subclass(parsed)
        else:
            self._add_program_interface(parsed)

    def _start_vendor(self, parsed: ParsedLine) -> None:
        vendor = PendingVendor(id=parsed.id, name=parsed.name)
        self._put(self._vendors, vendor.id, vendor, parsed)
        self._vendor = vendor
        self._device = None
        self.state = ParserState.IN_VENDOR

    def _start_device(self, parsed: ParsedLine) -> None:
        if self.state not in _VENDOR_STATES or self._vendor is None:
            raise ParseError("Device record outside of a vendor", parsed.line_number, parsed.raw)
        device = PendingDevice(id=parsed.id, name=parsed.name, vendor_id=self._vendor.id)
        self._put(self._vendor.devices, device.id, device, parsed)
        self._device = device
        self.state = ParserState.IN_DEVICE

    def _add_subsystem(self, parsed: ParsedLine) -> None:
        if self.state != ParserState.IN_DEVICE or self._device is None:
            raise ParseError(
                "Subsystem record outside of a device", parsed.line_number, parsed.raw
            )
        subvendor_id, subdevice_id = parsed.ids
        self._device.subsystems.append(
            Subsystem(subvendor_id=subvendor_id, subdevice_id=subdevice_id, name=parsed.name)
        )

    def _start_class(self, parsed: ParsedLine) -> None:
        device_class = PendingClass(id=parsed.id, name=parsed.name)
        self._put(self._classes, device_class.id, device_class, parsed)
        self._vendor = None
        self._device = None
        self._class = device_class
        self._subclass = None
        self.state = ParserState.IN_CLASS

    def _start_subclass(self, parsed: ParsedLine) -> None:
        if self.state not in _CLASS_STATES or self._class is None:
            raise ParseError(
                "Subclass record outside of a device class", parsed.line_number, parsed.raw
            )
        subclass = PendingSubclass(id=parsed.id, name=parsed.name, class_id=self._class.id)
        self._put(self._class.subclasses, subclass.id, subclass, parsed)
        self._subclass = subclass
        self.state = ParserState.IN_SUBCLASS

    def _add_program_interface(self, parsed: ParsedLine) -> None:
        if self.state != ParserState.IN_SUBCLASS or self._subclass is None:
            raise ParseError(
                "Programming interface record outside of a subclass",
                parsed.line_number,
                parsed.raw,
            )
        prog_if = ProgramInterface(id=parsed.id, name=parsed.name)
        self._put(self._subclass.program_interfaces, prog_if.id, prog_if, parsed)

    def _put(self, scope: dict[str, Any], key: str, record: object, parsed: ParsedLine) -> None:
        """Insert a record into its sibling scope; a later duplicate replaces the earlier one."""
        if key in scope:
            self.stats.duplicates += 1
            logger.debug(
                f"Line {parsed.line_number}: duplicate {parsed.kind.value} {key} replaces "
                f"{scope[key].name!r} with {parsed.name!r}"
            )
        scope[key] = record

    def finish(self) -> ParseResult:
        """Freeze the pending records into immutable mappings."""
        vendors = {vendor_id: v.freeze() for vendor_id, v in self._vendors.items()}
        classes = {class_id: c.freeze() for class_id, c in self._classes.items()}

        stats = self.stats
        stats.vendors = len(vendors)
        stats.classes = len(classes)
        for vendor in vendors.values():
            stats.devices += len(vendor.devices)
            for device in vendor.devices.values():
                stats.subsystems += len(device.subsystems)
        for device_class in classes.values():
            stats.subclasses += len(device_class.subclasses)
            for subclass in device_class.subclasses.values():
                stats.program_interfaces += len(subclass.program_interfaces)

        logger.info(
            f"Parsed {stats.lines} lines: {stats.vendors} vendors, {stats.devices} devices, "
            f"{stats.classes} classes"
        )
        return ParseResult(
            vendors=MappingProxyType(vendors),
            classes=MappingProxyType(classes),
            stats=stats,
        )
