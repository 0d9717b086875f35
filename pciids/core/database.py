"""In-memory pci.ids database with build-then-swap loading."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pciids.core.exceptions import DatabaseNotReadyError, ParseError
from pciids.core.models import (
    Device,
    DeviceClass,
    DeviceSubclass,
    LoadStats,
    ProgramInterface,
    Subsystem,
    Vendor,
)
from pciids.core.sources import (
    DEFAULT_URL,
    REQUEST_TIMEOUT,
    find_system_file,
    is_url,
    open_remote,
    resolve_source,
)
from pciids.parsing import LineSource, PciIdsParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Generation:
    """One published, immutable pair of hierarchies."""

    vendors: Mapping[str, Vendor]
    classes: Mapping[str, DeviceClass]


class PciIdsDatabase:
    """Queryable vendor/device and device class hierarchies from a pci.ids file.

    A new instance is empty and not ready. Every load parses into fresh
    mappings and publishes them with a single reference swap, so readers see
    either the previous generation or the new one. Loads are serialized;
    queries take no lock.
    """

    def __init__(self) -> None:
        self._parser = PciIdsParser()
        self._load_lock = threading.Lock()
        self._generation: _Generation | None = None

    @property
    def ready(self) -> bool:
        """True while a complete, successfully loaded generation is published."""
        return self._generation is not None

    def load_stream(self, stream: LineSource) -> LoadStats:
        """Load the database from an open stream of bytes or text lines.

        The stream is consumed fully but not closed. On any error the
        previously published state is left untouched.

        Raises:
            ParseError: if the stream is not a well-formed pci.ids file
        """
        with self._load_lock:
            return self._load(stream, "stream")

    def load_file(self, path: Path | str) -> LoadStats:
        """Load the database from a local file."""
        with self._load_lock:
            logger.info(f"Reading {path}")
            with open(path, "rb") as f:
                return self._load(f, str(path))

    def load_system(self, candidates: list[str] | None = None) -> LoadStats:
        """Load the first pci.ids file found in the usual system locations.

        Raises:
            SourceNotFoundError: if none of the locations holds a file
        """
        return self.load_file(find_system_file(candidates))

    def load_remote(self, url: str = DEFAULT_URL, timeout: float = REQUEST_TIMEOUT) -> LoadStats:
        """Fetch the pci.ids file over HTTP and load it.

        Transport errors from requests propagate unchanged; nothing is retried.
        """
        with self._load_lock:
            with open_remote(url, timeout) as lines:
                return self._load(lines, url)

    def load(self, source: str | None = None) -> LoadStats:
        """Load from a path or URL, resolved the way the command line does it."""
        resolved = resolve_source(source)
        if is_url(resolved):
            return self.load_remote(resolved)
        return self.load_file(resolved)

    def reset(self) -> None:
        """Drop the published generation; queries fail until the next load."""
        with self._load_lock:
            self._generation = None

    def _load(self, stream: LineSource, origin: str) -> LoadStats:
        """Parse off to the side, then publish. Caller holds the load lock."""
        try:
            result = self._parser.parse(stream)
        except ParseError as e:
            logger.warning(f"Failed to load {origin}: {e}")
            raise

        self._generation = _Generation(vendors=result.vendors, classes=result.classes)
        logger.info(
            f"Loaded {len(result.vendors)} vendors and {len(result.classes)} device classes "
            f"from {origin}"
        )
        return result.stats

    def _published(self) -> _Generation:
        generation = self._generation
        if generation is None:
            raise DatabaseNotReadyError("Database not ready")
        return generation

    def find_all_vendors(self) -> list[Vendor]:
        """Get all vendors, sorted by vendor ID."""
        generation = self._published()
        return sorted(generation.vendors.values(), key=lambda v: v.sort_key)

    def find_vendor(self, vendor_id: str) -> Vendor | None:
        """Get a vendor, or None if unknown."""
        return self._published().vendors.get(vendor_id)

    def find_all_devices(self, vendor_id: str) -> list[Device]:
        """Get a vendor's devices sorted by device ID; empty if the vendor is unknown."""
        vendor = self._published().vendors.get(vendor_id)
        if vendor is None:
            return []
        return sorted(vendor.devices.values(), key=lambda d: d.sort_key)

    def find_device(self, vendor_id: str, device_id: str) -> Device | None:
        """Get a device, or None if the vendor or device is unknown."""
        vendor = self._published().vendors.get(vendor_id)
        if vendor is None:
            return None
        return vendor.devices.get(device_id)

    def find_all_subsystems(
        self,
        vendor_id: str,
        device_id: str,
        subvendor_id: str | None = None,
    ) -> list[Subsystem]:
        """Get a device's subsystems sorted by (subvendor ID, subdevice ID).

        Args:
            vendor_id: Vendor ID
            device_id: Device ID
            subvendor_id: If given, only subsystems of this subvendor

        Returns:
            Sorted subsystems; empty if the vendor or device is unknown
        """
        device = self.find_device(vendor_id, device_id)
        if device is None:
            return []
        subsystems = device.subsystems
        if subvendor_id is not None:
            subsystems = tuple(s for s in subsystems if s.subvendor_id == subvendor_id)
        return sorted(subsystems, key=lambda s: s.sort_key)

    def find_all_device_classes(self) -> list[DeviceClass]:
        """Get all device classes, sorted by class ID."""
        generation = self._published()
        return sorted(generation.classes.values(), key=lambda c: c.sort_key)

    def find_device_class(self, class_id: str) -> DeviceClass | None:
        """Get a device class, or None if unknown."""
        return self._published().classes.get(class_id)

    def find_all_device_subclasses(self, class_id: str) -> list[DeviceSubclass]:
        """Get a class's subclasses sorted by subclass ID; empty if the class is unknown."""
        device_class = self._published().classes.get(class_id)
        if device_class is None:
            return []
        return sorted(device_class.subclasses.values(), key=lambda s: s.sort_key)

    def find_device_subclass(self, class_id: str, subclass_id: str) -> DeviceSubclass | None:
        """Get a subclass, or None if the class or subclass is unknown."""
        device_class = self._published().classes.get(class_id)
        if device_class is None:
            return None
        return device_class.subclasses.get(subclass_id)

    def find_all_program_interfaces(self, class_id: str, subclass_id: str) -> list[ProgramInterface]:
        """Get a subclass's programming interfaces sorted by ID; empty if unknown."""
        subclass = self.find_device_subclass(class_id, subclass_id)
        if subclass is None:
            return []
        return sorted(subclass.program_interfaces.values(), key=lambda p: p.sort_key)

    def find_program_interface(
        self, class_id: str, subclass_id: str, prog_if_id: str
    ) -> ProgramInterface | None:
        """Get a programming interface, or None if any level is unknown."""
        subclass = self.find_device_subclass(class_id, subclass_id)
        if subclass is None:
            return None
        return subclass.program_interfaces.get(prog_if_id)

    def get_stats(self) -> dict[str, int]:
        """Get entity counts of the published generation."""
        generation = self._published()
        devices = [d for v in generation.vendors.values() for d in v.devices.values()]
        subclasses = [s for c in generation.classes.values() for s in c.subclasses.values()]
        return {
            "vendors": len(generation.vendors),
            "devices": len(devices),
            "subsystems": sum(len(d.subsystems) for d in devices),
            "classes": len(generation.classes),
            "subclasses": len(subclasses),
            "program_interfaces": sum(len(s.program_interfaces) for s in subclasses),
        }

    def __repr__(self) -> str:
        generation = self._generation
        if generation is None:
            return "PciIdsDatabase(ready=False)"
        return (
            f"PciIdsDatabase(ready=True, vendors={len(generation.vendors)}, "
            f"classes={len(generation.classes)})"
        )
