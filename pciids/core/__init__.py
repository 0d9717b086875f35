"""
Core module: data models, exceptions, and sources.

Models (models.py):
    - Vendor / Device / Subsystem: The vendor hierarchy
    - DeviceClass / DeviceSubclass / ProgramInterface: The class hierarchy
    - LoadStats: Counters returned by a load
    - canonical_id: Validate and canonicalize a hex identifier

Exceptions (exceptions.py):
    - PciIdsError: Base exception for all pciids errors
    - ParseError: Structurally invalid pci.ids input
    - DatabaseNotReadyError: Query before a successful load
    - SourceNotFoundError: No local pci.ids file found

Sources (sources.py):
    - DEFAULT_URL / SYSTEM_PATHS: Where pci.ids files are found
    - open_remote / find_system_file / resolve_source

The database itself lives in pciids.core.database (PciIdsDatabase).
"""

from pciids.core.exceptions import (
    DatabaseNotReadyError,
    ParseError,
    PciIdsError,
    SourceNotFoundError,
)
from pciids.core.models import (
    CLASS_ID_WIDTH,
    VENDOR_ID_WIDTH,
    Device,
    DeviceClass,
    DeviceSubclass,
    LoadStats,
    ProgramInterface,
    Subsystem,
    Vendor,
    canonical_id,
)
from pciids.core.sources import DEFAULT_URL, SYSTEM_PATHS, find_system_file, resolve_source

__all__ = [
    # Models
    "Vendor",
    "Device",
    "Subsystem",
    "DeviceClass",
    "DeviceSubclass",
    "ProgramInterface",
    "LoadStats",
    "canonical_id",
    "VENDOR_ID_WIDTH",
    "CLASS_ID_WIDTH",
    # Exceptions
    "PciIdsError",
    "ParseError",
    "DatabaseNotReadyError",
    "SourceNotFoundError",
    # Sources
    "DEFAULT_URL",
    "SYSTEM_PATHS",
    "find_system_file",
    "resolve_source",
]
