"""
Parsing layer: turn pci.ids text into the vendor and class hierarchies.

Components:
    - classify_line: Determines record kind and depth of one raw line
    - PciIdsParser: Single-pass state machine building both hierarchies
    - ParsedLine / ParseResult: Classified line and parse output containers

The pci.ids file has two sections, never interleaved:
    - Vendors, their devices and device subsystems
    - Device classes ('C' lines), their subclasses and programming interfaces
"""

from pciids.parsing.lines import classify_line
from pciids.parsing.models import LineKind, ParsedLine, ParseResult
from pciids.parsing.parser import LineSource, ParserState, PciIdsParser

__all__ = [
    "classify_line",
    "LineKind",
    "LineSource",
    "ParsedLine",
    "ParseResult",
    "ParserState",
    "PciIdsParser",
]
