"""pciids custom exceptions."""

from __future__ import annotations


class PciIdsError(Exception):
    """Base exception for pciids errors."""


class DatabaseNotReadyError(PciIdsError):
    """Database queried before a successful load."""


class SourceNotFoundError(PciIdsError):
    """No pci.ids file could be located."""


class ParseError(PciIdsError):
    """Structural or format error in a pci.ids stream."""

    def __init__(self, message: str, line_number: int, line: str) -> None:
        super().__init__(f"Line {line_number}: {message}: {line!r}")
        self.line_number = line_number
        self.line = line
