"""Line classifier for the pci.ids text format.

Each record line carries its nesting depth as leading tabs:

    vvvv  Vendor name
    <tab>dddd  Device name
    <tab><tab>ssss ssss  Subsystem name
    C cc  Class name
    <tab>ss  Subclass name
    <tab><tab>pp  Programming interface name

Lines that are blank or start with '#' (after optional whitespace) are ignored.
"""

from __future__ import annotations

from pciids.core.exceptions import ParseError
from pciids.core.models import CLASS_ID_WIDTH, VENDOR_ID_WIDTH, canonical_id
from pciids.parsing.models import LineKind, ParsedLine

CLASS_SIGIL = "C"
COMMENT_PREFIX = "#"
MAX_DEPTH = 2

_VENDOR_KINDS = (LineKind.VENDOR, LineKind.DEVICE, LineKind.SUBSYSTEM)
_CLASS_KINDS = (LineKind.CLASS, LineKind.SUBCLASS, LineKind.PROG_IF)

_ID_WIDTHS: dict[LineKind, tuple[int, ...]] = {
    LineKind.VENDOR: (VENDOR_ID_WIDTH,),
    LineKind.DEVICE: (VENDOR_ID_WIDTH,),
    LineKind.SUBSYSTEM: (VENDOR_ID_WIDTH, VENDOR_ID_WIDTH),
    LineKind.CLASS: (CLASS_ID_WIDTH,),
    LineKind.SUBCLASS: (CLASS_ID_WIDTH,),
    LineKind.PROG_IF: (CLASS_ID_WIDTH,),
}


def strip_line_ending(line: str) -> str:
    """Remove a trailing '\\n' and an optional '\\r' before it."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def is_ignorable(line: str) -> bool:
    """Check if a line is blank or a comment."""
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def is_class_line(body: str) -> bool:
    """Check if a depth-0 line body opens a device class ('C' followed by whitespace)."""
    return len(body) > 1 and body[0] == CLASS_SIGIL and body[1].isspace()


def classify_line(line: str, line_number: int, class_section: bool = False) -> ParsedLine | None:
    """Classify one raw line.

    Args:
        line: Raw line, with or without its line ending
        line_number: 1-based line number, used for error reporting
        class_section: True once a class line has been seen; depth 1 and 2
            lines are then subclasses and programming interfaces

    Returns:
        ParsedLine for a record line, None for a blank or comment line

    Raises:
        ParseError: if the line is not a well-formed record
    """
    text = strip_line_ending(line)
    if is_ignorable(text):
        return None

    body = text.lstrip("\t")
    depth = len(text) - len(body)
    if depth > MAX_DEPTH:
        raise ParseError(f"Invalid nesting depth {depth}", line_number, text)
    if body[0].isspace():
        raise ParseError("Unexpected whitespace before identifier", line_number, text)

    if depth == 0 and is_class_line(body):
        kind = LineKind.CLASS
        body = body[len(CLASS_SIGIL) :].lstrip()
    elif depth == 0 and class_section:
        raise ParseError("Vendor record after the class section started", line_number, text)
    else:
        kind = (_CLASS_KINDS if class_section else _VENDOR_KINDS)[depth]

    widths = _ID_WIDTHS[kind]
    parts = body.split(None, len(widths))
    if len(parts) <= len(widths):
        raise ParseError(f"Missing {kind.value} name", line_number, text)

    try:
        ids = tuple(canonical_id(token, width) for token, width in zip(parts, widths))
    except ValueError as e:
        raise ParseError(f"Malformed {kind.value} identifier ({e})", line_number, text) from e

    name = parts[-1].strip()
    return ParsedLine(
        kind=kind,
        depth=depth,
        ids=ids,
        name=name,
        line_number=line_number,
        raw=text,
    )
