"""Unit tests for the pci.ids parser state machine."""

import io

import pytest

from pciids.core.exceptions import ParseError
from pciids.parsing.parser import PciIdsParser

SAMPLE = """\
# Vendors
1234  First Vendor
\t0001  First Device
\t\t1234 0010  Subsystem A
\t\tabcd 0001  Subsystem B
\t0002  Second Device
5678  Second Vendor

C 01  Mass storage controller
\t05  ATA controller
\t\t20  ADMA single stepping
\t\t30  ADMA continuous operation
C 02  Network controller
"""


@pytest.fixture
def parser() -> PciIdsParser:
    """Create a parser for testing."""
    return PciIdsParser()


class TestParserHierarchy:
    """Tests for building both hierarchies."""

    def test_parse_text_stream(self, parser: PciIdsParser) -> None:
        """Test that a text stream builds vendors, devices and subsystems."""
        result = parser.parse(io.StringIO(SAMPLE))

        assert sorted(result.vendors) == ["1234", "5678"]
        vendor = result.vendors["1234"]
        assert vendor.name == "First Vendor"
        assert sorted(vendor.devices) == ["0001", "0002"]

        device = vendor.devices["0001"]
        assert device.vendor_id == "1234"
        assert [(s.subvendor_id, s.subdevice_id) for s in device.subsystems] == [
            ("1234", "0010"),
            ("abcd", "0001"),
        ]
        assert result.vendors["5678"].devices == {}

    def test_parse_class_section(self, parser: PciIdsParser) -> None:
        """Test that the class section builds classes, subclasses and prog-ifs."""
        result = parser.parse(io.StringIO(SAMPLE))

        assert sorted(result.classes) == ["01", "02"]
        subclass = result.classes["01"].subclasses["05"]
        assert subclass.name == "ATA controller"
        assert subclass.class_id == "01"
        assert sorted(subclass.program_interfaces) == ["20", "30"]
        assert result.classes["02"].subclasses == {}

    def test_parse_binary_stream(self, parser: PciIdsParser) -> None:
        """Test that bytes are decoded as UTF-8 line by line."""
        data = "1af4  Red Hat, Inc.\n\t1000  Virtio network dévice\n".encode()
        result = parser.parse(io.BytesIO(data))

        assert result.vendors["1af4"].devices["1000"].name == "Virtio network dévice"

    def test_parse_crlf(self, parser: PciIdsParser) -> None:
        """Test that CRLF line endings are tolerated."""
        data = b"1234  Vendor\r\n\t0001  Device\r\n"
        result = parser.parse(io.BytesIO(data))

        assert result.vendors["1234"].devices["0001"].name == "Device"

    def test_parse_list_of_lines(self, parser: PciIdsParser) -> None:
        """Test that any iterable of lines without endings is accepted."""
        result = parser.parse(["1234  Vendor", "\t0001  Device"])

        assert result.vendors["1234"].devices["0001"].name == "Device"

    def test_parse_empty(self, parser: PciIdsParser) -> None:
        """Test that empty input yields empty hierarchies."""
        result = parser.parse(io.StringIO("# nothing but comments\n\n"))

        assert result.vendors == {}
        assert result.classes == {}
        assert result.stats.lines == 2
        assert result.stats.ignored == 2

    def test_blank_lines_counted_as_ignored(self, parser: PciIdsParser) -> None:
        """Test that blank and comment lines share one counter."""
        stats = parser.parse(io.StringIO("\n\n\n1234  Vendor\n# note\n")).stats

        assert stats.lines == 5
        assert stats.ignored == 4
        assert "comments" not in stats.as_dict()

    def test_backward_depth_jump(self, parser: PciIdsParser) -> None:
        """Test that depth 0 directly after depth 2 starts a new vendor."""
        text = "1234  A\n\t0001  D\n\t\t1234 0001  S\n5678  B\n\t0002  E\n"
        result = parser.parse(io.StringIO(text))

        assert sorted(result.vendors["5678"].devices) == ["0002"]
        assert sorted(result.vendors["1234"].devices) == ["0001"]

    def test_subsystems_keep_input_order(self, parser: PciIdsParser) -> None:
        """Test that subsystems are stored in the order they appear."""
        text = "1234  A\n\t0001  D\n\t\tffff 0002  Z\n\t\t0000 0001  Y\n"
        result = parser.parse(io.StringIO(text))

        names = [s.name for s in result.vendors["1234"].devices["0001"].subsystems]
        assert names == ["Z", "Y"]

    def test_stats(self, parser: PciIdsParser) -> None:
        """Test that parse statistics count the published entities."""
        stats = parser.parse(io.StringIO(SAMPLE)).stats

        assert stats.lines == 13
        assert stats.ignored == 2
        assert stats.vendors == 2
        assert stats.devices == 2
        assert stats.subsystems == 2
        assert stats.classes == 2
        assert stats.subclasses == 1
        assert stats.program_interfaces == 2
        assert stats.duplicates == 0


class TestImmutability:
    """Tests that parse results cannot be modified."""

    def test_mappings_are_read_only(self, parser: PciIdsParser) -> None:
        """Test that the published mappings reject assignment."""
        result = parser.parse(io.StringIO(SAMPLE))

        with pytest.raises(TypeError):
            result.vendors["9999"] = result.vendors["1234"]  # type: ignore[index]
        with pytest.raises(TypeError):
            result.vendors["1234"].devices["0003"] = None  # type: ignore[index]
        with pytest.raises(TypeError):
            result.classes["01"].subclasses["05"].program_interfaces["40"] = None  # type: ignore[index]

    def test_subsystems_are_tuples(self, parser: PciIdsParser) -> None:
        """Test that device subsystems are an immutable sequence."""
        result = parser.parse(io.StringIO(SAMPLE))

        assert isinstance(result.vendors["1234"].devices["0001"].subsystems, tuple)


class TestDuplicates:
    """Tests for last-write-wins handling of duplicate identifiers."""

    def test_duplicate_device(self, parser: PciIdsParser) -> None:
        """Test that a re-declared device replaces name and subsystems."""
        text = (
            "1234  Vendor\n"
            "\t0001  Old Device\n"
            "\t\t1111 0001  Old Subsystem\n"
            "\t0001  New Device\n"
            "\t\t2222 0002  New Subsystem\n"
        )
        result = parser.parse(io.StringIO(text))

        device = result.vendors["1234"].devices["0001"]
        assert device.name == "New Device"
        assert [s.name for s in device.subsystems] == ["New Subsystem"]
        assert result.stats.duplicates == 1

    def test_duplicate_vendor(self, parser: PciIdsParser) -> None:
        """Test that a re-declared vendor discards the earlier vendor's devices."""
        text = "1234  Old\n\t0001  Old Device\n1234  New\n\t0002  New Device\n"
        result = parser.parse(io.StringIO(text))

        vendor = result.vendors["1234"]
        assert vendor.name == "New"
        assert sorted(vendor.devices) == ["0002"]

    def test_duplicate_prog_if(self, parser: PciIdsParser) -> None:
        """Test that a re-declared programming interface keeps the later name."""
        text = "C 0c  Serial\n\t03  USB\n\t\t30  XHCI\n\t\t30  USB 3 XHCI\n"
        result = parser.parse(io.StringIO(text))

        assert result.classes["0c"].subclasses["03"].program_interfaces["30"].name == "USB 3 XHCI"
        assert result.stats.duplicates == 1

    def test_duplicate_case_variants(self, parser: PciIdsParser) -> None:
        """Test that identifiers differing only in case are the same key."""
        text = "abcd  Lower\nABCD  Upper\n"
        result = parser.parse(io.StringIO(text))

        assert list(result.vendors) == ["abcd"]
        assert result.vendors["abcd"].name == "Upper"


class TestTransitionErrors:
    """Tests for lines appearing where the state machine forbids them."""

    def test_device_before_vendor(self, parser: PciIdsParser) -> None:
        """Test that a depth-1 line at the start raises ParseError."""
        with pytest.raises(ParseError) as exc_info:
            parser.parse(io.StringIO("# header\n\t0001  Orphan device\n"))

        assert exc_info.value.line_number == 2
        assert exc_info.value.line == "\t0001  Orphan device"

    def test_subsystem_without_device(self, parser: PciIdsParser) -> None:
        """Test that a depth-2 line directly under a vendor raises ParseError."""
        with pytest.raises(ParseError) as exc_info:
            parser.parse(io.StringIO("1234  Vendor\n\t\t1234 0001  Orphan subsystem\n"))

        assert exc_info.value.line_number == 2

    def test_subsystem_after_new_vendor(self, parser: PciIdsParser) -> None:
        """Test that a new vendor closes the previous device context."""
        text = "1234  A\n\t0001  D\n5678  B\n\t\t1234 0001  S\n"
        with pytest.raises(ParseError):
            parser.parse(io.StringIO(text))

    def test_prog_if_without_subclass(self, parser: PciIdsParser) -> None:
        """Test that a depth-2 line directly under a class raises ParseError."""
        with pytest.raises(ParseError):
            parser.parse(io.StringIO("C 01  Mass storage\n\t\t20  ADMA\n"))

    def test_vendor_after_class_section(self, parser: PciIdsParser) -> None:
        """Test that the class section cannot be left again."""
        text = "1234  Vendor\nC 01  Mass storage\n5678  Late vendor\n"
        with pytest.raises(ParseError) as exc_info:
            parser.parse(io.StringIO(text))

        assert exc_info.value.line_number == 3

    def test_device_line_read_as_subclass_after_class(self, parser: PciIdsParser) -> None:
        """Test that 4-digit depth-1 lines are invalid in the class section."""
        with pytest.raises(ParseError):
            parser.parse(io.StringIO("C 01  Mass storage\n\t0001  Device\n"))

    def test_undecodable_bytes(self, parser: PciIdsParser) -> None:
        """Test that invalid UTF-8 raises ParseError with the line number."""
        with pytest.raises(ParseError) as exc_info:
            parser.parse(io.BytesIO(b"1234  Vendor\n5678  Bad \xff\xfe name\n"))

        assert exc_info.value.line_number == 2
