"""
TSPL Text-Based Commands for TSC Network Printers.

TSPL (TSC Printer Language) is a line-oriented ASCII command language.
Every builder here returns a single command line without its terminator;
TSCPrinter.send_command appends the newline when the line goes on the wire.

Status queries are escape sequences rather than words:
- ESC ! ?  -> 1-byte basic status
- ESC ! S  -> 8-byte extended status
"""

from enum import Enum


class BarcodeType(str, Enum):
    """Barcode symbologies accepted by the BARCODE command."""

    CODE128 = "128"  # Code 128, subset A/B/C switched automatically
    CODE128M = "128M"  # Code 128, subset switched manually
    EAN128 = "EAN128"
    I25 = "25"  # Interleaved 2 of 5
    I25C = "25C"  # Interleaved 2 of 5 with check digit
    CODE39 = "39"
    CODE39C = "39C"  # Code 39 with check digit
    CODE93 = "93"
    EAN13 = "EAN13"
    EAN13_2 = "EAN13+2"
    EAN13_5 = "EAN13+5"
    EAN8 = "EAN8"
    EAN8_2 = "EAN8+2"
    EAN8_5 = "EAN8+5"
    CODABAR = "CODA"
    POSTNET = "POST"
    UPCA = "UPCA"
    UPCA_2 = "UPCA+2"
    UPCA_5 = "UPCA+5"
    UPCE = "UPCE"
    UPCE_2 = "UPCE+2"
    UPCE_5 = "UPCE+5"


class Rotation(str, Enum):
    """Clockwise rotation for drawn elements."""

    R0 = "0"
    R90 = "90"
    R180 = "180"
    R270 = "270"


class SensorType(str, Enum):
    """Label boundary detection mode."""

    GAP = "GAP"  # Transmissive sensor, gap between labels
    BLINE = "BLINE"  # Reflective sensor, black mark on the liner


def _value(enum_cls, value) -> str:
    """Resolve an enum member or its raw value to the TSPL token."""
    if isinstance(value, enum_cls):
        return value.value
    return enum_cls(str(value)).value


class TSPLCommands:
    """
    TSPL command line builders.

    All methods are pure: they format a command and return it as str.
    """

    # ========== Status Queries ==========

    BASIC_STATUS = "\x1b!?"
    EXTENDED_STATUS = "\x1b!S"
    MODEL_NAME = "~!T"
    SERIAL_NUMBER = "OUT _SERIAL$"

    # ========== Setup Commands ==========

    @staticmethod
    def size(width_mm, height_mm) -> str:
        """
        Set label size.

        Args:
            width_mm: Label width in millimeters
            height_mm: Label height in millimeters
        """
        return f"SIZE {width_mm} mm,{height_mm} mm"

    @staticmethod
    def speed(speed) -> str:
        """Set print speed in inches per second."""
        return f"SPEED {speed}"

    @staticmethod
    def density(level) -> str:
        """Set print darkness (0-15, higher is darker)."""
        return f"DENSITY {int(level)}"

    @staticmethod
    def sensor(sensor: SensorType, vertical_mm, offset_mm=0) -> str:
        """
        Select gap or black mark sensing.

        Args:
            sensor: SensorType.GAP or SensorType.BLINE
            vertical_mm: Gap (or black mark) height in millimeters
            offset_mm: Offset of the gap/mark in millimeters
        """
        return f"{_value(SensorType, sensor)} {vertical_mm} mm,{offset_mm} mm"

    @staticmethod
    def gap(gap_mm, offset_mm=0) -> str:
        """Set gap between labels."""
        return TSPLCommands.sensor(SensorType.GAP, gap_mm, offset_mm)

    @staticmethod
    def bline(height_mm, offset_mm=0) -> str:
        """Set black line mark detection."""
        return TSPLCommands.sensor(SensorType.BLINE, height_mm, offset_mm)

    @staticmethod
    def striper_off() -> str:
        return "SET STRIPER OFF"

    @staticmethod
    def tear_off() -> str:
        return "SET TEAR OFF"

    # ========== Buffer / Media Commands ==========

    @staticmethod
    def cls() -> str:
        """Clear the image buffer."""
        return "CLS"

    @staticmethod
    def formfeed() -> str:
        """Feed one label forward."""
        return "FORMFEED"

    # ========== Drawing Commands ==========

    @staticmethod
    def barcode(
        x,
        y,
        barcode_type: BarcodeType,
        height,
        human_readable: bool,
        rotation: Rotation,
        narrow,
        wide,
        data: str,
    ) -> str:
        """
        Draw a 1D barcode.

        Args:
            x, y: Position in dots
            barcode_type: Symbology (BarcodeType or its TSPL name)
            height: Bar height in dots
            human_readable: Print the human readable line under the bars
            rotation: Rotation (Rotation or "0"/"90"/"180"/"270")
            narrow, wide: Narrow and wide bar widths in dots
            data: Barcode content, passed through as-is
        """
        readable = "1" if human_readable else "0"
        return (
            f'BARCODE {x},{y},"{_value(BarcodeType, barcode_type)}",{height},'
            f"{readable},{_value(Rotation, rotation)},{narrow},{wide},{data}"
        )

    # ========== Print Commands ==========

    @staticmethod
    def print_label(sets: int = 1, copies: int = 1) -> str:
        """
        Execute print command.

        Args:
            sets: Number of label sets
            copies: Number of copies per set
        """
        return f"PRINT {sets},{copies}"
