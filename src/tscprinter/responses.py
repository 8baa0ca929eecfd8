"""
Response Parsers for TSC Printer Status Queries.

This module decodes the binary replies to the two status escape sequences:

ESC ! ? (basic status, 1 byte):
    Bit  Meaning
    0    Print head open
    1    Paper jam
    2    Paper empty
    3    Ribbon empty
    4    Pause
    5    Printing
    7    Other error

ESC ! S (extended status, 8 bytes):
    Offset  Field
    0       Start of reply (ignored)
    1       Printer status code (see PrinterStatus)
    2       Warnings, low 2 bits (see PrinterWarnings)
    3       Errors, low 5 bits
    4       Errors, low 6 bits, shifted left by 5 (see PrinterErrors)
    5-7     Reserved / end of reply (ignored)

Malformed replies never raise here. A basic status reply of the wrong length
becomes BASIC_STATUS_UNKNOWN, an extended one becomes PrinterStatus.UNKNOWN
with empty warning and error sets.
"""

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag


class _DescribedFlag(IntFlag):
    """IntFlag whose description lists active members in definition order."""

    @classmethod
    def _labels(cls) -> dict:
        return {}

    @property
    def description(self) -> str:
        labels = self._labels()
        return ", ".join(
            label for member, label in labels.items() if (member & self) == member
        )

    def __str__(self) -> str:
        return self.description


class BasicStatus(_DescribedFlag):
    """Flags of the 1-byte ESC ! ? reply. BasicStatus(0) is all clear."""

    PRINT_HEAD_OPEN = 1 << 0
    PAPER_JAM = 1 << 1
    PAPER_EMPTY = 1 << 2
    RIBBON_EMPTY = 1 << 3
    PAUSE = 1 << 4
    PRINTING = 1 << 5
    ERROR = 1 << 7

    @classmethod
    def _labels(cls) -> dict:
        return {
            cls.PRINT_HEAD_OPEN: "Print head open",
            cls.PAPER_JAM: "Paper jam",
            cls.PAPER_EMPTY: "Paper empty",
            cls.RIBBON_EMPTY: "Ribbon empty",
            cls.PAUSE: "Paused",
            cls.PRINTING: "Printing",
            cls.ERROR: "Error",
        }


# Returned by a basic status query whose reply is not exactly one byte
BASIC_STATUS_UNKNOWN = BasicStatus(0x80)


class PrinterStatus(IntEnum):
    """Printer state reported in byte 1 of the extended status reply."""

    UNKNOWN = 0x00
    NORMAL = 0x40
    BACKING_LABEL = 0x42
    CUTTING = 0x43
    PRINTER_ERROR = 0x45
    FORM_FEED = 0x46
    WAITING_PRINT_KEY = 0x4B
    WAITING_TAKE_LABEL = 0x4C
    PRINTING_BATCH = 0x50
    IMAGING = 0x57
    PAUSE = 0x60

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]

    def __str__(self) -> str:
        return self.description


_STATUS_DESCRIPTIONS = {
    PrinterStatus.UNKNOWN: "Unknown",
    PrinterStatus.NORMAL: "Normal",
    PrinterStatus.BACKING_LABEL: "Backing label",
    PrinterStatus.CUTTING: "Cutting",
    PrinterStatus.PRINTER_ERROR: "Printer error",
    PrinterStatus.FORM_FEED: "Form feed",
    PrinterStatus.WAITING_PRINT_KEY: "Waiting to press print key",
    PrinterStatus.WAITING_TAKE_LABEL: "Waiting to take label",
    PrinterStatus.PRINTING_BATCH: "Printing batch",
    PrinterStatus.IMAGING: "Imaging",
    PrinterStatus.PAUSE: "Paused",
}


class PrinterWarnings(_DescribedFlag):
    """Non-blocking conditions from byte 2 of the extended status reply."""

    PAPER_LOW = 1 << 0
    RIBBON_LOW = 1 << 1

    @classmethod
    def _labels(cls) -> dict:
        return {
            cls.PAPER_LOW: "Paper low",
            cls.RIBBON_LOW: "Ribbon low",
        }


class PrinterErrors(_DescribedFlag):
    """
    Error conditions from bytes 3-4 of the extended status reply.

    Bit 9 is reserved by the protocol and has no member.
    """

    PRINT_HEAD_OVERHEAT = 1 << 0
    STEPPING_MOTOR_OVERHEAT = 1 << 1
    PRINT_HEAD_ERROR = 1 << 2
    CUTTER_JAM = 1 << 3
    INSUFFICIENT_MEMORY = 1 << 4
    PAPER_EMPTY = 1 << 5
    PAPER_JAM = 1 << 6
    RIBBON_EMPTY = 1 << 7
    RIBBON_JAM = 1 << 8
    PRINT_HEAD_OPEN = 1 << 10

    @classmethod
    def _labels(cls) -> dict:
        return {
            cls.PRINT_HEAD_OVERHEAT: "Print head overheat",
            cls.STEPPING_MOTOR_OVERHEAT: "Stepping motor overheat",
            cls.PRINT_HEAD_ERROR: "Print head error",
            cls.CUTTER_JAM: "Cutter jam",
            cls.INSUFFICIENT_MEMORY: "Insufficient memory",
            cls.PAPER_EMPTY: "Paper empty",
            cls.PAPER_JAM: "Paper jam",
            cls.RIBBON_EMPTY: "Ribbon empty",
            cls.RIBBON_JAM: "Ribbon jam",
            cls.PRINT_HEAD_OPEN: "Print head open",
        }


def parse_basic_status(data: bytes) -> BasicStatus:
    """
    Parse an ESC ! ? reply.

    Args:
        data: Raw reply bytes (expected exactly 1 byte)

    Returns:
        BasicStatus flags, or BASIC_STATUS_UNKNOWN if the length is wrong
    """
    if len(data) != 1:
        return BASIC_STATUS_UNKNOWN
    return BasicStatus(data[0])


@dataclass
class ExtendedStatus:
    """Parsed ESC ! S reply."""

    EXPECTED_LENGTH = 8

    status: PrinterStatus = PrinterStatus.UNKNOWN
    warnings: PrinterWarnings = PrinterWarnings(0)
    errors: PrinterErrors = PrinterErrors(0)
    raw_data: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "ExtendedStatus":
        """
        Parse ESC ! S reply bytes.

        Args:
            data: Raw reply bytes (expected exactly 8 bytes)

        Returns:
            ExtendedStatus; UNKNOWN with empty sets if the length is wrong
        """
        if len(data) != cls.EXPECTED_LENGTH:
            return cls(raw_data=bytes(data))

        status = PrinterStatus(data[1])
        warnings = PrinterWarnings(data[2] & 0x03)
        errors = PrinterErrors(((data[4] & 0x3F) << 5) + (data[3] & 0x1F))

        return cls(
            status=status,
            warnings=warnings,
            errors=errors,
            raw_data=bytes(data),
        )

    @property
    def is_known(self) -> bool:
        """False when the reply was malformed or the status code unrecognized."""
        return self.status is not PrinterStatus.UNKNOWN

    @property
    def ok(self) -> bool:
        """No errors and no warnings. Says nothing about an UNKNOWN status."""
        return not self.errors and not self.warnings

    def __iter__(self):
        # Allows `status, warnings, errors = printer.query_extended_status()`
        return iter((self.status, self.warnings, self.errors))

    def __str__(self) -> str:
        parts = [f"status={self.status.description}"]
        if self.warnings:
            parts.append(f"warnings={self.warnings.description}")
        if self.errors:
            parts.append(f"errors={self.errors.description}")
        return f"ExtendedStatus({', '.join(parts)})"
