"""TSC Network Label Printer Driver."""

__version__ = "0.1.0"

from .connection import TCPConnection, TransportError
from .driver import LabelPrinterDriver
from .printer import (
    ConnectionError,
    FatalError,
    PrinterError,
    PrintError,
    PrintWarning,
    TSCPrinter,
)
from .responses import (
    BASIC_STATUS_UNKNOWN,
    BasicStatus,
    ExtendedStatus,
    PrinterErrors,
    PrinterStatus,
    PrinterWarnings,
)
from .templates import TemplateSet, find_placeholders, load_templates, render
from .tspl_commands import BarcodeType, Rotation, SensorType, TSPLCommands

__all__ = [
    "TSCPrinter",
    "LabelPrinterDriver",
    "PrinterError",
    "ConnectionError",
    "FatalError",
    "PrintError",
    "PrintWarning",
    "TCPConnection",
    "TransportError",
    "BasicStatus",
    "BASIC_STATUS_UNKNOWN",
    "PrinterStatus",
    "PrinterWarnings",
    "PrinterErrors",
    "ExtendedStatus",
    "TemplateSet",
    "render",
    "find_placeholders",
    "load_templates",
    "TSPLCommands",
    "BarcodeType",
    "Rotation",
    "SensorType",
]
