"""
TSC Printer Protocol Client.

Sends TSPL commands to one network printer and decodes its status replies.
A TSCPrinter is single use: it connects when constructed, serves one
exchange sequence and is closed afterwards. Use it as a context manager so
the socket is released on every exit path:

    with TSCPrinter("192.168.1.50") as printer:
        printer.setup(50, 30, 4, 8, False, 2, 0)
        printer.clear_buffer()
        printer.print_label(1, 1)
        status, warnings, errors = printer.query_extended_status()
"""

import logging

from .connection import TCPConnection, TransportError
from .responses import BasicStatus, ExtendedStatus, parse_basic_status
from .tspl_commands import BarcodeType, Rotation, SensorType, TSPLCommands

logger = logging.getLogger(__name__)


# --- Exception Classes ---


class PrinterError(Exception):
    """Base exception for all printer errors."""

    pass


class ConnectionError(PrinterError):
    """Error connecting to or communicating with printer."""

    pass


class FatalError(PrinterError):
    """Unrecoverable precondition failure, e.g. unknown template name."""

    pass


class PrintError(PrinterError):
    """Printer reported an error condition, or the print job failed in transit."""

    pass


class PrintWarning(PrinterError):
    """Printer reported a warning. The label has already been sent."""

    pass


class TSCPrinter:
    """
    Protocol client for a TSPL printer on a raw TCP port.

    Status queries follow a soft-failure contract: a reply of unexpected
    length is reported as unknown (BASIC_STATUS_UNKNOWN or
    PrinterStatus.UNKNOWN) instead of raising. Only transport failures raise.
    """

    ENCODING = "utf-8"
    TERMINATOR = "\n"

    def __init__(
        self,
        host: str,
        port: int = TCPConnection.DEFAULT_PORT,
        connect_timeout: float = TCPConnection.DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = TCPConnection.DEFAULT_READ_TIMEOUT,
        write_timeout: float = TCPConnection.DEFAULT_WRITE_TIMEOUT,
    ):
        """
        Connect to a printer.

        Args:
            host: Printer hostname or IP address
            port: Raw print port (default 9100)
            connect_timeout: TCP handshake timeout in seconds
            read_timeout: Reply wait timeout in seconds
            write_timeout: Send timeout in seconds

        Raises:
            ConnectionError: If the connection cannot be established
        """
        self.connection = TCPConnection(
            host,
            port,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            write_timeout=write_timeout,
        )
        try:
            self.connection.connect()
        except TransportError as e:
            raise ConnectionError(str(e)) from e

    def close(self):
        """Close the connection. The client cannot be reused afterwards."""
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_connected(self) -> bool:
        """Check if the connection is still open."""
        return self.connection.is_connected

    # ---- Transport ----

    def send_raw(self, data: bytes):
        """
        Write bytes verbatim.

        Raises:
            ConnectionError: If the write fails or times out
        """
        if not self.connection.is_connected:
            raise ConnectionError("Not connected to printer")
        logger.debug("TX: %s", data.hex() if len(data) < 50 else data[:50].hex() + "...")
        try:
            self.connection.write(data)
        except TransportError as e:
            raise ConnectionError(str(e)) from e

    def send_command(self, text: str):
        """
        Send one command line, newline terminated. Empty text is a no-op.

        Raises:
            ConnectionError: If the write fails or times out
        """
        if not text:
            return
        self.send_raw((text + self.TERMINATOR).encode(self.ENCODING))

    def send_label(self, label: str):
        """Send a rendered label that already holds its own command lines."""
        self.send_command(label)

    def _query(self, command: str) -> bytes:
        self.send_command(command)
        try:
            response = self.connection.read_response()
        except TransportError as e:
            raise ConnectionError(str(e)) from e
        logger.debug("RX: %s", response.hex() if response else "<none>")
        return response

    # ---- Setup Commands ----

    def setup(
        self,
        width,
        height,
        speed,
        density,
        uses_black_mark: bool,
        vertical_gap,
        offset,
    ):
        """
        Configure media and print quality.

        Sends SIZE, SPEED, DENSITY and then BLINE or GAP as separate
        commands. If a write fails midway the earlier commands have already
        been applied by the printer.

        Args:
            width, height: Label size in millimeters
            speed: Print speed
            density: Print darkness (0-15)
            uses_black_mark: True for black mark (BLINE), False for gap sensing
            vertical_gap: Gap or black mark height in millimeters
            offset: Gap or black mark offset in millimeters
        """
        sensor = SensorType.BLINE if uses_black_mark else SensorType.GAP
        self.send_command(TSPLCommands.size(width, height))
        self.send_command(TSPLCommands.speed(speed))
        self.send_command(TSPLCommands.density(density))
        self.send_command(TSPLCommands.sensor(sensor, vertical_gap, offset))

    def clear_buffer(self):
        """Clear the image buffer."""
        self.send_command(TSPLCommands.cls())

    def form_feed(self):
        """Feed one label forward."""
        self.send_command(TSPLCommands.formfeed())

    def disable_backfeed(self):
        """Turn off the stripper and tear-off backfeed."""
        self.send_command(TSPLCommands.striper_off())
        self.send_command(TSPLCommands.tear_off())

    # ---- Drawing / Print Commands ----

    def draw_barcode(
        self,
        x,
        y,
        barcode_type: BarcodeType,
        height,
        human_readable: bool,
        rotation: Rotation,
        narrow_width,
        wide_width,
        data: str,
    ):
        """Draw a 1D barcode. See TSPLCommands.barcode for arguments."""
        self.send_command(
            TSPLCommands.barcode(
                x, y, barcode_type, height, human_readable, rotation,
                narrow_width, wide_width, data,
            )
        )

    def print_label(self, sets: int = 1, copies: int = 1):
        """Print the image buffer."""
        self.send_command(TSPLCommands.print_label(sets, copies))

    # ---- Queries ----

    def query_basic_status(self) -> BasicStatus:
        """
        Query the 1-byte basic status.

        Returns:
            BasicStatus flags; BASIC_STATUS_UNKNOWN (0x80) if the reply
            was not exactly one byte

        Raises:
            ConnectionError: On transport failure (not on a bad reply)
        """
        return parse_basic_status(self._query(TSPLCommands.BASIC_STATUS))

    def query_extended_status(self) -> ExtendedStatus:
        """
        Query the 8-byte extended status.

        Returns:
            ExtendedStatus; status UNKNOWN with empty warnings and errors
            if the reply was not exactly eight bytes

        Raises:
            ConnectionError: On transport failure (not on a bad reply)
        """
        return ExtendedStatus.parse(self._query(TSPLCommands.EXTENDED_STATUS))

    def query_model_name(self) -> str:
        """Query the printer model name. Returns "" if there is no usable reply."""
        return self._decode_text(self._query(TSPLCommands.MODEL_NAME))

    def query_serial_number(self) -> str:
        """Query the printer serial number. Returns "" if there is no usable reply."""
        return self._decode_text(self._query(TSPLCommands.SERIAL_NUMBER))

    @classmethod
    def _decode_text(cls, data: bytes) -> str:
        try:
            return data.decode(cls.ENCODING).strip("\r\n\x00")
        except UnicodeDecodeError:
            return ""
