"""
High-Level Label Printer Interface.

Sequences the protocol client into the two operations an application needs:
checking that the printer is usable, and printing a label from a template.
Every operation opens its own connection and closes it before returning.

Failures surface as three exception kinds:
    FatalError    - precondition failed (unknown template); do not retry
    PrintError    - printer error bits or transport failure
    PrintWarning  - printer warning bits; the label was already sent
"""

import logging
from typing import Mapping, Optional

from .connection import TCPConnection
from .printer import (
    ConnectionError,
    FatalError,
    PrintError,
    PrintWarning,
    TSCPrinter,
)
from .responses import ExtendedStatus
from .templates import TemplateSet, render

logger = logging.getLogger(__name__)


class LabelPrinterDriver:
    """Prints templated labels on one network printer."""

    def __init__(
        self,
        host: str,
        port: int = TCPConnection.DEFAULT_PORT,
        templates: Optional[TemplateSet] = None,
        connect_timeout: float = TCPConnection.DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = TCPConnection.DEFAULT_READ_TIMEOUT,
        write_timeout: float = TCPConnection.DEFAULT_WRITE_TIMEOUT,
    ):
        """
        Initialize the driver. No connection is made until an operation runs.

        Args:
            host: Printer hostname or IP address
            port: Raw print port (default 9100)
            templates: Template name -> template text, for print_template
            connect_timeout, read_timeout, write_timeout: Seconds
        """
        self.host = host
        self.port = port
        self.templates: TemplateSet = dict(templates or {})
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.model = ""
        self.serial = ""

    def _open(self) -> TSCPrinter:
        return TSCPrinter(
            self.host,
            self.port,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            write_timeout=self.write_timeout,
        )

    def _check_status(self, status: ExtendedStatus):
        """Raise for printer errors first, then warnings."""
        if status.ok:
            return
        if status.errors:
            logger.error("%s error: %s", self.model, status.errors.description)
            raise PrintError(status.errors.description)
        if status.warnings:
            logger.warning("%s warning: %s", self.model, status.warnings.description)
            raise PrintWarning(status.warnings.description)

    def check_connection(self) -> ExtendedStatus:
        """
        Connect, identify the printer and check its status.

        Returns:
            The extended status (may be UNKNOWN if the reply was malformed)

        Raises:
            PrintError: If the printer cannot be reached or reports errors
            PrintWarning: If the printer reports warnings
        """
        try:
            with self._open() as printer:
                self.model = printer.query_model_name()
                self.serial = printer.query_serial_number()
                status = printer.query_extended_status()
        except ConnectionError as e:
            logger.critical("TSC connection error: %s", e)
            raise PrintError(str(e)) from e

        logger.info("Connected TSC-%s, s/n %s", self.model, self.serial)
        self._check_status(status)
        logger.info("%s status: %s", self.model, status.status.description)
        return status

    def make_label(self, template: str, substitutions: Mapping[str, str]) -> str:
        """Render a label from template text."""
        return render(template, substitutions)

    def print_label(
        self, template: str, substitutions: Mapping[str, str]
    ) -> ExtendedStatus:
        """
        Render a template and send it to the printer.

        Args:
            template: Template text holding the complete TSPL job
            substitutions: Placeholder name -> value

        Returns:
            The extended status read after sending

        Raises:
            FatalError: If the substitutions cannot be rendered
            PrintError: If sending fails or the printer reports errors
            PrintWarning: If the printer reports warnings
        """
        try:
            label = self.make_label(template, substitutions)
        except ValueError as e:
            logger.critical("Cannot render label: %s", e)
            raise FatalError(str(e)) from e

        try:
            with self._open() as printer:
                printer.send_label(label)
                status = printer.query_extended_status()
        except ConnectionError as e:
            logger.error("%s %s", self.model, e)
            raise PrintError(str(e)) from e

        self._check_status(status)
        logger.debug("Printer status: %s", status.status.description)
        return status

    def print_template(
        self, name: str, substitutions: Mapping[str, str]
    ) -> ExtendedStatus:
        """
        Print a label from a named template.

        Raises:
            FatalError: If no template has that name
            PrintError: If sending fails or the printer reports errors
            PrintWarning: If the printer reports warnings
        """
        try:
            template = self.templates[name]
        except KeyError:
            logger.critical("Template %s not found", name)
            raise FatalError(f"Template not found: {name}") from None
        return self.print_label(template, substitutions)
