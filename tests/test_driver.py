"""Tests for the label printer driver facade."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from tscprinter.driver import LabelPrinterDriver
from tscprinter.printer import ConnectionError, FatalError, PrintError, PrintWarning
from tscprinter.responses import ExtendedStatus, PrinterStatus

NORMAL = bytes([0x02, 0x40, 0x00, 0x00, 0x00, 0, 0, 0])
PAPER_LOW = bytes([0x02, 0x40, 0x01, 0x00, 0x00, 0, 0, 0])
HEAD_OPEN_AND_PAPER_LOW = bytes([0x02, 0x45, 0x01, 0x00, 0x20, 0, 0, 0])

LABEL = 'SIZE 50 mm,30 mm\nCLS\nBARCODE 10,10,"128",40,1,0,2,2,{{code}}\nPRINT 1,{{copies}}'


def stub_replies(extended):
    return {
        b"\x1b!S": extended,
        b"~!T": b"TDP-225",
        b"OUT _SERIAL$": b"A1234567",
    }


class TestPrintLabel:
    """End-to-end printing against the TCP stub."""

    def test_success(self, printer_stub):
        driver = LabelPrinterDriver(printer_stub.host, printer_stub.port)

        status = driver.print_label(LABEL, {"code": "1234", "copies": "2"})

        assert tuple(status) == (PrinterStatus.NORMAL, 0, 0)
        assert printer_stub.commands == [
            "SIZE 50 mm,30 mm",
            "CLS",
            'BARCODE 10,10,"128",40,1,0,2,2,1234',
            "PRINT 1,2",
            "\x1b!S",
        ]

    def test_one_connection_per_operation(self, printer_stub):
        driver = LabelPrinterDriver(printer_stub.host, printer_stub.port)
        driver.print_label("CLS", {})
        driver.print_label("CLS", {})
        assert printer_stub.wait_for_lines(4)
        assert printer_stub.connections == 2

    def test_printer_errors_raise_print_error(self, make_printer_stub):
        """Test errors take priority over warnings."""
        stub = make_printer_stub(stub_replies(HEAD_OPEN_AND_PAPER_LOW))
        driver = LabelPrinterDriver(stub.host, stub.port)

        with pytest.raises(PrintError, match="Print head open"):
            driver.print_label("CLS", {})

    def test_printer_warnings_raise_print_warning(self, make_printer_stub):
        stub = make_printer_stub(stub_replies(PAPER_LOW))
        driver = LabelPrinterDriver(stub.host, stub.port)

        with pytest.raises(PrintWarning, match="Paper low"):
            driver.print_label("CLS\nPRINT 1,1", {})
        # The label went out before the warning was seen
        assert "PRINT 1,1" in stub.commands

    def test_malformed_status_is_not_an_error(self, make_printer_stub):
        stub = make_printer_stub(stub_replies(b"\x02\x40"))
        driver = LabelPrinterDriver(stub.host, stub.port)

        status = driver.print_label("CLS", {})

        assert status.status is PrinterStatus.UNKNOWN
        assert not status.is_known

    def test_unreachable_printer_raises_print_error(self):
        with patch(
            "tscprinter.connection.socket.create_connection",
            side_effect=ConnectionRefusedError("refused"),
        ):
            driver = LabelPrinterDriver("10.0.0.5")
            with pytest.raises(PrintError, match="10.0.0.5:9100") as exc_info:
                driver.print_label("CLS", {})
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_write_failure_closes_connection(self):
        sock = MagicMock()
        sock.sendall.side_effect = BrokenPipeError("broken pipe")
        with patch("tscprinter.connection.socket.create_connection", return_value=sock):
            with pytest.raises(PrintError):
                LabelPrinterDriver("10.0.0.5").print_label("CLS", {})
        sock.close.assert_called_once()

    def test_self_referencing_substitution_is_fatal(self, printer_stub):
        driver = LabelPrinterDriver(printer_stub.host, printer_stub.port)
        with pytest.raises(FatalError):
            driver.print_label("{{x}}", {"x": "{{x}}"})
        assert printer_stub.connections == 0


class TestPrintTemplate:
    """Test printing by template name."""

    def test_prints_named_template(self, printer_stub):
        driver = LabelPrinterDriver(
            printer_stub.host, printer_stub.port, templates={"code": LABEL}
        )
        driver.print_template("code", {"code": "99", "copies": "1"})
        assert 'BARCODE 10,10,"128",40,1,0,2,2,99' in printer_stub.commands

    def test_missing_template_is_fatal(self, printer_stub):
        driver = LabelPrinterDriver(printer_stub.host, printer_stub.port, templates={})
        with pytest.raises(FatalError, match="Template not found: price"):
            driver.print_template("price", {})
        assert printer_stub.connections == 0


class TestCheckConnection:
    """Test printer identification and status check."""

    def test_success(self, printer_stub, caplog):
        driver = LabelPrinterDriver(printer_stub.host, printer_stub.port)

        with caplog.at_level(logging.INFO, logger="tscprinter.driver"):
            status = driver.check_connection()

        assert status.status is PrinterStatus.NORMAL
        assert driver.model == "TDP-225"
        assert driver.serial == "A1234567"
        assert "Connected TSC-TDP-225, s/n A1234567" in caplog.text

    def test_errors(self, make_printer_stub):
        stub = make_printer_stub(stub_replies(HEAD_OPEN_AND_PAPER_LOW))
        with pytest.raises(PrintError, match="Print head open"):
            LabelPrinterDriver(stub.host, stub.port).check_connection()

    def test_warnings(self, make_printer_stub):
        stub = make_printer_stub(stub_replies(PAPER_LOW))
        with pytest.raises(PrintWarning, match="Paper low"):
            LabelPrinterDriver(stub.host, stub.port).check_connection()

    def test_unreachable_logs_critical(self, caplog):
        with patch(
            "tscprinter.connection.socket.create_connection",
            side_effect=OSError("no route to host"),
        ):
            with caplog.at_level(logging.CRITICAL, logger="tscprinter.driver"):
                with pytest.raises(PrintError):
                    LabelPrinterDriver("10.0.0.5").check_connection()
        assert "TSC connection error" in caplog.text


class TestStatusPolicy:
    """Test the error/warning decision on decoded statuses."""

    @pytest.fixture
    def driver(self):
        return LabelPrinterDriver("printer")

    def test_clear_status_passes(self, driver):
        driver._check_status(ExtendedStatus.parse(NORMAL))

    def test_unknown_status_passes(self, driver):
        driver._check_status(ExtendedStatus.parse(b""))

    def test_error_message_lists_every_error(self, driver):
        status = ExtendedStatus.parse(bytes([0x02, 0x45, 0, 0x01, 0x01, 0, 0, 0]))
        with pytest.raises(PrintError) as exc_info:
            driver._check_status(status)
        assert str(exc_info.value) == "Print head overheat, Paper empty"

    def test_make_label(self, driver):
        assert driver.make_label("A:{{x}} B:{{y}}", {"x": "1"}) == "A:1 B:{{y}}"
