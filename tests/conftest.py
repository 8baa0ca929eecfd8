"""
Pytest configuration for TSC printer tests.

Provides a TCP printer stub fixture and a command-line option for hardware
tests.
"""

import socket
import threading
import time

import pytest

# Canned replies keyed by command line (without the newline)
DEFAULT_REPLIES = {
    b"\x1b!?": b"\x00",
    b"\x1b!S": bytes([0x02, 0x40, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00]),
    b"~!T": b"TDP-225\r\n",
    b"OUT _SERIAL$": b"A1234567\r\n",
}


class PrinterStub:
    """
    Minimal TSPL printer on 127.0.0.1.

    Accepts connections one at a time, records every received line and
    answers the query commands found in `replies`. Unknown lines get no reply.
    """

    def __init__(self, replies=None):
        self.replies = dict(DEFAULT_REPLIES if replies is None else replies)
        self.received: list[bytes] = []
        self.connections = 0
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen(5)
        self._server.settimeout(0.2)
        self._running = True
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def host(self) -> str:
        return "127.0.0.1"

    @property
    def port(self) -> int:
        return self._server.getsockname()[1]

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._running = False
        self._thread.join(timeout=2.0)
        self._server.close()

    def _serve(self):
        while self._running:
            try:
                conn, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self.connections += 1
            with conn:
                self._handle(conn)

    def _handle(self, conn):
        conn.settimeout(0.2)
        buffer = b""
        while self._running:
            try:
                chunk = conn.recv(4096)
            except socket.timeout:
                continue
            except OSError:
                return
            if not chunk:
                return
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                self.received.append(line)
                reply = self.replies.get(line)
                if reply:
                    conn.sendall(reply)

    def wait_for_lines(self, count: int, timeout: float = 2.0) -> bool:
        """Block until at least count lines were received."""
        deadline = time.monotonic() + timeout
        while len(self.received) < count:
            if time.monotonic() > deadline:
                return False
            time.sleep(0.01)
        return True

    @property
    def commands(self) -> list[str]:
        """Received lines decoded, query escape sequences included."""
        return [line.decode("utf-8") for line in self.received]


@pytest.fixture
def printer_stub():
    """Provide a running printer stub answering with the default replies."""
    stub = PrinterStub().start()
    yield stub
    stub.stop()


@pytest.fixture
def make_printer_stub():
    """Factory for printer stubs with custom replies."""
    stubs = []

    def _make(replies):
        stub = PrinterStub(replies).start()
        stubs.append(stub)
        return stub

    yield _make

    for stub in stubs:
        stub.stop()


def pytest_addoption(parser):
    """Add command-line options for hardware tests."""
    parser.addoption(
        "--printer",
        action="store",
        default=None,
        help="Hostname or IP address of a TSC printer for hardware tests",
    )


@pytest.fixture
def printer_host(request):
    """Get the printer host from command line."""
    host = request.config.getoption("--printer")
    if host is None:
        pytest.skip("No printer host provided (use --printer=HOST)")
    return host
