"""
TCP Connection Handler for TSC Printers.

Handles raw socket communication with a printer's network port (9100).
One connection serves one exchange sequence; there is no reconnect.
"""

import logging
import socket
from typing import Optional

logger = logging.getLogger(__name__)


class TransportError(OSError):
    """Socket level failure, raised with a message naming the endpoint."""


class TCPConnection:
    """Manages a blocking TCP connection to one printer."""

    DEFAULT_PORT = 9100

    # Seconds; connect uses its own, shorter timeout
    DEFAULT_CONNECT_TIMEOUT = 1.0
    DEFAULT_READ_TIMEOUT = 2.0
    DEFAULT_WRITE_TIMEOUT = 2.0

    # Largest reply read in one call (status replies are 1 or 8 bytes)
    MAX_RESPONSE_SIZE = 4096

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._sock: Optional[socket.socket] = None

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    def connect(self):
        """
        Open the connection.

        Raises:
            TransportError: If the handshake fails or times out
        """
        if self._sock is not None:
            return

        logger.debug("Connecting to %s...", self.endpoint)
        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self.connect_timeout
            )
        except socket.timeout as e:
            raise TransportError(f"Timeout connecting to {self.endpoint}") from e
        except OSError as e:
            raise TransportError(f"Failed to connect to {self.endpoint}: {e}") from e

        try:
            sock.settimeout(self.write_timeout)
        except OSError as e:
            sock.close()
            raise TransportError(f"Failed to configure socket for {self.endpoint}: {e}") from e

        self._sock = sock
        logger.debug("Connected to %s", self.endpoint)

    def close(self):
        """Close the connection. Safe to call more than once."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        finally:
            self._sock = None
            logger.debug("Disconnected from %s", self.endpoint)

    def write(self, data: bytes):
        """
        Write all of data to the printer.

        Raises:
            TransportError: If not connected, on timeout, or on socket error
        """
        sock = self._require_socket()
        try:
            sock.settimeout(self.write_timeout)
            sock.sendall(data)
        except socket.timeout as e:
            raise TransportError(f"Write to {self.endpoint} timed out") from e
        except OSError as e:
            raise TransportError(f"Write to {self.endpoint} failed: {e}") from e

    def read_response(self) -> bytes:
        """
        Wait for and return one reply from the printer.

        Performs a single receive of up to MAX_RESPONSE_SIZE bytes,
        waiting at most read_timeout seconds.

        Returns:
            The bytes received, or b"" if nothing arrived before the timeout
            or the printer closed the connection

        Raises:
            TransportError: If not connected or on socket error
        """
        sock = self._require_socket()
        try:
            sock.settimeout(self.read_timeout)
            return sock.recv(self.MAX_RESPONSE_SIZE)
        except socket.timeout:
            logger.debug("No reply from %s before timeout", self.endpoint)
            return b""
        except OSError as e:
            raise TransportError(f"Read from {self.endpoint} failed: {e}") from e

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise TransportError(f"Not connected to {self.endpoint}")
        return self._sock

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self._sock is not None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
