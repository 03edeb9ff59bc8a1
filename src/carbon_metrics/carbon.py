"""Carbon plaintext protocol helpers and the network sender."""

from __future__ import annotations
import logging
import math
import re
import socket
from collections.abc import Callable, Iterable
from types import TracebackType


_LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 2003
"""Port of the Carbon plaintext receiver."""

_WHITESPACE = re.compile(r"\s+")

Datapoint = tuple[str, float]
"""A metric path paired with its numeric value."""

ConnectionFactory = Callable[[tuple[str, int], float], socket.socket]


class CarbonError(RuntimeError):
    """Base error type for Carbon protocol and transport failures."""


class CarbonProtocolError(CarbonError, ValueError):
    """Raised when a line or value cannot be expressed in the protocol."""


class CarbonSendError(CarbonError):
    """Raised when a batch could not be delivered to the collector."""


def sanitize_path(path: str) -> str:
    """Return ``path`` with whitespace runs replaced by underscores."""
    return _WHITESPACE.sub("_", path.strip())


def join_path(prefix: str, name: str) -> str:
    """Join a dot-delimited prefix and metric name."""
    prefix = prefix.strip(".")
    name = name.strip(".")
    if not prefix:
        return name
    return f"{prefix}.{name}"


def format_value(value: float) -> str:
    """Render a number the way the plaintext receiver expects it."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    number = float(value)
    if not math.isfinite(number):
        msg = f"Carbon cannot represent non-finite value {value!r}."
        raise CarbonProtocolError(msg)
    return f"{number:.6f}"


def format_line(path: str, value: float, timestamp: int) -> str:
    """Return one newline-terminated protocol line."""
    clean = sanitize_path(path)
    if not clean:
        msg = "Carbon metric paths must not be empty."
        raise CarbonProtocolError(msg)
    return f"{clean} {format_value(value)} {int(timestamp)}\n"


def parse_line(line: str) -> tuple[str, float, int]:
    """Split a protocol line back into ``(path, value, timestamp)``."""
    parts = line.split()
    if len(parts) != 3:
        msg = f"Malformed Carbon line: {line!r}"
        raise CarbonProtocolError(msg)
    path, raw_value, raw_timestamp = parts
    try:
        return path, float(raw_value), int(raw_timestamp)
    except ValueError as exc:
        msg = f"Malformed Carbon line: {line!r}"
        raise CarbonProtocolError(msg) from exc


def format_batch(datapoints: Iterable[Datapoint], timestamp: int) -> str:
    """Render every datapoint with the shared ``timestamp``."""
    return "".join(format_line(path, value, timestamp) for path, value in datapoints)


def _create_connection(address: tuple[str, int], timeout: float) -> socket.socket:
    return socket.create_connection(address, timeout=timeout)


class CarbonSender:
    """Owns one streaming connection to a Carbon collector.

    The connection is opened lazily by :meth:`send` and thrown away after any
    failure, so the next call starts from a fresh connection. ``send`` never
    retries on its own; scheduling the next attempt is the caller's job.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = 5.0,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        """Configure the collector address and the I/O timeout in seconds."""
        if timeout <= 0:
            msg = "CarbonSender timeout must be greater than zero."
            raise ValueError(msg)
        self._address = (host, int(port))
        self._timeout = timeout
        self._connection_factory = connection_factory or _create_connection
        self._connection: socket.socket | None = None
        self.last_error: BaseException | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Collector ``(host, port)`` pair."""
        return self._address

    @property
    def timeout(self) -> float:
        """Connect and write timeout in seconds."""
        return self._timeout

    @property
    def connected(self) -> bool:
        """Return whether a connection is currently held open."""
        return self._connection is not None

    def send(self, datapoints: Iterable[Datapoint], timestamp: int) -> int:
        """Write ``datapoints`` stamped with ``timestamp``; return the line count.

        Raises:
            CarbonProtocolError: a datapoint cannot be rendered.
            CarbonSendError: connecting or writing failed or timed out.
        """
        points = list(datapoints)
        if not points:
            return 0
        payload = format_batch(points, timestamp).encode("utf-8")
        try:
            connection = self._ensure_connection()
            connection.sendall(payload)
        except OSError as exc:
            self.last_error = exc
            self.close()
            msg = f"Failed to send {len(points)} lines to {self._describe()}: {exc}"
            raise CarbonSendError(msg) from exc
        self.last_error = None
        return len(points)

    def close(self) -> None:
        """Close the connection if one is open."""
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except OSError:
            _LOGGER.debug("Ignoring error while closing %s", self._describe())

    def _ensure_connection(self) -> socket.socket:
        if self._connection is None:
            _LOGGER.debug("Connecting to Carbon at %s", self._describe())
            self._connection = self._connection_factory(self._address, self._timeout)
        return self._connection

    def _describe(self) -> str:
        host, port = self._address
        return f"{host}:{port}"

    def __enter__(self) -> CarbonSender:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


__all__ = [
    "CarbonError",
    "CarbonProtocolError",
    "CarbonSendError",
    "CarbonSender",
    "DEFAULT_PORT",
    "Datapoint",
    "format_batch",
    "format_line",
    "format_value",
    "join_path",
    "parse_line",
    "sanitize_path",
]
