"""Shared fixtures for the carbon-metrics test suite."""

from __future__ import annotations

import queue
import socket
import socketserver
import threading
from collections.abc import Iterator

import pytest


class _LineCollector(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        for raw in self.rfile:
            self.server.lines.put(raw.decode("utf-8"))  # type: ignore[attr-defined]


class CarbonServer(socketserver.ThreadingTCPServer):
    """Loopback plaintext receiver collecting every line it is sent."""

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _LineCollector)
        self.lines: queue.Queue[str] = queue.Queue()

    @property
    def port(self) -> int:
        return int(self.server_address[1])

    def take(self, count: int, timeout: float = 5.0) -> list[str]:
        return [self.lines.get(timeout=timeout) for _ in range(count)]


@pytest.fixture
def carbon_server() -> Iterator[CarbonServer]:
    server = CarbonServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def closed_port() -> int:
    """Return a loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return int(probe.getsockname()[1])
