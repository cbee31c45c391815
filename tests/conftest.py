"""Shared fixtures: JPEG payloads and a local webcam HTTP server."""

import socket
import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from io import BytesIO

import pytest
import structlog
from PIL import Image

from webcam_fetch.fetch.metrics import FetchMetrics


def make_jpeg(width: int = 320, height: int = 240, color: str = "red") -> bytes:
    """Encode a solid-colour JPEG.

    Args:
        width: Image width.
        height: Image height.
        color: Fill colour.

    Returns:
        JPEG bytes.
    """
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
    return buffer.getvalue()


def closed_port_url() -> str:
    """Get a URL on a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/cam/live.jpg"


@dataclass
class RemoteImage:
    """What the local webcam server answers with."""

    body: bytes = b""
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    requests: list[str] = field(default_factory=list)

    def count(self, method: str) -> int:
        return self.requests.count(method)


class WebcamServer(HTTPServer):
    """HTTPServer carrying the configurable remote image."""

    remote: RemoteImage

    def url(self, path: str = "/cam/live.jpg") -> str:
        """Get the URL for a path on this server."""
        host, port = self.server_address[0], self.server_address[1]
        if isinstance(host, bytes):
            host = host.decode("utf-8")
        return f"http://{host}:{port}{path}"


class WebcamHandler(BaseHTTPRequestHandler):
    """Serves ``server.remote`` for HEAD and GET."""

    server: WebcamServer

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def _send_head(self) -> None:
        remote = self.server.remote
        self.send_response(remote.status)
        self.send_header("Content-Type", "image/jpeg")
        self.send_header("Content-Length", str(len(remote.body)))
        for name, value in remote.headers.items():
            self.send_header(name, value)
        self.end_headers()

    def do_HEAD(self) -> None:  # noqa: N802
        """Answer with headers only."""
        self.server.remote.requests.append("HEAD")
        self._send_head()

    def do_GET(self) -> None:  # noqa: N802
        """Answer with headers and body."""
        self.server.remote.requests.append("GET")
        self._send_head()
        self.wfile.write(self.server.remote.body)


@pytest.fixture(autouse=True)
def reset_fetch_metrics() -> Generator[None]:
    """Start every test with fresh fetch metrics."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


@pytest.fixture
def jpeg_factory() -> Callable[..., bytes]:
    """Provide the JPEG encoder to tests."""
    return make_jpeg


@pytest.fixture
def webcam_server() -> Generator[WebcamServer]:
    """Start a local HTTP server serving a 320x240 JPEG."""
    server = WebcamServer(("127.0.0.1", 0), WebcamHandler)
    server.remote = RemoteImage(body=make_jpeg())
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None]:
    """Undo logging configuration done by CLI commands."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
