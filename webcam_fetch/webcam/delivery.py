"""Delivery of the cached image to HTTP clients, and cleanup."""

import hashlib
from email.utils import formatdate
from pathlib import Path
from typing import BinaryIO, Protocol

import structlog

from webcam_fetch.errors import (
    CannotSendError,
    LocalFileNotFoundError,
    ReadLocalFileError,
)
from webcam_fetch.fetch.constants import HTTP_STATUS_OK
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam.constants import (
    CACHE_CONTROL_PUBLIC,
    COMPONENT_DELIVERY,
    CONTENT_TYPE_JPEG,
)
from webcam_fetch.webcam.models import ImageDelivery


class ResponseWriter(Protocol):
    """Client connection the image is written to.

    ``http.server.BaseHTTPRequestHandler`` satisfies this protocol.
    """

    wfile: BinaryIO

    def send_response(self, code: int, message: str | None = None) -> None: ...

    def send_header(self, keyword: str, value: str) -> None: ...

    def end_headers(self) -> None: ...


def compute_etag(mtime: float, path: Path) -> str:
    """Compute the quoted ETag for a cached file.

    Args:
        mtime: Modification time (epoch seconds).
        path: Local file path.

    Returns:
        Quoted md5 hex digest of the integer mtime followed by the path.
    """
    digest = hashlib.md5(f"{int(mtime)}{path}".encode(), usedforsecurity=False)
    return f'"{digest.hexdigest()}"'


def build_delivery(path: Path) -> ImageDelivery:
    """Read the cached image and compute its response headers.

    Args:
        path: Local file path.

    Returns:
        Headers and body for the client.

    Raises:
        LocalFileNotFoundError: If the file does not exist.
        ReadLocalFileError: If the file is empty or unreadable.
    """
    if not path.exists():
        msg = f"Local file {path} does not exist!"
        raise LocalFileNotFoundError(msg)

    try:
        data = path.read_bytes()
        mtime = path.stat().st_mtime
    except OSError as e:
        msg = f"Could not open local file {path} for reading: {e}"
        raise ReadLocalFileError(msg) from e

    if not data:
        msg = f"Local file {path} is empty!"
        raise ReadLocalFileError(msg)

    headers = {
        "Content-Type": CONTENT_TYPE_JPEG,
        "Content-Length": str(len(data)),
        "Last-Modified": formatdate(mtime, usegmt=True),
        "Cache-Control": CACHE_CONTROL_PUBLIC,
        "ETag": compute_etag(mtime, path),
    }
    return ImageDelivery(path=path, headers=headers, body=data)


def send_to_client(
    path: Path,
    writer: ResponseWriter | None,
    log: structlog.typing.FilteringBoundLogger | None = None,
) -> ImageDelivery:
    """Send the cached image with cache-friendly headers.

    Headers are emitted before the payload.

    Args:
        path: Local file path.
        writer: Client connection; None in a headless context.
        log: Bound logger, defaults to a no-op logger.

    Returns:
        What was sent.

    Raises:
        CannotSendError: If there is no client connection.
        LocalFileNotFoundError: If the file does not exist.
        ReadLocalFileError: If the file is empty or unreadable.
    """
    if writer is None:
        msg = "Cannot send the image, there is no client connection!"
        raise CannotSendError(msg)

    delivery = build_delivery(path)

    writer.send_response(HTTP_STATUS_OK)
    for name, value in delivery.headers.items():
        writer.send_header(name, value)
    writer.end_headers()
    writer.wfile.write(delivery.body)

    (log or get_null_logger()).bind(component=COMPONENT_DELIVERY).info(
        "image_sent",
        path=str(path),
        bytes=delivery.content_length,
        etag=delivery.headers["ETag"],
    )
    return delivery


def remove_local_file(
    path: Path,
    log: structlog.typing.FilteringBoundLogger | None = None,
) -> bool:
    """Delete the local file if present.

    Never raises; a file that cannot be removed is logged and reported
    as not removed.

    Args:
        path: Local file path.
        log: Bound logger, defaults to a no-op logger.

    Returns:
        True if a file was removed.
    """
    log = (log or get_null_logger()).bind(component=COMPONENT_DELIVERY, path=str(path))
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        log.warning("local_file_remove_failed", error=str(e))
        return False
    log.info("local_file_removed")
    return True
