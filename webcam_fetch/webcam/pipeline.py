"""Fetch pipeline: download, validate, archive, commit."""

import time
from pathlib import Path

import structlog

from webcam_fetch.errors import InvalidFileDataError, WriteLocalFileError
from webcam_fetch.fetch.client import HttpClient
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam.constants import COMPONENT_PIPELINE, JPEG_SOI_MARKER
from webcam_fetch.webcam.storage import Archiver, AtomicWriter, commit, discard


def is_jpeg(data: bytes) -> bool:
    """Check whether ``data`` starts with the JPEG start-of-image marker."""
    return data[: len(JPEG_SOI_MARKER)] == JPEG_SOI_MARKER


class FetchPipeline:
    """Retrieves the remote image and commits it to the local target.

    The payload is validated and written to a temporary file before the
    current local copy is touched, so neither a bad download nor a failed
    write loses it. When an archive directory is configured, the current
    copy is moved there right before the new one replaces it.
    """

    def __init__(
        self,
        path: Path,
        client: HttpClient,
        archiver: Archiver | None = None,
        writer: AtomicWriter | None = None,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            path: Local target file.
            client: HTTP client for the download.
            archiver: Archiver for the previous copy, None to overwrite.
            writer: Atomic writer, defaults to a new one.
            log: Bound logger, defaults to a no-op logger.
        """
        self._path = path
        self._client = client
        self._archiver = archiver
        log = log or get_null_logger()
        self._writer = writer or AtomicWriter(log)
        self._log = log.bind(component=COMPONENT_PIPELINE, path=str(path))

    def run(self) -> Path | None:
        """Download, validate and store the remote image.

        Returns:
            Path of the archived previous copy, or None if nothing was archived.

        Raises:
            httpx.TransportError: On network failure.
            ResponseSizeExceededError: If the payload is too large.
            InvalidFileDataError: If the payload is not a JPEG.
            WriteLocalFileError: If archiving or writing fails.
        """
        start_time_ns = time.perf_counter_ns()

        response = self._client.get()
        data = response.body_bytes

        if not is_jpeg(data):
            self._log.warning(
                "invalid_payload",
                status_code=response.status_code,
                bytes=len(data),
                head=data[:8].hex(),
            )
            msg = (
                "The retrieved data is not a valid jpeg! "
                f"(status {response.status_code}, {len(data)} bytes)"
            )
            raise InvalidFileDataError(msg)

        # The current copy stays in place until the new bytes are on disk
        temp_path = self._writer.prepare(self._path, data)

        archived: Path | None = None
        if self._archiver is not None and self._path.exists():
            try:
                archived = self._archiver.archive(self._path)
            except WriteLocalFileError:
                discard(temp_path)
                raise

        commit(temp_path, self._path)
        written = len(data)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._log.info(
            "fetch_complete",
            status_code=response.status_code,
            bytes=written,
            archived=str(archived) if archived else None,
            duration_ms=round(duration_ms, 2),
        )
        return archived
