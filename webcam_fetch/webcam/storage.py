"""Local file storage for the cached webcam image.

Provides atomic file writing, so readers never see a partially written
image, and archiving of the previous copy.
"""

import contextlib
import hashlib
import shutil
from datetime import UTC, datetime
from pathlib import Path

import structlog

from webcam_fetch.errors import WriteLocalFileError
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam.constants import (
    ARCHIVE_TIMESTAMP_FORMAT,
    COMPONENT_STORAGE,
    TEMP_SUFFIX,
)


class AtomicWriter:
    """Provides atomic file writing operations.

    Writes content to a temporary file first, then renames to the final path.
    This ensures that readers never see partially written files. ``prepare``
    and ``commit`` can be called separately when something has to happen
    between the two, such as archiving the file about to be replaced.
    """

    def __init__(self, log: structlog.typing.FilteringBoundLogger | None = None) -> None:
        """Initialize the atomic writer.

        Args:
            log: Bound logger, defaults to a no-op logger.
        """
        self._log = (log or get_null_logger()).bind(component=COMPONENT_STORAGE)

    def write(self, path: Path, content: bytes) -> int:
        """Write bytes to file with atomic semantics.

        Args:
            path: Target file path.
            content: Bytes to write.

        Returns:
            Number of bytes written.

        Raises:
            WriteLocalFileError: If writing fails or the byte count does not
                match the content length.
        """
        temp_path = self.prepare(path, content)
        commit(temp_path, path)
        return len(content)

    def prepare(self, path: Path, content: bytes) -> Path:
        """Write bytes to the temporary sibling of ``path``.

        ``path`` itself is left untouched until ``commit`` is called.

        Args:
            path: Target file path.
            content: Bytes to write.

        Returns:
            Path of the completed temporary file.

        Raises:
            WriteLocalFileError: If writing fails or the byte count does not
                match the content length. No temporary file is left behind.
        """
        temp_path = temp_path_for(path)
        expected = len(content)

        try:
            with temp_path.open("wb") as fh:
                written = fh.write(content)
                fh.flush()
        except OSError as e:
            discard(temp_path)
            msg = f"Could not write the data to local file {path}: {e}"
            raise WriteLocalFileError(msg, path=path, expected=expected) from e

        if written != expected:
            discard(temp_path)
            msg = (
                f"Could not write the data to local file {path}: "
                f"wrote {written} of {expected} bytes"
            )
            raise WriteLocalFileError(
                msg, path=path, expected=expected, actual=written
            )

        self._log.debug(
            "file_written",
            path=str(path),
            bytes=written,
            sha256=hashlib.sha256(content).hexdigest()[:12],
        )
        return temp_path


def temp_path_for(path: Path) -> Path:
    """Get the temporary sibling used while writing ``path``."""
    return path.with_name(path.name + TEMP_SUFFIX)


def discard(temp_path: Path) -> None:
    """Remove a temporary file, if it can be removed at all."""
    # A failed cleanup must not hide the write error being raised
    with contextlib.suppress(OSError):
        temp_path.unlink(missing_ok=True)


def commit(temp_path: Path, path: Path) -> None:
    """Move a fully written temporary file over its final path.

    Args:
        temp_path: Completed temporary file.
        path: Final file path.

    Raises:
        WriteLocalFileError: If the rename fails.
    """
    try:
        temp_path.replace(path)
    except OSError as e:
        discard(temp_path)
        msg = f"Could not replace local file {path}: {e}"
        raise WriteLocalFileError(msg, path=path) from e


def archive_name(path: Path, mtime: float) -> str:
    """Build the archive file name for a cached image.

    Args:
        path: Current local file.
        mtime: Modification time of the local file (epoch seconds).

    Returns:
        ``<stem>-<YYYYMMDDHHMMSS><suffix>``, timestamp in UTC.
    """
    stamp = datetime.fromtimestamp(mtime, tz=UTC).strftime(ARCHIVE_TIMESTAMP_FORMAT)
    return f"{path.stem}-{stamp}{path.suffix}"


class Archiver:
    """Moves the current local file into an archive directory."""

    def __init__(
        self,
        archive_dir: Path,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the archiver.

        Args:
            archive_dir: Existing directory receiving archived copies.
            log: Bound logger, defaults to a no-op logger.
        """
        self._archive_dir = archive_dir
        self._log = (log or get_null_logger()).bind(
            component=COMPONENT_STORAGE, archive_dir=str(archive_dir)
        )

    @property
    def archive_dir(self) -> Path:
        """Get the archive directory."""
        return self._archive_dir

    def archive(self, path: Path) -> Path:
        """Move ``path`` into the archive directory.

        The archive name is derived from the file's own modification time.

        Args:
            path: Existing local file.

        Returns:
            Path of the archived file.

        Raises:
            WriteLocalFileError: If the archive directory does not exist or
                the move fails.
        """
        if not self._archive_dir.is_dir():
            msg = (
                "Could not archive local file, archive path "
                f"{self._archive_dir} is not a directory!"
            )
            raise WriteLocalFileError(msg, path=self._archive_dir)

        try:
            mtime = path.stat().st_mtime
            target = self._archive_dir / archive_name(path, mtime)
            shutil.move(path, target)
        except OSError as e:
            msg = f"Could not archive local file {path}, moving failed: {e}"
            raise WriteLocalFileError(msg, path=path) from e

        self._log.info("file_archived", source=str(path), archived=str(target))
        return target
