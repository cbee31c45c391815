"""Unit tests for atomic writes and archiving."""

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from webcam_fetch.errors import WriteLocalFileError
from webcam_fetch.webcam.storage import (
    Archiver,
    AtomicWriter,
    archive_name,
    commit,
    discard,
)


# 2024-01-02 03:04:05 UTC
ARCHIVE_MTIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC).timestamp()


class TestAtomicWriter:
    """Tests for AtomicWriter."""

    @pytest.mark.unit
    def test_write_creates_file(self, tmp_path: Path) -> None:
        """Test bytes land in the target and the count is returned."""
        target = tmp_path / "live.jpg"

        written = AtomicWriter().write(target, b"\xff\xd8\xffdata")

        assert written == 7
        assert target.read_bytes() == b"\xff\xd8\xffdata"

    @pytest.mark.unit
    def test_write_leaves_no_temp_file(self, tmp_path: Path) -> None:
        """Test the temporary file is renamed away."""
        target = tmp_path / "live.jpg"

        AtomicWriter().write(target, b"abc")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["live.jpg"]

    @pytest.mark.unit
    def test_write_replaces_existing(self, tmp_path: Path) -> None:
        """Test an existing file is replaced."""
        target = tmp_path / "live.jpg"
        target.write_bytes(b"old")

        AtomicWriter().write(target, b"new content")

        assert target.read_bytes() == b"new content"

    @pytest.mark.unit
    def test_write_into_missing_directory_fails(self, tmp_path: Path) -> None:
        """Test write failures surface as WriteLocalFileError with context."""
        target = tmp_path / "missing" / "live.jpg"

        with pytest.raises(WriteLocalFileError) as exc_info:
            AtomicWriter().write(target, b"abc")

        assert exc_info.value.path == target
        assert exc_info.value.expected == 3
        assert isinstance(exc_info.value, OSError)

    @pytest.mark.unit
    def test_unwritable_temp_path_raises_write_error(self, tmp_path: Path) -> None:
        """Test a temp path that cannot be written or removed is a write error."""
        target = tmp_path / "live.jpg"
        target.write_bytes(b"old")
        (tmp_path / "live.jpg.tmp").mkdir()

        with pytest.raises(WriteLocalFileError) as exc_info:
            AtomicWriter().write(target, b"new")

        assert exc_info.value.path == target
        assert target.read_bytes() == b"old"

    @pytest.mark.unit
    def test_prepare_leaves_target_untouched(self, tmp_path: Path) -> None:
        """Test prepare writes only the temporary file until commit."""
        target = tmp_path / "live.jpg"
        target.write_bytes(b"old")

        temp_path = AtomicWriter().prepare(target, b"new")

        assert temp_path == tmp_path / "live.jpg.tmp"
        assert temp_path.read_bytes() == b"new"
        assert target.read_bytes() == b"old"

        commit(temp_path, target)

        assert target.read_bytes() == b"new"
        assert not temp_path.exists()


class TestCommitAndDiscard:
    """Tests for commit and discard."""

    @pytest.mark.unit
    def test_commit_failure_raises_write_error(self, tmp_path: Path) -> None:
        """Test a failed rename maps to WriteLocalFileError."""
        target = tmp_path / "live.jpg"
        target.mkdir()
        (target / "occupied").write_bytes(b"x")
        temp_path = tmp_path / "live.jpg.tmp"
        temp_path.write_bytes(b"new")

        with pytest.raises(WriteLocalFileError, match="Could not replace"):
            commit(temp_path, target)

        assert not temp_path.exists()

    @pytest.mark.unit
    def test_discard_missing_file(self, tmp_path: Path) -> None:
        """Test discarding a file that does not exist is a no-op."""
        discard(tmp_path / "gone.tmp")

    @pytest.mark.unit
    def test_discard_ignores_undeletable_path(self, tmp_path: Path) -> None:
        """Test discard does not raise when the path cannot be unlinked."""
        blocker = tmp_path / "live.jpg.tmp"
        blocker.mkdir()

        discard(blocker)

        assert blocker.is_dir()


class TestArchiveName:
    """Tests for archive_name."""

    @pytest.mark.unit
    def test_name_uses_mtime(self) -> None:
        """Test <stem>-<YYYYMMDDHHMMSS><suffix> naming."""
        assert archive_name(Path("cams/live.jpg"), ARCHIVE_MTIME) == "live-20240102030405.jpg"

    @pytest.mark.unit
    def test_name_without_suffix(self) -> None:
        """Test files without extension get no trailing dot."""
        assert archive_name(Path("snapshot"), ARCHIVE_MTIME) == "snapshot-20240102030405"


class TestArchiver:
    """Tests for Archiver."""

    @pytest.mark.unit
    def test_archive_moves_file(self, tmp_path: Path) -> None:
        """Test the file is moved, named by its modification time."""
        archive_dir = tmp_path / "archive"
        archive_dir.mkdir()
        source = tmp_path / "live.jpg"
        source.write_bytes(b"previous")
        os.utime(source, (ARCHIVE_MTIME, ARCHIVE_MTIME))

        archived = Archiver(archive_dir).archive(source)

        assert archived == archive_dir / "live-20240102030405.jpg"
        assert archived.read_bytes() == b"previous"
        assert not source.exists()

    @pytest.mark.unit
    def test_archive_dir_missing(self, tmp_path: Path) -> None:
        """Test a missing archive directory is a write error."""
        source = tmp_path / "live.jpg"
        source.write_bytes(b"previous")

        with pytest.raises(WriteLocalFileError, match="not a directory"):
            Archiver(tmp_path / "nope").archive(source)

        assert source.exists()

    @pytest.mark.unit
    def test_archive_source_missing(self, tmp_path: Path) -> None:
        """Test archiving a vanished file is a write error."""
        with pytest.raises(WriteLocalFileError, match="moving failed"):
            Archiver(tmp_path).archive(tmp_path / "gone.jpg")
