"""
Unit tests for local staging and cleanup.
"""

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from video_processing_service.domain.models import StagingRole
from video_processing_service.infrastructure.storage import LocalCleanup, StagingArea


class TestStagingArea:
    """Test StagingArea."""

    def test_creates_missing_roots(self, tmp_path):
        """Test both roots and their parents are created."""
        staging = StagingArea(tmp_path / "a" / "raw", tmp_path / "b" / "processed")

        staging.ensure_directories()

        assert staging.raw_dir.is_dir()
        assert staging.processed_dir.is_dir()

    def test_existing_roots_untouched(self, staging):
        """Test ensure_directories is idempotent and keeps contents."""
        staging.ensure_directories()
        keep = staging.raw_dir / "keep.mp4"
        keep.write_bytes(b"x")

        staging.ensure_directories()

        assert keep.read_bytes() == b"x"

    def test_unwritable_parent_raises(self, tmp_path):
        """Test a root that cannot be created raises OSError."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        staging = StagingArea(blocker / "raw", tmp_path / "processed")

        with pytest.raises(OSError):
            staging.ensure_directories()

    def test_resolve(self, staging):
        """Test resolve joins onto the right root without touching disk."""
        raw = staging.resolve(StagingRole.RAW, "j-clip.mp4")
        processed = staging.resolve("processed", "j-processed-clip.mp4")

        assert raw == staging.raw_dir / "j-clip.mp4"
        assert processed == staging.processed_dir / "j-processed-clip.mp4"
        assert not staging.raw_dir.exists()

    def test_unknown_role(self, staging):
        with pytest.raises(ValueError):
            staging.resolve("archive", "x")


class TestLocalCleanup:
    """Test LocalCleanup."""

    def test_removes_existing(self, tmp_path):
        """Test existing files are deleted."""
        a = tmp_path / "a.mp4"
        b = tmp_path / "b.mp4"
        a.write_bytes(b"a")
        b.write_bytes(b"b")

        report = LocalCleanup().cleanup([a, b])

        assert report.removed == [a, b]
        assert report.ok
        assert not a.exists() and not b.exists()

    def test_missing_is_noop(self, tmp_path):
        """Test absent paths are not an error."""
        report = LocalCleanup().cleanup([tmp_path / "never-written.mp4"])

        assert report.missing == [tmp_path / "never-written.mp4"]
        assert report.ok

    def test_duplicates_collapsed(self, tmp_path):
        a = tmp_path / "a.mp4"
        a.write_bytes(b"a")

        report = LocalCleanup().cleanup([a, str(a)])

        assert report.removed == [a]
        assert report.missing == []

    def test_failure_does_not_stop_remaining(self, tmp_path):
        """Test one undeletable path does not prevent the others."""
        locked = tmp_path / "locked.mp4"
        other = tmp_path / "other.mp4"
        locked.write_bytes(b"x")
        other.write_bytes(b"y")

        real_unlink = os.unlink

        def fake_unlink(path):
            if Path(path) == locked:
                raise PermissionError(errno.EACCES, "Permission denied", str(path))
            real_unlink(path)

        with patch('video_processing_service.infrastructure.storage.cleanup.os.unlink',
                   side_effect=fake_unlink):
            report = LocalCleanup().cleanup([locked, other])

        assert not report.ok
        assert locked in report.failed
        assert "Permission denied" in report.failed[locked]
        assert report.removed == [other]
        assert not other.exists()
