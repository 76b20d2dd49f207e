"""Tests for LockManager."""

import os

import pytest

from assetpub.exceptions import LockError
from assetpub.lock import LockManager


class TestLockManager:
    def test_unlocked_by_default(self, tmp_path):
        locks = LockManager(tmp_path / "locks")
        assert locks.is_locked("app.css") is False

    def test_lock_creates_directory_and_marker(self, tmp_path):
        locks = LockManager(tmp_path / "locks")
        locks.lock("app.css")
        assert (tmp_path / "locks" / "app.css.lock").is_file()
        assert locks.is_locked("app.css") is True

    def test_lock_touches_existing_marker(self, tmp_path):
        locks = LockManager(tmp_path)
        locks.lock("k")
        marker = locks.marker("k")
        os.utime(marker, (1000, 1000))
        locks.lock("k")
        assert os.stat(marker).st_mtime > 1000

    def test_lock_failure_raises_lock_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        locks = LockManager(blocker)
        with pytest.raises(LockError):
            locks.lock("k")

    def test_ensure_dir_failure_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with caplog.at_level("WARNING", logger="assetpub"):
            LockManager(blocker / "sub").ensure_dir()
        assert "cannot create lock directory" in caplog.text

    def test_list(self, tmp_path):
        locks = LockManager(tmp_path / "locks")
        assert locks.list() == []
        locks.lock("b.js")
        locks.lock("1a2b3c")
        (tmp_path / "locks" / "stray.txt").write_text("")
        assert locks.list() == ["1a2b3c", "b.js"]
