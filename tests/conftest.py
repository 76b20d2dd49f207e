"""Shared fixtures for assetpub tests."""

import os

import pytest
from click.testing import CliRunner

from assetpub.config import PublisherConfig
from assetpub.exceptions import TransferError
from assetpub.publisher import AssetPublisher
from assetpub.transport import LocalTransport

BASE_URL = "http://assets.example.com/pub"


class SpyTransport(LocalTransport):
    """LocalTransport that records every call.

    *fail_on* is a set of file names whose copy raises TransferError.
    """

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)

    @property
    def copied(self):
        return [c[3] for c in self.calls if c[0] == "copy_file"]

    def copy_file(self, src_file, dest_dir, file_name):
        self._record("copy_file", src_file, dest_dir, file_name)
        if file_name in self.fail_on:
            raise TransferError(f"refused {file_name}", file_name)
        super().copy_file(src_file, dest_dir, file_name)

    def makedirs(self, dest_dir, mode=None):
        self._record("makedirs", dest_dir)
        super().makedirs(dest_dir, mode)

    def is_dir(self, dest_dir):
        self._record("is_dir", dest_dir)
        return super().is_dir(dest_dir)

    def mtime(self, dest_file):
        self._record("mtime", dest_file)
        return super().mtime(dest_file)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def public_dir(tmp_path):
    """An empty, writable destination root."""
    p = tmp_path / "public"
    p.mkdir()
    return p


@pytest.fixture
def site(tmp_path):
    """A source tree for directory publishing.

    Tree:
        app.css, app.js, README,
        img/logo.png, img/icons/x.png,
        .svn/entries, a/b/skip.txt, a/bc/keep.txt
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "app.css").write_text("body {}")
    (root / "app.js").write_text("var x;")
    (root / "README").write_text("readme")

    img = root / "img"
    img.mkdir()
    (img / "logo.png").write_bytes(b"\x89PNG")
    icons = img / "icons"
    icons.mkdir()
    (icons / "x.png").write_bytes(b"\x89PNG")

    svn = root / ".svn"
    svn.mkdir()
    (svn / "entries").write_text("svn")

    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "b" / "skip.txt").write_text("skip")
    (root / "a" / "bc").mkdir()
    (root / "a" / "bc" / "keep.txt").write_text("keep")
    return root


@pytest.fixture
def spy():
    return SpyTransport()


@pytest.fixture
def spy_factory():
    """Build a SpyTransport, e.g. ``spy_factory(fail_on={"c.txt"})``."""
    return SpyTransport


@pytest.fixture
def config(public_dir):
    return PublisherConfig(path=str(public_dir), url=BASE_URL)


@pytest.fixture
def make_publisher(public_dir):
    """Factory: ``make_publisher(transport=None, **options)``."""
    def _make(transport=None, **options):
        cfg = PublisherConfig(path=str(public_dir), url=BASE_URL)
        return AssetPublisher.from_config(cfg, transport=transport, **options)
    return _make


@pytest.fixture
def touch_later():
    """Return a function moving a path's mtime *seconds* into the future."""
    def _touch(path, seconds=10):
        t = os.stat(path).st_mtime + seconds
        os.utime(path, (t, t))
    return _touch
