"""Tests for PublisherConfig and base path/URL helpers."""

import pytest

from assetpub.config import (
    DEFAULT_EXCLUDE,
    Deployment,
    PublisherConfig,
    make_base_url,
    resolve_base_path,
)
from assetpub.exceptions import ConfigError


class TestMakeBaseUrl:
    def test_plain(self):
        assert make_base_url("cdn.example.com") == "http://cdn.example.com"

    def test_secure_with_path(self):
        assert make_base_url("cdn.example.com", "/assets/", secure=True) == \
            "https://cdn.example.com/assets"


class TestResolveBasePath:
    def test_local_dir(self, tmp_path):
        assert resolve_base_path(str(tmp_path)) == str(tmp_path.resolve())

    def test_remote_unchanged(self):
        assert resolve_base_path("ftp://u:p@host/assets") == "ftp://u:p@host/assets"

    def test_missing_dir(self, tmp_path):
        with pytest.raises(ConfigError):
            resolve_base_path(str(tmp_path / "nope"))

    def test_file_is_not_a_dir(self, tmp_path):
        f = tmp_path / "f"
        f.write_text("x")
        with pytest.raises(ConfigError):
            resolve_base_path(str(f))


class TestPublisherConfig:
    def test_defaults(self, tmp_path):
        cfg = PublisherConfig(path=str(tmp_path), url="http://x/")
        assert isinstance(cfg, Deployment)
        assert cfg.base_path() == str(tmp_path)
        assert cfg.base_url() == "http://x"
        assert cfg.file_mode() is None
        assert cfg.dir_mode() == 0o777
        assert cfg.exclude == DEFAULT_EXCLUDE
        assert cfg.lock_assets is False

    def test_lock_assets(self, tmp_path):
        cfg = PublisherConfig(path=str(tmp_path), url="http://x", lock_path=str(tmp_path / "l"))
        assert cfg.lock_assets is True

    def test_empty_values_rejected(self):
        with pytest.raises(ConfigError):
            PublisherConfig(path="", url="http://x")
        with pytest.raises(ConfigError):
            PublisherConfig(path="/tmp", url="")


class TestFromEnv:
    def test_full_environment(self):
        env = {
            "ASSETPUB_BASE_PATH": "/var/www/assets",
            "ASSETPUB_BASE_URL": "https://example.com/assets",
            "ASSETPUB_FILE_MODE": "644",
            "ASSETPUB_DIR_MODE": "755",
            "ASSETPUB_EXCLUDE": ".svn, .git,/tmp",
            "ASSETPUB_FILE_TYPES": "js,css",
            "ASSETPUB_LOCK_PATH": "/var/run/assetpub",
            "ASSETPUB_LINK": "yes",
            "ASSETPUB_HASH_SALT": "1.1.8",
            "ASSETPUB_FTP_TIMEOUT": "12.5",
        }
        cfg = PublisherConfig.from_env(env)
        assert cfg.path == "/var/www/assets"
        assert cfg.url == "https://example.com/assets"
        assert cfg.new_file_mode == 0o644
        assert cfg.new_dir_mode == 0o755
        assert cfg.exclude == (".svn", ".git", "/tmp")
        assert cfg.file_types == ("js", "css")
        assert cfg.lock_path == "/var/run/assetpub"
        assert cfg.link_assets is True
        assert cfg.hash_salt == "1.1.8"
        assert cfg.ftp_timeout == 12.5

    def test_url_from_host(self):
        env = {
            "ASSETPUB_BASE_PATH": "/srv",
            "ASSETPUB_HOST": "static.example.com",
            "ASSETPUB_URL_PATH": "assets",
            "ASSETPUB_SECURE": "1",
        }
        assert PublisherConfig.from_env(env).url == "https://static.example.com/assets"

    def test_overrides_win(self):
        env = {"ASSETPUB_BASE_PATH": "/srv", "ASSETPUB_BASE_URL": "http://a"}
        cfg = PublisherConfig.from_env(env, url="http://b", lock_path=None)
        assert cfg.url == "http://b"
        assert cfg.lock_path is None

    def test_missing_base_path(self):
        with pytest.raises(ConfigError, match="base path"):
            PublisherConfig.from_env({"ASSETPUB_BASE_URL": "http://a"})

    def test_missing_url(self):
        with pytest.raises(ConfigError, match="base URL"):
            PublisherConfig.from_env({"ASSETPUB_BASE_PATH": "/srv"})

    def test_bad_mode(self):
        env = {"ASSETPUB_BASE_PATH": "/srv", "ASSETPUB_BASE_URL": "http://a",
               "ASSETPUB_FILE_MODE": "rw-r--r--"}
        with pytest.raises(ConfigError):
            PublisherConfig.from_env(env)
