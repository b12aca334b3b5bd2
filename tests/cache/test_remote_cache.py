"""
Unit tests for remote cache backends.

Tests cover:
- Key validation
- Shared-directory backend save/restore
- HTTP backend with mocked responses
- Backend detection from settings
"""

from dataclasses import replace
from unittest.mock import patch

import pytest
import responses

from binkit.cache.remote import (
    DirectoryRemoteCache,
    HttpRemoteCache,
    detect_remote_cache,
    validate_key,
)
from binkit.core.exceptions import CacheError
from tests.fixtures.archives import tar_gz_bytes

BASE_URL = "https://cache.example.com/bin"
KEY = "undock-dl-bin-0.7.0-linux-x64"


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "bin" / "0.7.0" / "linux-x64"
    path.mkdir(parents=True)
    (path / "undock").write_bytes(b"binary")
    return path


class TestValidateKey:
    """Tests for validate_key()."""

    def test_valid(self):
        validate_key(KEY)

    @pytest.mark.parametrize("key", ["", "a,b", "a/b", "x" * 513])
    def test_invalid(self, key):
        with pytest.raises(CacheError):
            validate_key(key)


class TestDirectoryRemoteCache:
    """Tests for DirectoryRemoteCache."""

    def test_availability(self, remote_cache_root, tmp_path):
        """Test backend is available only when its directory exists."""
        assert DirectoryRemoteCache(remote_cache_root).is_available()
        assert not DirectoryRemoteCache(tmp_path / "missing").is_available()

    def test_miss(self, remote_cache_root, cache_dir):
        """Test unknown key misses."""
        assert DirectoryRemoteCache(remote_cache_root).restore([cache_dir], KEY) is False

    def test_save_then_restore(self, remote_cache_root, cache_dir):
        """Test restore brings back saved content in place."""
        remote = DirectoryRemoteCache(remote_cache_root)
        remote.save([cache_dir], KEY)
        assert (remote_cache_root / f"{KEY}.tar.gz").is_file()

        (cache_dir / "undock").unlink()

        assert remote.restore([cache_dir], KEY) is True
        assert (cache_dir / "undock").read_bytes() == b"binary"

    def test_restore_into_other_runner_directory(self, remote_cache_root, cache_dir, tmp_path):
        """Test an entry restores into the requested path, not where it was saved."""
        remote = DirectoryRemoteCache(remote_cache_root)
        remote.save([cache_dir], KEY)
        other = tmp_path / "other-home" / ".bin" / "0.7.0" / "linux-x64"

        assert remote.restore([other], KEY) is True
        assert (other / "undock").read_bytes() == b"binary"

    def test_save_staging_failure(self, remote_cache_root, cache_dir):
        """Test an unwritable share raises CacheError."""
        with patch("tempfile.TemporaryDirectory", side_effect=PermissionError("read-only share")):
            with pytest.raises(CacheError, match="read-only share"):
                DirectoryRemoteCache(remote_cache_root).save([cache_dir], KEY)

    def test_corrupt_entry(self, remote_cache_root, cache_dir):
        """Test corrupt archive raises CacheError."""
        (remote_cache_root / f"{KEY}.tar.gz").write_bytes(b"garbage")

        with pytest.raises(CacheError):
            DirectoryRemoteCache(remote_cache_root).restore([cache_dir], KEY)


class TestHttpRemoteCache:
    """Tests for HttpRemoteCache."""

    def test_empty_base_url(self):
        with pytest.raises(ValueError):
            HttpRemoteCache("")

    @responses.activate
    def test_miss_on_404(self, cache_dir):
        """Test 404 is a miss."""
        responses.add(responses.GET, f"{BASE_URL}/{KEY}.tar.gz", status=404)

        assert HttpRemoteCache(BASE_URL).restore([cache_dir], KEY) is False

    @responses.activate
    def test_restore_hit(self, cache_dir):
        """Test restored archive is unpacked into place."""
        body = tar_gz_bytes({"0/undock": b"remote binary"})
        responses.add(responses.GET, f"{BASE_URL}/{KEY}.tar.gz", body=body, status=200)

        assert HttpRemoteCache(BASE_URL).restore([cache_dir], KEY) is True
        assert (cache_dir / "undock").read_bytes() == b"remote binary"

    @responses.activate
    def test_restore_server_error(self, cache_dir):
        """Test 5xx raises CacheError."""
        responses.add(responses.GET, f"{BASE_URL}/{KEY}.tar.gz", status=500)

        with pytest.raises(CacheError, match="HTTP 500"):
            HttpRemoteCache(BASE_URL).restore([cache_dir], KEY)

    @responses.activate
    def test_save_uploads_with_token(self, cache_dir):
        """Test save PUTs the archive with a bearer token."""
        responses.add(responses.PUT, f"{BASE_URL}/{KEY}.tar.gz", status=201)

        HttpRemoteCache(BASE_URL + "/", token="s3cr3t").save([cache_dir], KEY)

        request = responses.calls[0].request
        assert request.headers["Authorization"] == "Bearer s3cr3t"

    @responses.activate
    def test_save_rejected(self, cache_dir):
        """Test upload failure raises CacheError."""
        responses.add(responses.PUT, f"{BASE_URL}/{KEY}.tar.gz", status=403)

        with pytest.raises(CacheError, match="HTTP 403"):
            HttpRemoteCache(BASE_URL).save([cache_dir], KEY)


class TestDetectRemoteCache:
    """Tests for detect_remote_cache()."""

    def test_none_configured(self, settings):
        assert detect_remote_cache(settings) is None

    def test_directory_backend(self, settings, remote_cache_root):
        remote = detect_remote_cache(replace(settings, remote_cache_dir=remote_cache_root))
        assert isinstance(remote, DirectoryRemoteCache)

    def test_directory_backend_unavailable(self, settings, tmp_path):
        """Test missing shared directory means no backend."""
        assert detect_remote_cache(replace(settings, remote_cache_dir=tmp_path / "gone")) is None

    def test_http_backend_preferred(self, settings, remote_cache_root):
        remote = detect_remote_cache(
            replace(settings, remote_cache_url=BASE_URL, remote_cache_dir=remote_cache_root)
        )
        assert isinstance(remote, HttpRemoteCache)

    def test_disabled(self, settings):
        remote = detect_remote_cache(
            replace(settings, remote_cache_url=BASE_URL, remote_cache_disabled=True)
        )
        assert remote is None
