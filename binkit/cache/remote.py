"""
Remote cache backends for persisting binaries across CI runners.

A remote cache stores a set of directories under an opaque key, as one
gzip-compressed tarball per key. Two backends are provided:

- **DirectoryRemoteCache**: a shared directory (network mount, cache volume)
- **HttpRemoteCache**: an HTTP server accepting GET / PUT of
  ``{base_url}/{key}.tar.gz``

Usage:
    from binkit.cache.remote import detect_remote_cache

    remote = detect_remote_cache(settings)
    if remote is not None and remote.restore([cache_dir], key):
        ...

Absence of a backend is not an error: ``detect_remote_cache`` returns None
and callers fall back to the hosted tool cache only.
"""

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

import requests
from requests.exceptions import RequestException

from binkit.config.settings import Settings
from binkit.core.download import create_session
from binkit.core.exceptions import CacheError, FileSystemError
from binkit.core.filesystem import create_tar_gz, ensure_directory, restore_tar_gz

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 512

PathLike = Union[str, Path]


def validate_key(key: str) -> None:
    """
    Validate a remote cache key.

    Raises:
        CacheError: If the key is empty, too long, or contains separators
    """
    if not key:
        raise CacheError("Cache key cannot be empty")
    if len(key) > MAX_KEY_LENGTH:
        raise CacheError(
            f"Key validation failed: {key} cannot be larger than {MAX_KEY_LENGTH} characters"
        )
    if any(c in key for c in (",", "/", "\\")):
        raise CacheError(f"Key validation failed: {key} cannot contain ',', '/' or '\\'")


class RemoteCache(ABC):
    """Abstract interface for job-spanning cache services."""

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check whether the backend can be used from this process.

        Returns:
            True if restore/save may be attempted
        """
        pass

    @abstractmethod
    def restore(self, paths: Sequence[PathLike], key: str) -> bool:
        """
        Restore previously saved paths.

        Args:
            paths: Directories that were saved under key
            key: Cache key

        Returns:
            True on a hit, False on a miss

        Raises:
            CacheError: If the backend fails
        """
        pass

    @abstractmethod
    def save(self, paths: Sequence[PathLike], key: str) -> None:
        """
        Save paths under key.

        Raises:
            CacheError: If the backend fails
        """
        pass


class DirectoryRemoteCache(RemoteCache):
    """
    Remote cache stored in a shared directory.

    Attributes:
        root: Directory holding one ``{key}.tar.gz`` per entry
    """

    def __init__(self, root: PathLike):
        self.root = Path(root)

    def _archive_path(self, key: str) -> Path:
        return self.root / f"{key}.tar.gz"

    def is_available(self) -> bool:
        return self.root.is_dir()

    def restore(self, paths: Sequence[PathLike], key: str) -> bool:
        validate_key(key)
        archive = self._archive_path(key)
        if not archive.is_file():
            logger.debug(f"Cache not found for key {key} in {self.root}")
            return False

        try:
            restore_tar_gz(archive, paths)
        except Exception as e:
            raise CacheError(f"Failed to restore {key} from {archive}: {e}") from e

        logger.debug(f"Restored {key} from {archive}")
        return True

    def save(self, paths: Sequence[PathLike], key: str) -> None:
        validate_key(key)
        archive = self._archive_path(key)

        try:
            ensure_directory(self.root)
            with tempfile.TemporaryDirectory(dir=self.root) as tmp:
                staged = Path(tmp) / archive.name
                create_tar_gz(staged, paths)
                shutil.move(str(staged), str(archive))
        except Exception as e:
            raise CacheError(f"Failed to save {key} to {archive}: {e}") from e

        logger.debug(f"Saved {key} to {archive}")


class HttpRemoteCache(RemoteCache):
    """
    Remote cache served over HTTP.

    Entries are fetched with ``GET {base_url}/{key}.tar.gz`` (404 is a miss)
    and uploaded with ``PUT`` to the same URL.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        if not base_url:
            raise ValueError("base_url cannot be empty")

        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    def _url(self, key: str) -> str:
        return f"{self.base_url}/{key}.tar.gz"

    def is_available(self) -> bool:
        return bool(self.base_url)

    def restore(self, paths: Sequence[PathLike], key: str) -> bool:
        validate_key(key)
        url = self._url(key)

        try:
            response = self.session.get(
                url, headers=self._headers, stream=True, timeout=self.timeout
            )
        except RequestException as e:
            raise CacheError(f"Failed to restore {key} from {url}: {e}") from e

        with response:
            if response.status_code == 404:
                logger.debug(f"Cache not found for key {key} at {url}")
                return False
            if response.status_code >= 400:
                raise CacheError(
                    f"Failed to restore {key} from {url}: HTTP {response.status_code}"
                )

            try:
                with tempfile.TemporaryDirectory() as tmp:
                    archive = Path(tmp) / "cache.tar.gz"
                    with open(archive, "wb") as f:
                        for chunk in response.iter_content(chunk_size=8192):
                            if chunk:
                                f.write(chunk)
                    restore_tar_gz(archive, paths)
            except Exception as e:
                raise CacheError(f"Failed to restore {key} from {url}: {e}") from e

        logger.debug(f"Restored {key} from {url}")
        return True

    def save(self, paths: Sequence[PathLike], key: str) -> None:
        validate_key(key)
        url = self._url(key)

        try:
            with tempfile.TemporaryDirectory() as tmp:
                archive = create_tar_gz(Path(tmp) / "cache.tar.gz", paths)
                with open(archive, "rb") as f:
                    response = self.session.put(
                        url, data=f, headers=self._headers, timeout=self.timeout
                    )
        except (RequestException, OSError, FileSystemError) as e:
            raise CacheError(f"Failed to save {key} to {url}: {e}") from e

        if response.status_code >= 400:
            raise CacheError(f"Failed to save {key} to {url}: HTTP {response.status_code}")

        logger.debug(f"Saved {key} to {url}")


def detect_remote_cache(
    settings: Settings, session: Optional[requests.Session] = None
) -> Optional[RemoteCache]:
    """
    Select a remote cache backend from settings.

    Args:
        settings: Resolved settings
        session: HTTP session for the HTTP backend

    Returns:
        An available backend, or None when none is configured or reachable
    """
    if settings.remote_cache_disabled:
        logger.debug("Remote cache disabled by configuration")
        return None

    backend: Optional[RemoteCache] = None
    if settings.remote_cache_url:
        backend = HttpRemoteCache(
            settings.remote_cache_url,
            token=settings.remote_cache_token,
            session=session or create_session(settings.user_agent),
            timeout=settings.http_timeout,
        )
    elif settings.remote_cache_dir:
        backend = DirectoryRemoteCache(settings.remote_cache_dir)

    if backend is None or not backend.is_available():
        return None
    return backend


__all__ = [
    "RemoteCache",
    "DirectoryRemoteCache",
    "HttpRemoteCache",
    "detect_remote_cache",
    "validate_key",
]
