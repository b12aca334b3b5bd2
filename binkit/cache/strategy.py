"""
Cache lookup strategies.

A strategy decides which cache tiers are consulted for a key:

- LocalCacheStrategy: hosted tool cache only
- LayeredCacheStrategy: hosted tool cache, then a remote cache backend

``select_cache_strategy`` picks one based on whether a remote backend was
detected at runtime.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from binkit.cache.hosted import HostedToolCache
from binkit.cache.remote import RemoteCache
from binkit.core.exceptions import BinkitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Composite cache key (name, version, platform)."""

    name: str
    version: str
    platform: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}-{self.platform}"


class CacheStrategy(ABC):
    """Abstract interface for finding and saving cache directories."""

    def __init__(self, hosted: HostedToolCache):
        self.hosted = hosted

    @abstractmethod
    def find(
        self, key: CacheKey, cache_dir: Path, cache_file: Optional[str] = None
    ) -> Optional[Path]:
        """
        Look up a cache entry.

        Args:
            key: Cache key
            cache_dir: Working cache directory remote entries restore into
            cache_file: File an entry must contain to count as a hit

        Returns:
            Directory holding the cached files, or None on a miss
        """
        pass

    @abstractmethod
    def save(self, key: CacheKey, cache_dir: Path, upload: bool = True) -> Path:
        """
        Persist cache_dir under key.

        Args:
            key: Cache key
            cache_dir: Directory to persist
            upload: Whether remote tiers may be written

        Returns:
            Hosted tool cache entry directory
        """
        pass

    def _register(self, key: CacheKey, cache_dir: Path) -> Path:
        return self.hosted.cache_dir(cache_dir, key.name, key.version, key.platform)


def _has_file(directory: Path, cache_file: Optional[str]) -> bool:
    return cache_file is None or (Path(directory) / cache_file).is_file()


class LocalCacheStrategy(CacheStrategy):
    """Hosted tool cache only."""

    def find(
        self, key: CacheKey, cache_dir: Path, cache_file: Optional[str] = None
    ) -> Optional[Path]:
        htc_path = self.hosted.find(key.name, key.version, key.platform)
        if htc_path is None:
            return None
        if not _has_file(htc_path, cache_file):
            logger.debug(f"Hosted tool cache entry {htc_path} has no {cache_file}")
            return None

        logger.info(f"Restored from hosted tool cache {htc_path}")
        return htc_path

    def save(self, key: CacheKey, cache_dir: Path, upload: bool = True) -> Path:
        htc_path = self._register(key, cache_dir)
        logger.debug(f"Cached to hosted tool cache {htc_path}")
        return htc_path


class LayeredCacheStrategy(LocalCacheStrategy):
    """
    Hosted tool cache backed by a remote cache.

    Remote hits are re-registered in the hosted tool cache. Remote upload
    failures are logged and do not fail the save.
    """

    def __init__(self, hosted: HostedToolCache, remote: RemoteCache):
        super().__init__(hosted)
        self.remote = remote

    def find(
        self, key: CacheKey, cache_dir: Path, cache_file: Optional[str] = None
    ) -> Optional[Path]:
        htc_path = super().find(key, cache_dir, cache_file)
        if htc_path:
            return htc_path

        if not self.remote.restore([cache_dir], str(key)):
            logger.debug(f"Cache {key} not found in remote cache")
            return None

        if not _has_file(cache_dir, cache_file):
            logger.warning(f"Remote cache entry {key} has no {cache_file}")
            return None

        logger.info(f"Restored {key} from remote cache")
        htc_path = self._register(key, cache_dir)
        logger.info(f"Restored to hosted tool cache {htc_path}")
        return htc_path

    def save(self, key: CacheKey, cache_dir: Path, upload: bool = True) -> Path:
        htc_path = super().save(key, cache_dir)

        if upload:
            logger.debug(f"Caching {key} to remote cache")
            try:
                self.remote.save([cache_dir], str(key))
            except (BinkitError, OSError) as e:
                logger.warning(f"Failed to save {key} to remote cache: {e}")

        return htc_path


def select_cache_strategy(
    hosted: HostedToolCache,
    remote: Optional[RemoteCache] = None,
) -> CacheStrategy:
    """
    Pick a cache strategy.

    Args:
        hosted: Hosted tool cache
        remote: Detected remote backend, or None

    Returns:
        LayeredCacheStrategy when a remote backend is available, else
        LocalCacheStrategy
    """
    if remote is None or not remote.is_available():
        logger.info("Remote cache feature not available")
        return LocalCacheStrategy(hosted)

    logger.debug("Remote cache feature available")
    return LayeredCacheStrategy(hosted, remote)
