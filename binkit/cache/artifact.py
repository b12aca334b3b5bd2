"""
Two-tier artifact cache for downloaded binaries.

An ArtifactCache keeps one file (the binary) in a canonical location

    {base_cache_dir}/{version}/{platform}/{cache_file}

and mirrors the containing directory into the hosted tool cache and, when
available, a remote cache. The directory is keyed by
``{htc_name}-{htc_version}-{platform}``.

Writes are plain file copies; concurrent jobs populating the same key are
not serialized.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from binkit.cache.strategy import CacheKey, CacheStrategy
from binkit.core.exceptions import BinkitError
from binkit.core.filesystem import copy_file, ensure_directory
from binkit.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheOptions:
    """
    Options identifying one cached artifact.

    Attributes:
        htc_name: Tool name in the hosted tool cache
        htc_version: Version spec used as cache key component
        base_cache_dir: Root of the canonical cache layout
        cache_file: File name of the artifact
        gha_no_cache: Skip uploading to the remote cache
    """

    htc_name: str
    htc_version: str
    base_cache_dir: Path
    cache_file: str
    gha_no_cache: bool = False


class ArtifactCache:
    """
    Cache of a single binary across the hosted tool cache and remote cache.

    Example:
        >>> cache = ArtifactCache(options, strategy)
        >>> path = cache.find()
        >>> if path is None:
        ...     path = cache.save(downloaded_binary)
    """

    def __init__(
        self,
        options: CacheOptions,
        strategy: CacheStrategy,
        platform_info: Optional[PlatformInfo] = None,
    ):
        self.options = options
        self.strategy = strategy
        self.platform_info = platform_info or detect_platform()

        platform = self.platform_info.cache_platform()
        self.key = CacheKey(options.htc_name, options.htc_version, platform)
        self.cache_dir = Path(options.base_cache_dir) / options.htc_version / platform
        self.cache_path = self.cache_dir / options.cache_file

        ensure_directory(self.cache_dir)

    def find(self) -> Optional[Path]:
        """
        Look the artifact up in the hosted tool cache, then the remote cache.

        Cache backend failures are logged and treated as a miss.

        Returns:
            Canonical cache path on a hit, None on a miss
        """
        try:
            htc_path = self.strategy.find(
                self.key, self.cache_dir, self.options.cache_file
            )
            if htc_path is None:
                return None
            return self._copy_to_cache(Path(htc_path) / self.options.cache_file)
        except (BinkitError, OSError) as e:
            logger.warning(f"Cache lookup for {self.key} failed: {e}")
            return None

    def save(self, file: Union[str, Path]) -> Path:
        """
        Store a file in the cache.

        Args:
            file: Artifact to cache

        Returns:
            Canonical cache path

        Raises:
            FileSystemError: If the local copy or registration fails
        """
        logger.debug(f"ArtifactCache.save {file}")
        cache_path = self._copy_to_cache(file)

        htc_path = self.strategy.save(
            self.key, self.cache_dir, upload=not self.options.gha_no_cache
        )
        logger.debug(f"ArtifactCache.save cached to hosted tool cache {htc_path}")

        return cache_path

    def _copy_to_cache(self, file: Union[str, Path]) -> Path:
        file = Path(file)
        if file.resolve() == self.cache_path.resolve():
            return self.cache_path

        logger.debug(f"Copying {file} to {self.cache_path}")
        ensure_directory(self.cache_dir)
        return copy_file(file, self.cache_path)
