"""
Binary caching for binkit.

This package provides the hosted tool cache, remote cache backends, the
strategies combining them and the per-artifact cache used by installers.
"""

from .artifact import ArtifactCache, CacheOptions
from .hosted import HostedToolCache
from .remote import (
    RemoteCache,
    DirectoryRemoteCache,
    HttpRemoteCache,
    detect_remote_cache,
)
from .strategy import (
    CacheKey,
    CacheStrategy,
    LocalCacheStrategy,
    LayeredCacheStrategy,
    select_cache_strategy,
)

__all__ = [
    "ArtifactCache",
    "CacheOptions",
    "HostedToolCache",
    "RemoteCache",
    "DirectoryRemoteCache",
    "HttpRemoteCache",
    "detect_remote_cache",
    "CacheKey",
    "CacheStrategy",
    "LocalCacheStrategy",
    "LayeredCacheStrategy",
    "select_cache_strategy",
]
