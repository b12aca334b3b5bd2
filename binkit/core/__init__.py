"""
Core functionality for binkit.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    BinkitError,
    InvalidVersionError,
    NotFoundError,
    TransportError,
    DownloadError,
    ExtractionError,
    FileSystemError,
    CacheError,
    ConfigError,
    CommandError,
)

__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "BinkitError",
    "InvalidVersionError",
    "NotFoundError",
    "TransportError",
    "DownloadError",
    "ExtractionError",
    "FileSystemError",
    "CacheError",
    "ConfigError",
    "CommandError",
]
