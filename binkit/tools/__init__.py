"""
Release tool acquisition for binkit.
"""

from .release import (
    DownloadVersion,
    GitHubRelease,
    VersionResolver,
    normalize_version,
)
from .downloader import Downloader, archive_filename
from .installer import Installer
from .install import Install, ToolSpec, UNDOCK

__all__ = [
    "DownloadVersion",
    "GitHubRelease",
    "VersionResolver",
    "normalize_version",
    "Downloader",
    "archive_filename",
    "Installer",
    "Install",
    "ToolSpec",
    "UNDOCK",
]
