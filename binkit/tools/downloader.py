"""
Release asset download and extraction.

Release assets are named::

    {tool}_{version}_{platform}_{arch}{ext}

e.g. ``undock_0.7.0_linux_amd64.tar.gz`` or ``undock_0.7.0_windows_arm64.zip``.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

import requests

from binkit.core.context import Context
from binkit.core.download import download_file
from binkit.core.exceptions import FileSystemError
from binkit.core.filesystem import extract_tar, extract_zip
from binkit.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)


def archive_filename(tool: str, version: str, platform_info: PlatformInfo) -> str:
    """
    Build the release asset file name for a platform.

    Example:
        >>> archive_filename("undock", "0.7.0", PlatformInfo("win32", "x64"))
        'undock_0.7.0_windows_amd64.zip'
    """
    return (
        f"{tool}_{version}_{platform_info.asset_platform()}_"
        f"{platform_info.asset_arch()}{platform_info.archive_extension()}"
    )


class Downloader:
    """
    Fetch release archives and unpack them into the context temp directory.
    """

    def __init__(
        self,
        context: Context,
        platform_info: Optional[PlatformInfo] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.context = context
        self.platform_info = platform_info or detect_platform()
        self.session = session
        self.timeout = timeout

    def fetch_and_extract(self, url: str) -> Path:
        """
        Download an archive and extract it.

        ZIP archives are expected on Windows, gzip tarballs elsewhere.

        Args:
            url: Archive URL

        Returns:
            Extraction root directory

        Raises:
            DownloadError: If the transfer fails
            ExtractionError: If the archive cannot be unpacked
        """
        archive = self.context.tmp_name()
        download_file(url, archive, session=self.session, timeout=self.timeout)
        logger.debug(f"Downloaded {url} to {archive}")

        try:
            destination = Path(tempfile.mkdtemp(prefix="extract-", dir=self.context.tmp_dir()))
        except OSError as e:
            raise FileSystemError(f"Failed to create extraction directory: {e}") from e

        if self.platform_info.is_windows:
            extract_zip(archive, destination)
        else:
            extract_tar(archive, destination)

        logger.info(f"Extracted to {destination}")
        return destination
