"""
Release binary acquisition.

This module orchestrates acquiring a tool binary from GitHub releases:
1. Resolve the requested version to a version spec
2. Look the binary up in the hosted tool cache and remote cache
3. On a miss, download and extract the release archive
4. Populate the caches
5. Optionally install the binary onto PATH

Each step runs to completion before the next; any failure propagates to
the caller without retry.

Example:
    >>> settings = load_settings()
    >>> install = Install(UNDOCK, settings)
    >>> bin_path = install.download("latest")
    >>> install.install(bin_path)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import requests

from binkit.cache.artifact import ArtifactCache, CacheOptions
from binkit.cache.hosted import HostedToolCache
from binkit.cache.remote import RemoteCache, detect_remote_cache
from binkit.cache.strategy import select_cache_strategy
from binkit.config.settings import Settings
from binkit.core.context import Context
from binkit.core.download import create_session
from binkit.core.exceptions import ExtractionError
from binkit.core.platform import PlatformInfo, detect_platform
from binkit.tools.downloader import Downloader, archive_filename
from binkit.tools.installer import Installer
from binkit.tools.release import DownloadVersion, VersionResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    """
    A tool distributed as GitHub release archives.

    Attributes:
        name: Tool name, used in asset names and the install directory
        download_url: Template with {version} and {filename} placeholders
        releases_url: Release manifest URL
        binary_name: Executable name inside the archive (default: name)
        cache_name: Hosted tool cache name (default: '{name}-dl-bin')
    """

    name: str
    download_url: str
    releases_url: str
    binary_name: Optional[str] = None
    cache_name: Optional[str] = None

    @property
    def executable(self) -> str:
        return self.binary_name or self.name

    @property
    def htc_name(self) -> str:
        return self.cache_name or f"{self.name}-dl-bin"

    def download_version(self, version: str) -> DownloadVersion:
        return DownloadVersion(
            version=version,
            download_url=self.download_url,
            releases_url=self.releases_url,
        )


UNDOCK = ToolSpec(
    name="undock",
    download_url="https://github.com/crazy-max/undock/releases/download/v{version}/{filename}",
    releases_url="https://raw.githubusercontent.com/docker/actions-toolkit/main/.github/undock-releases.json",
)


class Install:
    """
    Download, cache and install a release binary.

    Collaborators default to ones built from settings; pass them explicitly
    to share an HTTP session or to substitute a remote cache.
    """

    def __init__(
        self,
        tool: ToolSpec,
        settings: Settings,
        context: Optional[Context] = None,
        platform_info: Optional[PlatformInfo] = None,
        session: Optional[requests.Session] = None,
        remote_cache: Optional[RemoteCache] = None,
    ):
        self.tool = tool
        self.settings = settings
        self.context = context or Context(settings)
        self.platform_info = platform_info or detect_platform()
        self.session = session or create_session(settings.user_agent)
        self.remote_cache = (
            remote_cache
            if remote_cache is not None
            else detect_remote_cache(settings, self.session)
        )

    def download(self, version: str, gha_no_cache: bool = False) -> Path:
        """
        Acquire the binary for a requested version.

        Args:
            version: Concrete version or a release manifest name ("latest")
            gha_no_cache: Do not upload the binary to the remote cache

        Returns:
            Path to the cached binary

        Raises:
            InvalidVersionError: If the version cannot be used
            NotFoundError: If the version is absent from the manifest
            TransportError: If the manifest or archive fetch fails
            ExtractionError: If the archive cannot be unpacked
            FileSystemError: If caching fails
        """
        download_version = self.tool.download_version(version)
        logger.debug(f"Install.download version: {download_version.version}")

        resolver = VersionResolver(
            self.tool.name,
            download_version.releases_url,
            session=self.session,
            timeout=self.settings.http_timeout,
        )
        vspec = resolver.resolve(download_version.version)
        logger.debug(f"Install.download vspec: {vspec}")

        exe_name = self.platform_info.executable_name(self.tool.executable)
        install_cache = ArtifactCache(
            CacheOptions(
                htc_name=self.tool.htc_name,
                htc_version=vspec,
                base_cache_dir=self.settings.bin_cache_dir,
                cache_file=exe_name,
                gha_no_cache=gha_no_cache,
            ),
            select_cache_strategy(
                HostedToolCache(self.settings.tool_cache_dir), self.remote_cache
            ),
            self.platform_info,
        )

        cache_found_path = install_cache.find()
        if cache_found_path:
            logger.info(f"{self.tool.name} binary found in {cache_found_path}")
            return cache_found_path

        download_url = download_version.download_url.format(
            version=vspec,
            filename=archive_filename(self.tool.name, vspec, self.platform_info),
        )
        logger.info(f"Downloading {download_url}")

        downloader = Downloader(
            self.context,
            self.platform_info,
            session=self.session,
            timeout=self.settings.http_timeout,
        )
        ext_path = downloader.fetch_and_extract(download_url)

        exe_path = ext_path / exe_name
        logger.debug(f"Install.download exe_path: {exe_path}")
        if not exe_path.is_file():
            raise ExtractionError(f"{exe_name} not found in archive from {download_url}")

        cache_save_path = install_cache.save(exe_path)
        logger.info(f"Cached to {cache_save_path}")
        return cache_save_path

    def install(
        self, bin_path: Union[str, Path], dest: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Install a downloaded binary onto PATH.

        Args:
            bin_path: Binary returned by download()
            dest: Destination root (default: context temp directory)

        Returns:
            Installed binary path
        """
        installer = Installer(
            self.tool.name,
            self.settings,
            self.context,
            self.platform_info,
            binary_name=self.tool.executable,
        )
        return installer.install(bin_path, dest)
