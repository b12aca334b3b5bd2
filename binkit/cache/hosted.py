"""
Hosted tool cache.

A local, per-runner directory cache of tools keyed by name, version and
architecture. Layout matches the GitHub Actions runner tool cache so entries
written here are visible to other actions on the same runner:

    {root}/{name}/{version}/{arch}/...
    {root}/{name}/{version}/{arch}.complete
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from binkit.core.exceptions import FileSystemError
from binkit.core.filesystem import copy_tree, ensure_directory

logger = logging.getLogger(__name__)


def clean_version(version: str) -> str:
    """Strip whitespace and a leading '=' or 'v' from a version string."""
    return version.strip().lstrip("=v").strip()


class HostedToolCache:
    """
    Directory cache keyed by (name, version, arch).

    Attributes:
        root: Root directory of the tool cache (RUNNER_TOOL_CACHE)
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _tool_path(self, name: str, version: str, arch: str) -> Path:
        return self.root / name / clean_version(version) / arch

    def _marker_path(self, name: str, version: str, arch: str) -> Path:
        tool_path = self._tool_path(name, version, arch)
        return tool_path.parent / f"{arch}.complete"

    def find(self, name: str, version: str, arch: str) -> Optional[Path]:
        """
        Find a completed cache entry.

        Returns:
            Entry directory, or None on a miss
        """
        if not name:
            raise ValueError("Tool name cannot be empty")
        if not version:
            raise ValueError("Tool version cannot be empty")

        tool_path = self._tool_path(name, version, arch)
        if tool_path.is_dir() and self._marker_path(name, version, arch).is_file():
            logger.debug(f"Found tool in cache {name} {version} {arch}")
            return tool_path

        logger.debug(f"Tool not found in cache {name} {version} {arch}")
        return None

    def cache_dir(
        self, source_dir: Union[str, Path], name: str, version: str, arch: str
    ) -> Path:
        """
        Copy a directory into the cache and mark the entry complete.

        An existing entry for the same key is replaced.

        Args:
            source_dir: Directory whose contents are cached
            name: Tool name
            version: Tool version
            arch: Architecture / platform string

        Returns:
            Path of the cache entry

        Raises:
            FileSystemError: If the copy fails
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise FileSystemError(f"Source is not a directory: {source_dir}")

        tool_path = self._tool_path(name, version, arch)
        marker = self._marker_path(name, version, arch)
        logger.debug(f"Caching tool {name} {version} {arch} from {source_dir}")

        try:
            marker.unlink(missing_ok=True)
            if tool_path.exists():
                shutil.rmtree(tool_path)
        except OSError as e:
            raise FileSystemError(f"Failed to reset cache entry {tool_path}: {e}") from e

        ensure_directory(tool_path)
        copy_tree(source_dir, tool_path)

        try:
            marker.write_text("")
        except OSError as e:
            raise FileSystemError(f"Failed to mark cache entry {tool_path}: {e}") from e

        return tool_path
