"""
Binary installation onto the job PATH.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from binkit.config.settings import Settings
from binkit.core.actions import add_path
from binkit.core.context import Context
from binkit.core.filesystem import copy_file, ensure_directory, make_executable
from binkit.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)


class Installer:
    """
    Copy a binary into ``{dest}/{tool}-bin`` and publish it on PATH.

    Example:
        >>> installer = Installer("undock", settings, context)
        >>> installer.install(Path("/home/runner/.bin/0.7.0/linux-x64/undock"))
        PosixPath('/home/runner/work/_temp/binkit-xyz/undock-bin/undock')
    """

    def __init__(
        self,
        tool: str,
        settings: Settings,
        context: Context,
        platform_info: Optional[PlatformInfo] = None,
        binary_name: Optional[str] = None,
    ):
        self.tool = tool
        self.settings = settings
        self.context = context
        self.platform_info = platform_info or detect_platform()
        self.binary_name = binary_name or tool

    def install(
        self, bin_path: Union[str, Path], dest: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Install a binary.

        Repeated installs into the same destination overwrite the binary.

        Args:
            bin_path: Binary to install
            dest: Destination root (default: context temp directory)

        Returns:
            Installed binary path

        Raises:
            FileSystemError: If mkdir, copy or chmod fails
        """
        dest = Path(dest) if dest else self.context.tmp_dir()

        bin_dir = ensure_directory(dest / f"{self.tool}-bin")
        installed = bin_dir / self.platform_info.executable_name(self.binary_name)
        copy_file(bin_path, installed)

        logger.info("Fixing perms")
        make_executable(installed)

        add_path(bin_dir, self.settings)
        logger.info(f"Added {self.tool} to PATH")

        logger.info(f"Binary path: {installed}")
        return installed
