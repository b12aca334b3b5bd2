"""
Job environment integration.

Publishes directories onto the executable search path for the current
process and, on GitHub Actions runners, for subsequent steps of the job.
"""

import logging
import os
from pathlib import Path
from typing import MutableMapping, Optional, Union

from binkit.config.settings import Settings
from binkit.core.exceptions import FileSystemError

logger = logging.getLogger(__name__)


def add_path(
    directory: Union[str, Path],
    settings: Settings,
    environ: Optional[MutableMapping[str, str]] = None,
) -> None:
    """
    Prepend a directory to PATH for this process and the rest of the job.

    Args:
        directory: Directory to publish
        settings: Settings holding the job path file (GITHUB_PATH)
        environ: Environment to mutate (default: os.environ)

    Raises:
        FileSystemError: If the job path file cannot be written
    """
    env = os.environ if environ is None else environ
    directory = str(directory)

    if settings.github_path_file:
        try:
            with open(settings.github_path_file, "a", encoding="utf-8") as f:
                f.write(f"{directory}{os.linesep}")
        except OSError as e:
            raise FileSystemError(
                f"Failed to append to {settings.github_path_file}: {e}"
            ) from e

    current = env.get("PATH", "")
    env["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory
    logger.debug(f"Added {directory} to PATH")
