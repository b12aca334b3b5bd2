"""
Per-process working context.

Provides the temporary directory used for downloads, extracted archives,
generated config files and default install destinations.
"""

import logging
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from binkit.config.settings import Settings
from binkit.core.exceptions import FileSystemError

logger = logging.getLogger(__name__)


class Context:
    """
    Temporary file context bound to one process.

    Example:
        >>> context = Context(Settings.from_env())
        >>> config_file = context.tmp_name(suffix=".toml")
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._tmp_dir: Optional[Path] = None

    def tmp_dir(self) -> Path:
        """
        Get (and create on first use) this process's temp directory.

        Returns:
            Directory under settings.temp_dir

        Raises:
            FileSystemError: If the directory cannot be created
        """
        if self._tmp_dir is None:
            base = Path(self.settings.temp_dir)
            try:
                base.mkdir(parents=True, exist_ok=True)
                self._tmp_dir = Path(tempfile.mkdtemp(prefix="binkit-", dir=base))
            except OSError as e:
                raise FileSystemError(
                    f"Failed to create temp directory under {base}: {e}"
                ) from e
            logger.debug(f"Created temp directory {self._tmp_dir}")
        return self._tmp_dir

    def tmp_name(self, tmpdir: Optional[Path] = None, suffix: str = "") -> Path:
        """
        Get a fresh, unique file path. The file is not created.

        Args:
            tmpdir: Parent directory (default: tmp_dir())
            suffix: Optional file name suffix
        """
        parent = Path(tmpdir) if tmpdir is not None else self.tmp_dir()
        return parent / f"tmp-{uuid.uuid4().hex}{suffix}"
