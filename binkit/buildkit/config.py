"""
BuildKit daemon configuration files.
"""

import logging
from pathlib import Path
from typing import Union

from binkit.core.context import Context
from binkit.core.exceptions import ConfigError, FileSystemError

logger = logging.getLogger(__name__)


class BuildKitConfig:
    """Write buildkitd.toml content to temporary files."""

    def __init__(self, context: Context):
        self.context = context

    def generate_from_string(self, content: str) -> Path:
        return self._generate(content)

    def generate_from_file(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"config file {path} not found")
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Failed to read {path}: {e}") from e
        return self._generate(content)

    def _generate(self, content: str) -> Path:
        config_file = self.context.tmp_name(tmpdir=self.context.tmp_dir())
        try:
            config_file.write_text(content, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Failed to write {config_file}: {e}") from e
        logger.debug(f"Generated BuildKit config {config_file}")
        return config_file
