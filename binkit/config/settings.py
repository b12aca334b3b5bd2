"""YAML and environment configuration for binkit.

Settings are resolved once from the process environment (GitHub Actions
runner variables, Docker variables) and an optional ``binkit.yaml`` file, then
passed explicitly to each component.
"""

import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from binkit.core.exceptions import ConfigError

DEFAULT_USER_AGENT = "binkit"
DEFAULT_HTTP_TIMEOUT = 30


@dataclass(frozen=True)
class Settings:
    """Resolved binkit configuration."""

    home_dir: Path
    temp_dir: Path
    tool_cache_dir: Path
    github_path_file: Optional[Path] = None
    docker_config_dir: Optional[Path] = None
    buildx_config_dir: Optional[Path] = None
    remote_cache_dir: Optional[Path] = None
    remote_cache_url: Optional[str] = None
    remote_cache_token: Optional[str] = None
    remote_cache_disabled: bool = False
    http_timeout: int = DEFAULT_HTTP_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            Settings with runner defaults applied
        """
        env = os.environ if environ is None else environ

        home = Path(env.get("HOME") or env.get("USERPROFILE") or Path.home())
        temp = Path(env.get("RUNNER_TEMP") or tempfile.gettempdir())
        tool_cache = env.get("RUNNER_TOOL_CACHE")

        return cls(
            home_dir=home,
            temp_dir=temp,
            tool_cache_dir=Path(tool_cache) if tool_cache else home / ".binkit" / "tool-cache",
            github_path_file=_optional_path(env.get("GITHUB_PATH")),
            docker_config_dir=_optional_path(env.get("DOCKER_CONFIG")),
            buildx_config_dir=_optional_path(env.get("BUILDX_CONFIG")),
            remote_cache_dir=_optional_path(env.get("BINKIT_REMOTE_CACHE_DIR")),
            remote_cache_url=env.get("BINKIT_REMOTE_CACHE_URL") or None,
            remote_cache_token=env.get("BINKIT_REMOTE_CACHE_TOKEN") or None,
            remote_cache_disabled=_parse_bool(env.get("BINKIT_NO_REMOTE_CACHE", "")),
        )

    @property
    def bin_cache_dir(self) -> Path:
        """Base directory of cached binaries (``~/.bin``)."""
        return self.home_dir / ".bin"

    def resolved_docker_config_dir(self) -> Path:
        return self.docker_config_dir or self.home_dir / ".docker"

    def resolved_buildx_config_dir(self) -> Path:
        return self.buildx_config_dir or self.resolved_docker_config_dir() / "buildx"


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Load settings from the environment, overlaid with a YAML file.

    Args:
        config_path: Path to binkit.yaml (optional)
        environ: Environment mapping (default: os.environ)

    Returns:
        Resolved settings

    Raises:
        ConfigError: If the file is missing, malformed or has unknown keys
    """
    settings = Settings.from_env(environ)
    if config_path is None:
        return settings

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        return settings
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")

    return replace(settings, **_parse_overrides(data))


def _parse_overrides(data: Dict[str, object]) -> Dict[str, object]:
    known = {f.name: f for f in fields(Settings)}
    overrides: Dict[str, object] = {}

    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"Unknown configuration key: {key}")
        if value is None:
            if key in ("home_dir", "temp_dir", "tool_cache_dir"):
                raise ConfigError(f"{key} cannot be empty")
            overrides[key] = None
        elif key.endswith("_dir") or key.endswith("_file"):
            overrides[key] = Path(str(value)).expanduser()
        elif key == "http_timeout":
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"http_timeout must be a positive integer: {value!r}")
            overrides[key] = value
        elif key == "remote_cache_disabled":
            if not isinstance(value, bool):
                raise ConfigError(f"remote_cache_disabled must be a boolean: {value!r}")
            overrides[key] = value
        else:
            overrides[key] = str(value)

    return overrides


def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
