"""
Docker Buildx CLI wrapper.

Buildx is invoked either as a Docker CLI plugin (``docker buildx ...``) or
as a standalone binary (``buildx ...``).

Usage:
    from binkit.buildx.buildx import Buildx

    buildx = Buildx(settings)
    if buildx.is_available() and buildx.version_satisfies(">=0.10.0"):
        ...
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from binkit.config.settings import Settings
from binkit.core.exceptions import CommandError, FileSystemError, InvalidVersionError
from binkit.core.filesystem import ensure_directory

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r"\sv?([0-9a-f]{7}|[0-9.]+)")
SHORT_SHA_RE = re.compile(r"^[0-9a-f]{7}$")

CERT_KINDS = ("cacert", "cert", "key")


def parse_version(stdout: str) -> Optional[str]:
    """
    Extract the version from ``buildx version`` output.

    Example:
        >>> parse_version("github.com/docker/buildx v0.4.2 fb7b670b764764dc4716df3eba07ffdae4cc47b2")
        '0.4.2'
    """
    match = VERSION_RE.search(stdout)
    return match.group(1) if match else None


def _to_specifier(spec: str) -> SpecifierSet:
    """Convert a space-separated semver range (">=0.3.2 <1.0.0") to a SpecifierSet."""
    try:
        return SpecifierSet(",".join(spec.split()))
    except InvalidSpecifier as e:
        raise InvalidVersionError(spec, "buildx") from e


class Buildx:
    """
    Buildx CLI wrapper.

    Attributes:
        settings: Settings holding Docker / Buildx config locations
        standalone: Invoke ``buildx`` directly instead of ``docker buildx``
    """

    def __init__(self, settings: Settings, standalone: Optional[bool] = None):
        self.settings = settings
        if standalone is None:
            standalone = shutil.which("docker") is None
        self.standalone = standalone

    @property
    def config_dir(self) -> Path:
        return self.settings.resolved_buildx_config_dir()

    @property
    def certs_dir(self) -> Path:
        return self.config_dir / "certs"

    def cmd(self, args: Optional[List[str]] = None) -> Tuple[str, List[str]]:
        """
        Build the command line for a buildx invocation.

        Returns:
            (executable, arguments)
        """
        args = list(args or [])
        if self.standalone:
            return "buildx", args
        return "docker", ["buildx", *args]

    def _run(self, args: List[str], capture: bool) -> subprocess.CompletedProcess:
        command, cmd_args = self.cmd(args)
        logger.debug(f"Running {command} {' '.join(cmd_args)}")
        return subprocess.run(
            [command, *cmd_args],
            capture_output=capture,
            text=True,
            check=False,
        )

    def is_available(self) -> bool:
        """Check that buildx runs without errors."""
        try:
            result = self._run([], capture=True)
        except OSError as e:
            logger.debug(f"Buildx not available: {e}")
            return False

        if result.returncode != 0 or result.stderr.strip():
            logger.debug(f"Buildx not available: {result.stderr.strip()}")
            return False
        return True

    def print_version(self) -> None:
        self._run_visible(["version"])

    def print_inspect(self, name: str) -> None:
        self._run_visible(["inspect", name])

    def _run_visible(self, args: List[str]) -> None:
        command, _ = self.cmd(args)
        try:
            result = self._run(args, capture=False)
        except OSError as e:
            raise CommandError(command, str(e)) from e
        if result.returncode != 0:
            raise CommandError(command, f"exited with code {result.returncode}")

    @property
    def version(self) -> str:
        """
        Installed buildx version.

        Raises:
            CommandError: If buildx fails or its output cannot be parsed
        """
        command, _ = self.cmd(["version"])
        try:
            result = self._run(["version"], capture=True)
        except OSError as e:
            raise CommandError(command, str(e)) from e

        if result.returncode != 0 or result.stderr.strip():
            raise CommandError(command, result.stderr.strip() or "version failed")

        version = parse_version(result.stdout)
        if not version:
            raise CommandError(command, f"cannot parse version from {result.stdout!r}")
        return version

    def version_satisfies(self, spec: str, version: Optional[str] = None) -> bool:
        """
        Check a version against a range.

        Short commit SHAs (dev builds) always satisfy the range.

        Args:
            spec: Range such as ">=0.10.0" or ">=0.3.2 <1.0.0"
            version: Version to check (default: installed version)
        """
        ver = version if version is not None else self.version
        if SHORT_SHA_RE.match(ver):
            return True

        try:
            parsed = Version(ver)
        except InvalidVersion:
            logger.debug(f"{ver} is not a comparable version")
            return False

        return _to_specifier(spec).contains(parsed, prereleases=True)

    def resolve_certs_driver_opts(
        self, driver: str, endpoint: str, cert: Mapping[str, str]
    ) -> List[str]:
        """
        Write TLS material for a tcp:// endpoint into the certs directory.

        Args:
            driver: Buildx driver name
            endpoint: Builder endpoint
            cert: Mapping with optional 'cacert', 'cert' and 'key' PEM content

        Returns:
            ``kind=path`` driver options for the 'remote' driver, else []
        """
        url = urlparse(endpoint)
        if url.scheme != "tcp" or not url.hostname:
            return []
        if not cert:
            return []

        host = url.hostname
        if url.port:
            host = f"{host}-{url.port}"

        ensure_directory(self.certs_dir)
        driver_opts: List[str] = []
        for kind in CERT_KINDS:
            content = cert.get(kind)
            if content is None:
                continue
            cert_path = self.certs_dir / f"{kind}_{host}.pem"
            try:
                cert_path.write_text(content, encoding="utf-8")
            except OSError as e:
                raise FileSystemError(f"Failed to write {cert_path}: {e}") from e
            driver_opts.append(f"{kind}={cert_path}")

        if driver != "remote":
            return []
        return driver_opts
