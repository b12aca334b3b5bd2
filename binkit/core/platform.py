"""
Platform detection for binkit.

This module detects the current operating system and CPU architecture and
maps them onto the identifiers used by release assets and cache keys.

Identifiers follow the conventions of GitHub release tooling:
- OS: 'win32', 'linux', 'darwin' (others passed through lowercased)
- Architecture: 'x64', 'arm64', 'arm', 'ia32', 'ppc64', 's390x', 'riscv64'

Usage:
    from binkit.core.platform import detect_platform

    info = detect_platform()
    print(info.cache_platform())  # e.g. 'linux-x64' or 'linux-armv7'
"""

import functools
import platform
import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information used for asset selection and cache keys.

    Attributes:
        os: Operating system identifier ('win32', 'linux', 'darwin')
        arch: CPU architecture identifier ('x64', 'arm64', 'arm', ...)
        arm_version: ARM revision (e.g. '7') when running on 32-bit ARM
    """

    os: str
    arch: str
    arm_version: Optional[str] = None

    @property
    def is_windows(self) -> bool:
        return self.os == "win32"

    def cache_platform(self) -> str:
        """
        Get platform string used in cache keys and cache directories.

        Returns:
            '{os}-{arch}', with 'v{arm_version}' appended on ARM

        Example:
            >>> PlatformInfo('linux', 'arm', '7').cache_platform()
            'linux-armv7'
        """
        suffix = ""
        if self.arch == "arm" and self.arm_version:
            suffix = f"v{self.arm_version}"
        return f"{self.os}-{self.arch}{suffix}"

    def asset_platform(self) -> str:
        """Get OS name used in release asset file names."""
        return "windows" if self.is_windows else self.os

    def asset_arch(self) -> str:
        """
        Get architecture name used in release asset file names.

        Example:
            >>> PlatformInfo('linux', 'x64').asset_arch()
            'amd64'
        """
        if self.arch == "x64":
            return "amd64"
        elif self.arch == "ppc64":
            return "ppc64le"
        elif self.arch == "arm":
            return f"armv{self.arm_version}" if self.arm_version else "arm"
        return self.arch

    def archive_extension(self) -> str:
        return ".zip" if self.is_windows else ".tar.gz"

    def executable_name(self, name: str) -> str:
        """Get platform-appropriate executable file name."""
        return f"{name}.exe" if self.is_windows else name

    def __str__(self) -> str:
        return self.cache_platform()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo for the running interpreter
    """
    machine = platform.machine()
    arch = _detect_architecture(machine)
    arm_version = _detect_arm_version(machine) if arch == "arm" else None
    return PlatformInfo(os=_detect_os(), arch=arch, arm_version=arm_version)


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS identifier: 'win32', 'linux', 'darwin', or the raw
        lowercased system name
    """
    system = platform.system().lower()

    if system == "windows" or system.startswith(("cygwin", "msys")):
        return "win32"
    elif system == "darwin":
        return "darwin"
    elif system == "linux":
        return "linux"
    return system


def _detect_architecture(machine: str) -> str:
    """
    Detect CPU architecture.

    Args:
        machine: Raw machine string from platform.machine()

    Returns:
        Normalized architecture identifier
    """
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "ia32"
    elif machine.startswith("arm"):
        return "arm"
    elif machine in ("ppc64le", "ppc64"):
        return "ppc64"
    elif machine == "s390x":
        return "s390x"
    elif machine == "riscv64":
        return "riscv64"
    else:
        # Return original for unknown architectures
        return machine


def _detect_arm_version(machine: str) -> Optional[str]:
    """
    Extract the ARM revision from a machine string like 'armv7l'.

    Returns:
        Revision digit string, or None if unknown
    """
    match = re.match(r"armv(\d+)", machine.lower())
    return match.group(1) if match else None


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
