"""
Centralized exception hierarchy for binkit.

This module defines all custom exceptions used across the codebase so that
callers can catch a single base class or a specific failure.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class BinkitError(Exception):
    """Base exception for all binkit errors."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class InvalidVersionError(BinkitError):
    """Version is malformed or cannot be resolved to a usable spec."""

    def __init__(self, version: str, tool: str = ""):
        self.version = version
        self.tool = tool
        if tool:
            msg = f"Invalid {tool} version {version!r}"
        else:
            msg = f"Invalid version {version!r}"
        super().__init__(msg)


class NotFoundError(BinkitError):
    """Requested version is absent from the release manifest."""

    def __init__(self, version: str, url: str, tool: str = ""):
        self.version = version
        self.url = url
        self.tool = tool
        name = f"{tool} release" if tool else "release"
        super().__init__(f"Cannot find {name} {version} in {url}")


# ============================================================================
# Network Exceptions
# ============================================================================


class TransportError(BinkitError):
    """Non-success HTTP status or network failure."""

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class DownloadError(TransportError):
    """Binary download failed."""

    pass


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FileSystemError(BinkitError):
    """Copy, chmod or mkdir failure."""

    pass


class ExtractionError(BinkitError):
    """Archive could not be unpacked."""

    pass


# ============================================================================
# Cache and Configuration Exceptions
# ============================================================================


class CacheError(BinkitError):
    """Cache backend failure."""

    pass


class ConfigError(BinkitError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# External Command Exceptions
# ============================================================================


class CommandError(BinkitError):
    """External command (docker, buildx) failed."""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(f"{command}: {message}")
