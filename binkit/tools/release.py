"""
Release metadata and version resolution.

Versions are requested either concretely ("0.7.0", "v0.7.0") or
symbolically ("latest", "edge"). Symbolic versions are looked up in a
release manifest: a JSON document mapping version names to GitHub release
objects, e.g.::

    {
      "latest": {"id": 1, "tag_name": "v0.7.0", "html_url": "..."},
      "v0.7.0": {"id": 1, "tag_name": "v0.7.0", "html_url": "..."}
    }

The resolved tag is normalized into a version spec (leading and trailing
'v' characters stripped) used for cache keys and download URLs.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from packaging.version import InvalidVersion, Version

from binkit.core.download import fetch_json
from binkit.core.exceptions import InvalidVersionError, NotFoundError, TransportError

logger = logging.getLogger(__name__)

CONCRETE_VERSION_RE = re.compile(r"^v?\d+\.\d+\.\d+\S*$")
COMMIT_SHA_RE = re.compile(r"^[0-9a-f]{7,40}$")


@dataclass(frozen=True)
class DownloadVersion:
    """
    Where to fetch a tool version from.

    Attributes:
        version: Requested version ("latest", "v0.7.0", ...)
        download_url: Template with {version} and {filename} placeholders
        releases_url: URL of the release manifest
    """

    version: str
    download_url: str
    releases_url: str


@dataclass
class GitHubRelease:
    """Subset of a GitHub release object."""

    tag_name: str
    id: Optional[int] = None
    html_url: Optional[str] = None
    assets: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubRelease":
        """
        Build a release from its JSON object, ignoring unknown keys.

        Raises:
            ValueError: If tag_name is missing
        """
        tag_name = data.get("tag_name")
        if not tag_name:
            raise ValueError("release has no tag_name")
        return cls(
            tag_name=str(tag_name),
            id=data.get("id"),
            html_url=data.get("html_url"),
            assets=list(data.get("assets") or []),
        )


def normalize_version(tag: str) -> str:
    """
    Strip leading and trailing 'v' characters from a tag.

    Example:
        >>> normalize_version("v0.4.1")
        '0.4.1'
    """
    return re.sub(r"^v+|v+$", "", tag.strip())


def is_concrete_version(value: str) -> bool:
    """Check whether value names a concrete X.Y.Z version (optional 'v')."""
    return bool(CONCRETE_VERSION_RE.match(value.strip()))


def is_commit_sha(value: str) -> bool:
    return bool(COMMIT_SHA_RE.match(value))


def validate_version_spec(vspec: str, tool: str = "") -> str:
    """
    Check that a version spec is a PEP 440 parseable version or a commit SHA.

    Returns:
        The version spec unchanged

    Raises:
        InvalidVersionError: If it is neither
    """
    if is_commit_sha(vspec):
        return vspec
    try:
        Version(vspec)
    except InvalidVersion as e:
        raise InvalidVersionError(vspec, tool) from e
    return vspec


def fetch_releases(
    url: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> Dict[str, GitHubRelease]:
    """
    Fetch a release manifest.

    Args:
        url: Manifest URL
        session: HTTP session
        timeout: Request timeout in seconds

    Returns:
        Mapping from version name to release

    Raises:
        TransportError: If the fetch fails or the document is malformed
    """
    data = fetch_json(url, session=session, timeout=timeout)
    if not isinstance(data, dict):
        raise TransportError(f"Release manifest at {url} is not a JSON object", url=url)

    releases: Dict[str, GitHubRelease] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict):
            raise TransportError(f"Invalid release {name!r} in {url}", url=url)
        try:
            releases[name] = GitHubRelease.from_dict(entry)
        except ValueError as e:
            raise TransportError(f"Invalid release {name!r} in {url}: {e}", url=url) from e
    return releases


def get_release(
    version: DownloadVersion,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
    tool: str = "",
) -> GitHubRelease:
    """
    Look a requested version up in its release manifest.

    Raises:
        NotFoundError: If the manifest has no entry for the version
        TransportError: If the manifest cannot be fetched
    """
    releases = fetch_releases(version.releases_url, session=session, timeout=timeout)
    release = releases.get(version.version)
    if release is None:
        raise NotFoundError(version.version, version.releases_url, tool)
    return release


class VersionResolver:
    """
    Resolve requested versions to version specs.

    Example:
        >>> resolver = VersionResolver("undock", releases_url)
        >>> resolver.resolve("latest")
        '0.7.0'
    """

    def __init__(
        self,
        tool: str,
        releases_url: str,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.tool = tool
        self.releases_url = releases_url
        self.session = session
        self.timeout = timeout

    def resolve(self, requested: str) -> str:
        """
        Resolve a requested version to a normalized version spec.

        Concrete versions are normalized without consulting the manifest.

        Args:
            requested: Concrete version, "latest" or another manifest name

        Returns:
            Version spec

        Raises:
            InvalidVersionError: If the result is not a parseable version or a SHA
            NotFoundError: If a symbolic version is absent from the manifest
            TransportError: If the manifest cannot be fetched
        """
        requested = requested.strip()
        if not requested:
            raise InvalidVersionError(requested, self.tool)

        if is_concrete_version(requested):
            tag = requested
        else:
            release = self.get_release(requested)
            logger.debug(f"{self.tool} release tag name: {release.tag_name}")
            tag = release.tag_name

        vspec = normalize_version(tag)
        logger.info(f"Use {vspec} version spec cache key for {tag}")
        return validate_version_spec(vspec, self.tool)

    def get_release(self, requested: str) -> GitHubRelease:
        version = DownloadVersion(requested, "", self.releases_url)
        return get_release(version, self.session, self.timeout, self.tool)
