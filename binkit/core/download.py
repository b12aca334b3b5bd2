"""
HTTP helpers built on requests.

This module provides:
- Session creation with the configured user agent
- Streaming file downloads
- JSON document fetching

No retry is attempted; each failure surfaces as a TransportError carrying
the URL (and status code when one was received).
"""

import logging
from pathlib import Path
from typing import Any, Optional

import requests
from requests.exceptions import RequestException

from binkit.core.exceptions import DownloadError, FileSystemError, TransportError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def create_session(user_agent: str) -> requests.Session:
    """Create an HTTP session identifying itself with user_agent."""
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    return session


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> Path:
    """
    Download a file from URL to destination.

    Args:
        url: URL to download from
        destination: Local path to save file
        session: HTTP session (default: a new plain session)
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If the transfer fails or the server returns >= 400
        FileSystemError: If the destination cannot be written
        ValueError: If URL is empty

    Example:
        >>> download_file(
        ...     "https://github.com/crazy-max/undock/releases/download/v0.7.0/undock_0.7.0_linux_amd64.tar.gz",
        ...     Path("/tmp/undock.tar.gz"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    if session is None:
        with requests.Session() as http:
            return _download(http, url, destination, timeout)
    return _download(session, url, destination, timeout)


def _download(http: requests.Session, url: str, destination: Path, timeout: int) -> Path:
    logger.debug(f"Downloading from {url}")

    try:
        response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
    except RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}", url=url) from e

    with response:
        if response.status_code >= 400:
            raise DownloadError(
                f"Failed to download {url}: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}", url=url) from e
        except OSError as e:
            raise FileSystemError(f"Failed to write {destination}: {e}") from e

    logger.debug(f"Download complete: {destination}")
    return destination


def fetch_json(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> Any:
    """
    GET a JSON document.

    Raises:
        TransportError: On network failure, status >= 400 (message carries
            URL, status code and body) or an unparseable body
    """
    if session is None:
        with requests.Session() as http:
            return _fetch_json(http, url, timeout)
    return _fetch_json(session, url, timeout)


def _fetch_json(http: requests.Session, url: str, timeout: int) -> Any:
    try:
        response = http.get(url, timeout=timeout)
    except RequestException as e:
        raise TransportError(f"Failed to fetch {url}: {e}", url=url) from e

    if response.status_code >= 400:
        raise TransportError(
            f"Failed to fetch {url} with status code {response.status_code}: "
            f"{response.text}",
            url=url,
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        raise TransportError(f"Invalid JSON document at {url}: {e}", url=url) from e
