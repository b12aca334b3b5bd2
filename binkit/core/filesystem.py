"""
File system utilities for binkit.

This module provides the file operations the acquisition flow relies on:
- Archive extraction (zip, tar.gz) with path traversal checks
- File copy and executable permission fixing
- Directory creation and archiving of cache directories

Failures are raised as binkit exceptions carrying the offending path.
"""

import os
import shutil
import stat
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Sequence, Union

from binkit.core.exceptions import ExtractionError, FileSystemError

# Platform detection
IS_WINDOWS = os.name == "nt"

EXECUTABLE_MODE = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
)  # 0o755


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member stays inside the destination.

    Raises:
        ExtractionError: If the member escapes the destination directory
    """
    if os.path.isabs(path) or path.startswith(("/", "\\")):
        raise ExtractionError(f"Archive contains absolute path: {path}")

    target = (destination / path).resolve()
    if not target.is_relative_to(destination.resolve()):
        raise ExtractionError(f"Archive contains path outside destination: {path}")


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Extract a zip or tar.gz archive into a destination directory.

    The format is detected from the archive content, so downloaded files
    without an extension are handled too.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Returns:
        The destination directory

    Raises:
        ExtractionError: If the archive is missing, corrupt, unsupported or
            contains paths escaping the destination

    Example:
        >>> extract_archive('undock_0.7.0_linux_amd64.tar.gz', '/tmp/undock')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ExtractionError(f"Archive not found: {archive_path}")

    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Failed to create {destination}: {e}") from e

    try:
        if zipfile.is_zipfile(archive_path):
            _extract_zip(archive_path, destination)
        elif tarfile.is_tarfile(archive_path):
            _extract_tar(archive_path, destination, "r:*")
        else:
            raise ExtractionError(f"Unsupported archive format: {archive_path}")
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


def extract_zip(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """Extract a ZIP archive, failing if the file is not one."""
    archive_path = Path(archive_path)
    if not archive_path.exists() or not zipfile.is_zipfile(archive_path):
        raise ExtractionError(f"Not a zip archive: {archive_path}")
    return extract_archive(archive_path, destination)


def extract_tar(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """Extract a (compressed) tarball, failing if the file is not one."""
    archive_path = Path(archive_path)
    if not archive_path.exists() or not tarfile.is_tarfile(archive_path):
        raise ExtractionError(f"Not a tar archive: {archive_path}")
    return extract_archive(archive_path, destination)


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        # Validate all paths first
        for member in members:
            _validate_archive_path(member, destination)

        zf.extractall(destination)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def create_tar_gz(
    archive_path: Union[str, Path], sources: Sequence[Union[str, Path]]
) -> Path:
    """
    Pack paths into a gzip-compressed tarball.

    The i-th source is stored under the member name ``str(i)``, so the
    archive carries no absolute paths and can be restored into different
    locations with restore_tar_gz().

    Args:
        archive_path: Output archive path
        sources: Directories or files to include

    Returns:
        Path to the archive
    """
    archive_path = Path(archive_path)
    ensure_directory(archive_path.parent)

    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            for index, source in enumerate(sources):
                tar.add(Path(source), arcname=str(index))
    except OSError as e:
        raise FileSystemError(f"Failed to create archive {archive_path}: {e}") from e

    return archive_path


def restore_tar_gz(
    archive_path: Union[str, Path], destinations: Sequence[Union[str, Path]]
) -> None:
    """
    Unpack a tarball created by create_tar_gz() into destinations.

    The i-th destination receives what was stored from the i-th source.
    The archive is extracted into a scratch directory first, so members
    never land outside the destinations.

    Args:
        archive_path: Archive to restore
        destinations: Paths to restore into, in the order they were saved

    Raises:
        ExtractionError: If the archive is corrupt or lacks an entry
        FileSystemError: If a destination cannot be written
    """
    archive_path = Path(archive_path)

    with tempfile.TemporaryDirectory() as tmp:
        staging = extract_archive(archive_path, Path(tmp) / "restore")
        for index, destination in enumerate(destinations):
            member = staging / str(index)
            destination = Path(destination)
            if member.is_dir():
                copy_tree(member, destination)
            elif member.is_file():
                ensure_directory(destination.parent)
                copy_file(member, destination)
            else:
                raise ExtractionError(f"Archive {archive_path} has no entry for {destination}")


# ============================================================================
# Safe File Operations
# ============================================================================


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Raises:
        FileSystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Failed to create directory {path}: {e}") from e
    return path


def copy_file(source: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Copy a file, overwriting the destination.

    The copy is a plain write, not an atomic rename.

    Raises:
        FileSystemError: If the source is missing or the copy fails
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_file():
        raise FileSystemError(f"Source file not found: {source}")

    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise FileSystemError(f"Failed to copy {source} to {destination}: {e}") from e

    return destination


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> Path:
    """Recursively copy a directory, merging into an existing destination."""
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FileSystemError(f"Source is not a directory: {source}")

    try:
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise FileSystemError(f"Failed to copy {source} to {destination}: {e}") from e

    return destination


def make_executable(path: Union[str, Path]) -> None:
    """
    Set mode 0755 on a file. No-op on Windows.

    Raises:
        FileSystemError: If chmod fails
    """
    if IS_WINDOWS:
        return

    try:
        os.chmod(path, EXECUTABLE_MODE)
    except OSError as e:
        raise FileSystemError(f"Failed to set permissions on {path}: {e}") from e


__all__ = [
    "IS_WINDOWS",
    "EXECUTABLE_MODE",
    "extract_archive",
    "extract_zip",
    "extract_tar",
    "create_tar_gz",
    "restore_tar_gz",
    "ensure_directory",
    "copy_file",
    "copy_tree",
    "make_executable",
]
