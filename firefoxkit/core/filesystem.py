"""
File system utilities for FirefoxKit.

This module provides the file operations the installer needs:
- Tarball extraction with leading path component stripping
- Directory traversal protection for archive members
- Atomic writes (state file)
- Safe directory tree removal
- Modification time updates for cache freshness checks
"""

import copy
import os
import shutil
import sys
import tarfile
import tempfile
import time
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional, Union

from firefoxkit.core.exceptions import ExtractionFailure, FirefoxKitError

IS_WINDOWS = os.name == "nt"

_TAR_SUFFIXES = (".tar.bz2", ".tbz2", ".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar")


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(FirefoxKitError):
    """Base exception for filesystem operations."""

    pass


class UnsupportedArchiveFormat(ExtractionFailure):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ExtractionFailure):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/opt/firefox/38.0_en-US"), Path("/opt/firefox"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _strip_member(
    member: tarfile.TarInfo, strip_components: int
) -> Optional[tarfile.TarInfo]:
    """
    Remove leading path components from an archive member.

    Returns:
        Renamed copy of the member, or None if nothing remains of its path
    """
    if strip_components <= 0:
        return member

    parts = PurePosixPath(member.name).parts
    if len(parts) <= strip_components:
        return None

    stripped = copy.copy(member)
    stripped.name = "/".join(parts[strip_components:])

    if member.islnk():
        link_parts = PurePosixPath(member.linkname).parts
        if len(link_parts) <= strip_components:
            return None
        stripped.linkname = "/".join(link_parts[strip_components:])

    return stripped


def _iter_members(
    tar: tarfile.TarFile, destination: Path, strip_components: int
) -> Iterator[tarfile.TarInfo]:
    """Yield validated, stripped members of a tar archive."""
    for member in tar.getmembers():
        stripped = _strip_member(member, strip_components)
        if stripped is None:
            continue
        _validate_archive_path(stripped.name, destination)
        yield stripped


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    strip_components: int = 0,
) -> None:
    """
    Extract a tarball to a destination directory.

    Compression is detected from the archive contents, so a cached
    '.tar.bz2' that actually holds another tar compression still extracts.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)
        strip_components: Number of leading path components to drop from
            each member, like ``tar --strip-components``

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        InsecureArchiveError: If archive contains malicious paths
        ExtractionFailure: If extraction fails

    Example:
        >>> extract_archive('38.0.tar.bz2', '/opt/firefox/38.0_en-US', strip_components=1)
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ExtractionFailure(f"Archive not found: {archive_path}")

    if not archive_path.name.lower().endswith(_TAR_SUFFIXES):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.name}. "
            "Supported: .tar.bz2, .tar.gz, .tar.xz, .tar"
        )

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:*") as tar:
            members = list(_iter_members(tar, destination, strip_components))

            # Extract with filter for security (Python 3.12+)
            # For older Python, we've already validated paths above
            if sys.version_info >= (3, 12):
                tar.extractall(destination, members=members, filter="data")
            else:
                tar.extractall(destination, members=members)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ExtractionFailure(f"Failed to extract {archive_path}: {e}") from e


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(path: Union[str, Path]) -> bool:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove

    Returns:
        True if a directory was removed, False if it did not exist

    Raises:
        FilesystemError: If path is not a directory or deletion fails

    Example:
        >>> safe_rmtree('/opt/firefox/38.0_en-US')
    """
    path = Path(path).resolve()

    if not path.exists():
        return False

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e

    return True


def touch(path: Union[str, Path], timestamp: Optional[float] = None) -> None:
    """
    Set a file's access and modification times.

    Args:
        path: Existing file
        timestamp: POSIX timestamp to set (current time if None)
    """
    if timestamp is None:
        timestamp = time.time()
    os.utime(path, (timestamp, timestamp))


__all__ = [
    "FilesystemError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "is_relative_to",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
    "touch",
]
