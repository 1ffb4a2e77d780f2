"""
Directory layout for FirefoxKit.

Directory Structure:
    Global Directory (~/.firefoxkit/ or %USERPROFILE%\\.firefoxkit\\):
        - cache/          : Downloaded installers and tarballs
        - state.json      : Recorded installs keyed by version and language
        - state.json.lock : Lock guarding state updates

    Install Paths:
        - POSIX:   /opt/firefox/<version>_<language>
        - Windows: C:\\Program Files (x86)\\Mozilla Firefox\\<version>_<language>
"""

import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional

from firefoxkit.core.exceptions import FirefoxKitError

POSIX_INSTALL_ROOT = "/opt/firefox"
WINDOWS_INSTALL_ROOT = "C:\\Program Files (x86)\\Mozilla Firefox"


class DirectoryError(FirefoxKitError):
    """Base exception for directory-related errors."""

    pass


def get_global_dir() -> Path:
    """
    Get the platform-specific global FirefoxKit directory.

    Returns:
        Path: The global directory path.
            - Windows: %USERPROFILE%\\.firefoxkit
            - Linux/macOS: ~/.firefoxkit/

    Raises:
        DirectoryError: If USERPROFILE is not set on Windows
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine global directory."
            )
        return Path(user_profile) / ".firefoxkit"
    else:  # Linux/macOS
        return Path.home() / ".firefoxkit"


def get_cache_dir(override: Optional[Path] = None) -> Path:
    """Get the download cache directory."""
    if override is not None:
        return Path(override)
    return get_global_dir() / "cache"


def get_state_file(override: Optional[Path] = None) -> Path:
    """Get the path of the persisted install state file."""
    if override is not None:
        return Path(override)
    return get_global_dir() / "state.json"


def default_install_path(
    version: str,
    language: str,
    windows: bool,
    install_root: Optional[str] = None,
) -> str:
    """
    Build the default install path for a version and language.

    Args:
        version: Firefox version string (e.g. '38.0')
        language: Language code (e.g. 'en-US')
        windows: Build a Windows path instead of a POSIX one
        install_root: Directory holding all installs (platform default if None)

    Returns:
        Install path as a string in the target platform's syntax

    Example:
        >>> default_install_path("38.0", "en-US", windows=False)
        '/opt/firefox/38.0_en-US'
    """
    leaf = f"{version}_{language}"
    if windows:
        return str(PureWindowsPath(install_root or WINDOWS_INSTALL_ROOT) / leaf)
    return str(PurePosixPath(install_root or POSIX_INSTALL_ROOT) / leaf)


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents if missing."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = [
    "DirectoryError",
    "POSIX_INSTALL_ROOT",
    "WINDOWS_INSTALL_ROOT",
    "get_global_dir",
    "get_cache_dir",
    "get_state_file",
    "default_install_path",
    "ensure_directory",
]
