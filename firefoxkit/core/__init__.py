"""
Core functionality for FirefoxKit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_global_dir,
    get_cache_dir,
    get_state_file,
    default_install_path,
    ensure_directory,
    DirectoryError,
)

from .platform import (
    PlatformFamily,
    ResolvedPlatform,
    resolve_platform,
    detect_platform,
    clear_platform_cache,
)

from .version import (
    ParsedVersion,
    parse_version,
    installed_version,
    windows_long_version,
)

from .state import (
    InstalledRecord,
    InstalledStateStore,
    StateError,
)

from .exceptions import (
    FirefoxKitError,
    MalformedVersion,
    FetchError,
    TransferError,
    ChecksumMismatch,
    ExtractionFailure,
    InstallerInvocationFailure,
    DependencyInstallError,
    TemplateRenderError,
    LinkError,
    NothingToRemove,
)

__all__ = [
    # Directory
    "get_global_dir",
    "get_cache_dir",
    "get_state_file",
    "default_install_path",
    "ensure_directory",
    "DirectoryError",
    # Platform
    "PlatformFamily",
    "ResolvedPlatform",
    "resolve_platform",
    "detect_platform",
    "clear_platform_cache",
    # Version
    "ParsedVersion",
    "parse_version",
    "installed_version",
    "windows_long_version",
    # State
    "InstalledRecord",
    "InstalledStateStore",
    "StateError",
    # Exceptions
    "FirefoxKitError",
    "MalformedVersion",
    "FetchError",
    "TransferError",
    "ChecksumMismatch",
    "ExtractionFailure",
    "InstallerInvocationFailure",
    "DependencyInstallError",
    "TemplateRenderError",
    "LinkError",
    "NothingToRemove",
]
