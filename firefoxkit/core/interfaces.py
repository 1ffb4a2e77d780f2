"""
Collaborator interfaces for FirefoxKit.

The install logic depends on these abstract interfaces rather than on
concrete network, templating, installer, or package manager code, so each
collaborator can be replaced (or mocked in tests) independently.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional


class Fetcher(ABC):
    """Transfers an artifact from a URL to a local path."""

    @abstractmethod
    def fetch(self, url: str, dest_path: Path, checksum: Optional[str] = None) -> None:
        """
        Fetch an artifact.

        Args:
            url: Source URL
            dest_path: Local destination file
            checksum: Expected SHA256 hex digest, if any

        Raises:
            TransferError: If the transfer fails
            ChecksumMismatch: If the fetched file does not match checksum
        """
        pass


class TemplateRenderer(ABC):
    """Renders a template to a file (Windows installer INI)."""

    @abstractmethod
    def render(
        self,
        template_source: str,
        variables: Dict[str, Any],
        scope: str,
        destination: Path,
    ) -> Path:
        """
        Render a template.

        Args:
            template_source: Template name within the scope
            variables: Template variables
            scope: Where to look up the template
            destination: File to write

        Returns:
            Path of the rendered file
        """
        pass


class InstallerRunner(ABC):
    """Runs the Windows installer."""

    @abstractmethod
    def run(
        self,
        installer_path: Optional[Path],
        display_name: str,
        options: str,
        action: str,
        install_path: Optional[str] = None,
    ) -> None:
        """
        Install or remove a package with the Windows installer.

        Args:
            installer_path: Downloaded installer (None for removal)
            display_name: Name the package registers under
            options: Installer command line options
            action: 'install' or 'remove'
            install_path: Directory of the installed package

        Raises:
            InstallerInvocationFailure: If the installer exits non-zero
        """
        pass


class SystemPackageManager(ABC):
    """Installs operating system packages required by Firefox."""

    @abstractmethod
    def ensure_installed(self, packages: List[str]) -> None:
        """
        Make sure the given system packages are installed.

        Args:
            packages: System package names

        Raises:
            DependencyInstallError: If installation fails
        """
        pass


__all__ = [
    "Fetcher",
    "TemplateRenderer",
    "InstallerRunner",
    "SystemPackageManager",
]
