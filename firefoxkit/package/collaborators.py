"""
Default collaborator implementations.

- JinjaTemplateRenderer: renders the Windows installer INI with Jinja2
- SubprocessInstallerRunner: runs the Firefox Windows installer/uninstaller
- AptPackageManager: installs missing Debian/Ubuntu libraries with apt-get
- NullPackageManager: used where no supported package manager exists
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path, PureWindowsPath
from typing import Any, Dict, List, Optional

from firefoxkit.core.exceptions import (
    DependencyInstallError,
    InstallerInvocationFailure,
    TemplateRenderError,
)
from firefoxkit.core.filesystem import atomic_write
from firefoxkit.core.interfaces import (
    InstallerRunner,
    SystemPackageManager,
    TemplateRenderer,
)

logger = logging.getLogger(__name__)

BUILTIN_SCOPE = "firefoxkit"
BUILTIN_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

# Shared libraries Firefox needs on Debian/Ubuntu hosts
FIREFOX_LIBRARIES = [
    "libasound2",
    "libgtk2.0-0",
    "libgtk-3-0",
    "libdbus-glib-1-2",
    "libxt6",
    "libx11-xcb-dev",
]


# =============================================================================
# Template Rendering
# =============================================================================


class JinjaTemplateRenderer(TemplateRenderer):
    """
    Render templates with Jinja2.

    The 'firefoxkit' scope resolves to the built-in templates; any other
    scope is treated as a template directory.
    """

    def _template_dir(self, scope: str) -> Path:
        if scope == BUILTIN_SCOPE:
            return BUILTIN_TEMPLATE_DIR

        template_dir = Path(scope)
        if not template_dir.is_dir():
            raise TemplateRenderError(f"Template directory not found: {template_dir}")
        return template_dir

    def render(
        self,
        template_source: str,
        variables: Dict[str, Any],
        scope: str,
        destination: Path,
    ) -> Path:
        from jinja2 import Environment, FileSystemLoader, StrictUndefined
        from jinja2 import TemplateError

        template_dir = self._template_dir(scope)
        env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

        try:
            template = env.get_template(template_source)
            content = template.render(variables=variables, **variables)
        except TemplateError as e:
            raise TemplateRenderError(
                f"Failed to render template {template_source} from {template_dir}: {e}"
            ) from e

        destination = Path(destination)
        atomic_write(destination, content)
        logger.debug(f"Rendered {template_source} to {destination}")
        return destination


# =============================================================================
# Windows Installer
# =============================================================================


class SubprocessInstallerRunner(InstallerRunner):
    """
    Run the Firefox Windows installer as a subprocess.

    Installs run ``<installer> <options>``; removals run the uninstaller
    shipped inside the install directory.
    """

    def run(
        self,
        installer_path: Optional[Path],
        display_name: str,
        options: str,
        action: str,
        install_path: Optional[str] = None,
    ) -> None:
        if action == "install":
            if installer_path is None:
                raise ValueError("An installer is required to install")
            command = f'"{installer_path}" {options}'.strip()
        elif action == "remove":
            if not install_path:
                raise ValueError("An install path is required to remove")
            uninstaller = PureWindowsPath(install_path) / "uninstall" / "helper.exe"
            command = f'"{uninstaller}" /S'
        else:
            raise ValueError(f"Unknown installer action: {action}")

        logger.info(f"Running installer ({action}) for {display_name}")
        logger.debug(f"Command: {command}")

        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise InstallerInvocationFailure(command, -1, str(e)) from e

        if result.returncode != 0:
            raise InstallerInvocationFailure(
                command, result.returncode, result.stdout + result.stderr
            )


# =============================================================================
# System Package Managers
# =============================================================================


class AptPackageManager(SystemPackageManager):
    """Install Debian/Ubuntu packages that are not already installed."""

    def is_installed(self, package: str) -> bool:
        """Check whether dpkg reports a package as installed."""
        try:
            result = subprocess.run(
                ["dpkg-query", "-W", "-f=${Status}", package],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.debug(f"dpkg-query failed for {package}: {e}")
            return False

        return result.returncode == 0 and "install ok installed" in result.stdout

    def ensure_installed(self, packages: List[str]) -> None:
        missing = [package for package in packages if not self.is_installed(package)]
        if not missing:
            logger.debug("All required system packages are installed")
            return

        cmd = ["apt-get", "install", "-y", *missing]
        env = dict(os.environ, DEBIAN_FRONTEND="noninteractive")
        logger.info(f"Installing system packages: {' '.join(missing)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        except OSError as e:
            raise DependencyInstallError(
                f"Failed to execute apt-get: {e}\nCommand: {' '.join(cmd)}"
            ) from e

        if result.returncode != 0:
            raise DependencyInstallError(
                f"apt-get exited with code {result.returncode}\n"
                f"Command: {' '.join(cmd)}\n{result.stderr.strip()}"
            )


class NullPackageManager(SystemPackageManager):
    """Package manager for hosts where dependencies are managed elsewhere."""

    def ensure_installed(self, packages: List[str]) -> None:
        logger.debug(f"No package manager available, skipping: {' '.join(packages)}")


def detect_package_manager() -> SystemPackageManager:
    """
    Pick the system package manager for the current host.

    Returns:
        AptPackageManager if apt-get is available, otherwise NullPackageManager
    """
    if shutil.which("apt-get"):
        return AptPackageManager()

    logger.info("apt-get not found; system library dependencies will not be managed")
    return NullPackageManager()


__all__ = [
    "FIREFOX_LIBRARIES",
    "JinjaTemplateRenderer",
    "SubprocessInstallerRunner",
    "AptPackageManager",
    "NullPackageManager",
    "detect_package_manager",
]
