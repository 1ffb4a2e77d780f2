"""
Install executors.

Apply a decided install or removal on the host:

- PosixInstallExecutor: installs library dependencies, extracts the
  tarball into the install path (dropping the archive's top-level
  directory), and links each requested path to ``<install_path>/firefox``.
- WindowsInstallExecutor: renders an installer INI and runs the installer
  silently; removal runs the uninstaller.

Executors record the install in the state store only after every step
succeeded, and clear the record only after a successful removal.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from firefoxkit.core.filesystem import extract_archive, safe_rmtree
from firefoxkit.core.interfaces import (
    InstallerRunner,
    SystemPackageManager,
    TemplateRenderer,
)
from firefoxkit.core.linking import LinkManager
from firefoxkit.core.platform import PlatformFamily, ResolvedPlatform
from firefoxkit.core.state import InstalledRecord, InstalledStateStore
from firefoxkit.core.version import windows_long_version
from firefoxkit.package.collaborators import FIREFOX_LIBRARIES
from firefoxkit.package.spec import PackageSpec

logger = logging.getLogger(__name__)


def windows_display_name(long_version: str, language: str) -> str:
    """
    Name the Firefox installer registers a build under.

    Example:
        >>> windows_display_name("38.0 ESR", "en-US")
        'Mozilla Firefox 38.0 ESR (x86 en-US)'
    """
    return f"Mozilla Firefox {long_version} (x86 {language})"


class InstallExecutor(ABC):
    """Applies install and remove operations for one platform family."""

    def __init__(self, state_store: InstalledStateStore):
        self.state_store = state_store

    @abstractmethod
    def install(self, spec: PackageSpec, artifact_path: Path) -> InstalledRecord:
        """
        Install a downloaded artifact.

        Args:
            spec: Desired package
            artifact_path: Downloaded artifact

        Returns:
            The recorded install
        """
        pass

    @abstractmethod
    def remove(self, spec: PackageSpec, record: InstalledRecord) -> None:
        """Remove a recorded install."""
        pass

    def relink(self, spec: PackageSpec) -> List[str]:
        """
        Make sure the spec's links point at the installed executable.

        Returns:
            Links that were created or changed
        """
        return []


class PosixInstallExecutor(InstallExecutor):
    """Tarball-based installs for Linux and other POSIX hosts."""

    def __init__(
        self,
        state_store: InstalledStateStore,
        package_manager: SystemPackageManager,
        link_manager: Optional[LinkManager] = None,
        libraries: Optional[List[str]] = None,
    ):
        super().__init__(state_store)
        self.package_manager = package_manager
        self.link_manager = link_manager or LinkManager()
        self.libraries = list(FIREFOX_LIBRARIES if libraries is None else libraries)

    def install(self, spec: PackageSpec, artifact_path: Path) -> InstalledRecord:
        self.package_manager.ensure_installed(self.libraries)

        install_path = Path(spec.install_path)
        logger.info(f"Extracting {artifact_path} to {install_path}")
        extract_archive(artifact_path, install_path, strip_components=1)

        self.relink(spec)
        return self.state_store.record(spec.version, spec.language, spec.install_path)

    def relink(self, spec: PackageSpec) -> List[str]:
        target = Path(spec.install_path) / "firefox"
        changed = []
        for link in spec.links:
            if self.link_manager.create_link(Path(link), target, force=True):
                changed.append(link)
        return changed

    def remove(self, spec: PackageSpec, record: InstalledRecord) -> None:
        target = Path(record.path) / "firefox"
        for link in spec.links:
            if self.link_manager.points_to(Path(link), target):
                self.link_manager.remove_link(Path(link))

        if safe_rmtree(record.path):
            logger.info(f"Removed {record.path}")
        else:
            logger.info(f"Install path already gone: {record.path}")

        self.state_store.remove(record.version, record.language)


class WindowsInstallExecutor(InstallExecutor):
    """Installer-based installs for Windows hosts."""

    def __init__(
        self,
        state_store: InstalledStateStore,
        renderer: TemplateRenderer,
        runner: InstallerRunner,
        cache_dir: Path,
    ):
        super().__init__(state_store)
        self.renderer = renderer
        self.runner = runner
        self.cache_dir = Path(cache_dir)

    def install(self, spec: PackageSpec, artifact_path: Path) -> InstalledRecord:
        # The filename carries the ESR marker, e.g. '38.0esr.exe'
        long_version = windows_long_version(
            Path(artifact_path).name, fallback=spec.version
        )
        display_name = windows_display_name(long_version, spec.language)

        rendered_ini = self.renderer.render(
            spec.windows_ini_source,
            spec.windows_ini_content,
            spec.windows_ini_scope,
            self.cache_dir / f"firefox-{spec.version}.ini",
        )

        self.runner.run(
            artifact_path,
            display_name,
            f"/S /INI={rendered_ini}",
            "install",
            install_path=spec.install_path,
        )

        if spec.links:
            logger.warning("Links are not supported on Windows, ignoring them")

        return self.state_store.record(
            spec.version, spec.language, spec.install_path, long_version
        )

    def remove(self, spec: PackageSpec, record: InstalledRecord) -> None:
        long_version = record.recorded_version or windows_long_version(spec.version)
        display_name = windows_display_name(long_version, spec.language)

        self.runner.run(None, display_name, "", "remove", install_path=record.path)
        self.state_store.remove(record.version, record.language)


def select_executor(
    platform: ResolvedPlatform,
    state_store: InstalledStateStore,
    package_manager: SystemPackageManager,
    renderer: TemplateRenderer,
    runner: InstallerRunner,
    cache_dir: Path,
) -> InstallExecutor:
    """Pick the executor variant for a platform family."""
    if platform.family is PlatformFamily.WINDOWS:
        return WindowsInstallExecutor(state_store, renderer, runner, cache_dir)
    return PosixInstallExecutor(state_store, package_manager)


__all__ = [
    "InstallExecutor",
    "PosixInstallExecutor",
    "WindowsInstallExecutor",
    "select_executor",
    "windows_display_name",
]
