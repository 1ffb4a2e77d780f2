"""
Platform resolution for FirefoxKit.

This module maps raw host facts (OS family and machine architecture) to the
canonical platform tag used by the Mozilla download service, and detects
those facts for the current host.

Features:
- Host fact detection (OS family, machine architecture)
- Canonical platform tags ('linux64', 'linux', 'win64', 'win', 'osx')
- Pass-through of unknown OS families, so resolution never fails
- Artifact file extension per platform tag

Usage:
    from firefoxkit.core.platform import detect_host_facts, resolve_platform

    facts = detect_host_facts()
    platform_info = resolve_platform(facts.os_family, facts.machine)
    print(platform_info.canonical_tag)  # 'linux64'
"""

import functools
import platform
import re
from dataclasses import dataclass
from enum import Enum

_DARWIN_PATTERN = re.compile(r"^universal\.x86_64-darwin\d{2}$")


class PlatformFamily(Enum):
    """Families of operating systems the installer distinguishes."""

    LINUX = "linux"
    WINDOWS = "windows"
    OSX = "osx"
    OTHER = "other"


@dataclass(frozen=True)
class HostFacts:
    """
    Raw facts about the host.

    Attributes:
        os_family: Lowercase OS family ('linux', 'windows', 'darwin', ...)
        machine: Machine architecture ('x86_64', 'i686', 'aarch64', ...)
    """

    os_family: str
    machine: str


@dataclass(frozen=True)
class ResolvedPlatform:
    """
    Platform information derived from host facts.

    Attributes:
        family: Operating system family
        bitness: 64 for x86_64 hosts, 32 otherwise
        canonical_tag: Tag used in download URLs (e.g. 'linux64', 'win', 'osx')
    """

    family: PlatformFamily
    bitness: int
    canonical_tag: str

    @property
    def is_windows(self) -> bool:
        """Whether artifacts for this platform are Windows installers."""
        return "win" in self.canonical_tag

    @property
    def artifact_extension(self) -> str:
        """
        Get the artifact file extension for this platform.

        Example:
            >>> resolve_platform("windows", "x86_64").artifact_extension
            '.exe'
            >>> resolve_platform("linux", "x86_64").artifact_extension
            '.tar.bz2'
        """
        return ".exe" if self.is_windows else ".tar.bz2"

    def __str__(self) -> str:
        return f"{self.canonical_tag} ({self.family.value}, {self.bitness}-bit)"


def resolve_platform(os_family: str, machine_arch: str) -> ResolvedPlatform:
    """
    Resolve host facts to a canonical platform.

    Unknown OS families are passed through verbatim as the tag.

    Args:
        os_family: OS family reported by the host (e.g. 'linux', 'windows')
        machine_arch: Machine architecture (e.g. 'x86_64', 'i686')

    Returns:
        ResolvedPlatform for the given facts

    Example:
        >>> resolve_platform("linux", "x86_64").canonical_tag
        'linux64'
        >>> resolve_platform("windows", "i686").canonical_tag
        'win'
    """
    os_family = str(os_family)
    bitness = 64 if machine_arch == "x86_64" else 32

    if os_family == "linux":
        tag = "linux64" if bitness == 64 else "linux"
        return ResolvedPlatform(PlatformFamily.LINUX, bitness, tag)

    if os_family == "windows":
        tag = "win64" if bitness == 64 else "win"
        return ResolvedPlatform(PlatformFamily.WINDOWS, bitness, tag)

    if os_family == "darwin" or _DARWIN_PATTERN.match(os_family):
        return ResolvedPlatform(PlatformFamily.OSX, bitness, "osx")

    return ResolvedPlatform(PlatformFamily.OTHER, bitness, os_family)


@functools.lru_cache(maxsize=1)
def detect_host_facts() -> HostFacts:
    """
    Detect OS family and machine architecture of the current host.

    This function is cached - it only runs detection once per process.

    Returns:
        HostFacts for the current host
    """
    return HostFacts(os_family=_detect_os_family(), machine=_detect_machine())


def _detect_os_family() -> str:
    """
    Detect the OS family.

    Returns:
        'linux', 'windows', 'darwin', or the lowercase system name
    """
    return platform.system().lower()


def _detect_machine() -> str:
    """
    Detect machine architecture.

    Windows reports 64-bit hosts as 'AMD64'; those are normalized to
    'x86_64' so tags match across operating systems.

    Returns:
        Normalized machine architecture
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("i386", "i686", "x86"):
        return "i686"
    else:
        # Return original for other architectures
        return machine


def detect_platform() -> ResolvedPlatform:
    """
    Resolve the platform of the current host.

    Returns:
        ResolvedPlatform for the current host
    """
    facts = detect_host_facts()
    return resolve_platform(facts.os_family, facts.machine)


def clear_platform_cache():
    """
    Clear the host fact detection cache.

    This forces the next call to detect_host_facts() to re-detect.
    """
    detect_host_facts.cache_clear()


__all__ = [
    "PlatformFamily",
    "HostFacts",
    "ResolvedPlatform",
    "resolve_platform",
    "detect_host_facts",
    "detect_platform",
    "clear_platform_cache",
]
