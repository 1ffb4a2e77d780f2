"""
Firefox package lifecycle for FirefoxKit.

Available Components:
--------------------
- PackageSpec: Desired package (version, language, paths, links)
- locate: Download URL and cache filename for a spec
- CacheFreshnessGuard: Splay-window check for cached downloads
- InstallDecisionEngine: Decides install, upgrade, remove, or no-op
- PosixInstallExecutor / WindowsInstallExecutor: Apply decisions
- FirefoxPackage: Runs actions end to end

Example Usage:
-------------
    from firefoxkit.core.platform import detect_platform
    from firefoxkit.package import FirefoxPackage, PackageSpec

    platform = detect_platform()
    spec = PackageSpec.create("38.0", platform, language="de")
    result = FirefoxPackage.create(spec, platform).upgrade()
    print(result.summary)
"""

from .spec import Action, PackageSpec
from .locator import ArtifactLocation, locate
from .cache import CachedArtifact, CacheFreshnessGuard, is_fresh
from .decision import Decision, InstallDecisionEngine, InstallState, Operation
from .executor import (
    InstallExecutor,
    PosixInstallExecutor,
    WindowsInstallExecutor,
    select_executor,
)
from .provider import ActionResult, FirefoxPackage

__all__ = [
    "Action",
    "PackageSpec",
    "ArtifactLocation",
    "locate",
    "CachedArtifact",
    "CacheFreshnessGuard",
    "is_fresh",
    "Decision",
    "InstallDecisionEngine",
    "InstallState",
    "Operation",
    "InstallExecutor",
    "PosixInstallExecutor",
    "WindowsInstallExecutor",
    "select_executor",
    "ActionResult",
    "FirefoxPackage",
]
