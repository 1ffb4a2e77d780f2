"""
Action dispatch for the Firefox package.

FirefoxPackage runs one action (install, upgrade, remove) for one package
spec on one host:

    decide -> (locate -> freshness check -> fetch -> touch) -> execute

Example:
    >>> platform = detect_platform()
    >>> spec = PackageSpec.create("38.0", platform, link="/usr/bin/firefox")
    >>> package = FirefoxPackage.create(spec, platform)
    >>> result = package.install()
    >>> print(result.summary)
    installing 38.0 en-US
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from firefoxkit.core.directory import ensure_directory, get_cache_dir, get_state_file
from firefoxkit.core.download import HttpFetcher, log_progress, verify_checksum
from firefoxkit.core.exceptions import NothingToRemove
from firefoxkit.core.interfaces import Fetcher
from firefoxkit.core.platform import ResolvedPlatform
from firefoxkit.core.state import InstalledRecord, InstalledStateStore
from firefoxkit.package.cache import CacheFreshnessGuard
from firefoxkit.package.collaborators import (
    JinjaTemplateRenderer,
    NullPackageManager,
    SubprocessInstallerRunner,
    detect_package_manager,
)
from firefoxkit.package.decision import (
    Decision,
    InstallDecisionEngine,
    InstallState,
    Operation,
)
from firefoxkit.package.executor import InstallExecutor, select_executor
from firefoxkit.package.locator import locate
from firefoxkit.package.spec import Action, PackageSpec

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """
    Outcome of an action.

    Attributes:
        action: Requested action
        operation: What the action resolved to
        changed: Whether the host was modified
        summary: Human-readable converge summary
        downloaded: Whether the artifact was fetched
        record: Recorded install after the action (None after a removal)
        links: Links created or changed
    """

    action: Action
    operation: Operation
    changed: bool
    summary: str
    downloaded: bool = False
    record: Optional[InstalledRecord] = None
    links: List[str] = field(default_factory=list)


class FirefoxPackage:
    """
    Installs, upgrades, and removes one Firefox package.

    Args:
        spec: Desired package
        platform: Target platform
        state_store: Recorded installs
        cache_dir: Download cache directory
        fetcher: Downloads artifacts
        executor: Applies installs and removals
        engine: Decides what an action has to do
        guard: Cache freshness check
    """

    def __init__(
        self,
        spec: PackageSpec,
        platform: ResolvedPlatform,
        state_store: InstalledStateStore,
        cache_dir: Path,
        fetcher: Fetcher,
        executor: InstallExecutor,
        engine: Optional[InstallDecisionEngine] = None,
        guard: Optional[CacheFreshnessGuard] = None,
    ):
        self.spec = spec
        self.platform = platform
        self.state_store = state_store
        self.cache_dir = Path(cache_dir)
        self.fetcher = fetcher
        self.executor = executor
        self.engine = engine or InstallDecisionEngine(state_store)
        self.guard = guard or CacheFreshnessGuard()

    @classmethod
    def create(
        cls,
        spec: PackageSpec,
        platform: ResolvedPlatform,
        cache_dir: Optional[Path] = None,
        state_file: Optional[Path] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> "FirefoxPackage":
        """Build a package with the default collaborators for the platform."""
        cache_dir = get_cache_dir(cache_dir)
        state_store = InstalledStateStore(get_state_file(state_file))

        package_manager = (
            NullPackageManager() if platform.is_windows else detect_package_manager()
        )
        executor = select_executor(
            platform,
            state_store,
            package_manager,
            JinjaTemplateRenderer(),
            SubprocessInstallerRunner(),
            cache_dir,
        )

        return cls(
            spec,
            platform,
            state_store,
            cache_dir,
            fetcher or HttpFetcher(progress_callback=log_progress),
            executor,
        )

    def install(self) -> ActionResult:
        return self.run_action(Action.INSTALL)

    def upgrade(self) -> ActionResult:
        return self.run_action(Action.UPGRADE)

    def remove(self) -> ActionResult:
        return self.run_action(Action.REMOVE)

    def run_action(self, action: Action) -> ActionResult:
        """
        Run an action.

        Args:
            action: Action to run

        Returns:
            ActionResult describing what changed

        Raises:
            MalformedVersion: If the target version is malformed
            FetchError: If the artifact could not be downloaded or verified
            ExtractionFailure: If the archive could not be extracted
            InstallerInvocationFailure: If the Windows installer failed
        """
        try:
            decision = self.engine.decide(action, self.spec, self.platform)
        except NothingToRemove as e:
            logger.warning(str(e))
            return ActionResult(action, Operation.NOOP, False, str(e))

        logger.debug(f"{action.value}: {decision.operation.value} ({decision.reason})")

        if decision.operation is Operation.REMOVE:
            return self._remove(decision)
        if decision.is_noop:
            return self._skip(decision)
        return self._install(decision)

    def fetch_artifact(self) -> Tuple[Path, bool]:
        """
        Make sure the artifact is in the cache.

        Returns:
            (cache path, whether it was downloaded)
        """
        location = locate(self.spec, self.platform)
        cache_path = self.cache_dir / location.cache_filename

        if self.guard.is_fresh(cache_path, self.spec.splay_seconds):
            if self.spec.checksum and not verify_checksum(
                cache_path, self.spec.checksum
            ):
                logger.warning(f"Cached {cache_path} fails its checksum, fetching again")
            else:
                logger.info(f"Using cached {cache_path}")
                return cache_path, False

        ensure_directory(self.cache_dir)
        logger.debug(f"Fetching {location.download_url} to {cache_path}")
        self.fetcher.fetch(location.download_url, cache_path, self.spec.checksum)
        self.guard.mark_fetched(cache_path)
        return cache_path, True

    def _install(self, decision: Decision) -> ActionResult:
        spec = self.spec
        if decision.action is Action.UPGRADE:
            summary = f"upgrading Firefox to version {spec.version}"
        else:
            summary = f"installing {spec.version} {spec.language}"
        logger.info(summary)

        artifact_path, downloaded = self.fetch_artifact()
        record = self.executor.install(spec, artifact_path)

        # The replaced version no longer owns the install path
        previous = decision.record
        if (
            previous is not None
            and (previous.version, previous.language) != spec.key
            and previous.path == record.path
        ):
            self.state_store.remove(previous.version, previous.language)

        return ActionResult(
            decision.action,
            decision.operation,
            True,
            summary,
            downloaded=downloaded,
            record=record,
            links=list(spec.links),
        )

    def _skip(self, decision: Decision) -> ActionResult:
        logger.info(f"Skipping {decision.action.value}: {decision.reason}")

        links = []
        if decision.state is InstallState.MATCHING:
            links = self.executor.relink(self.spec)

        return ActionResult(
            decision.action,
            decision.operation,
            bool(links),
            decision.reason,
            record=decision.record,
            links=links,
        )

    def _remove(self, decision: Decision) -> ActionResult:
        summary = f"removing {self.spec.version}"
        logger.info(summary)
        self.executor.remove(self.spec, decision.record)
        return ActionResult(decision.action, decision.operation, True, summary)


__all__ = ["ActionResult", "FirefoxPackage"]
