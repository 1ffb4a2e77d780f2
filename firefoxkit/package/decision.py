"""
Install decisions for FirefoxKit.

The decision engine compares the desired state (a PackageSpec) with the
observed state (recorded installs and, on POSIX, the executable already at
the install path) and decides what an action has to do.

States per (version, language) key:
    absent                  nothing installed for the key or at its path
    installed-matching      the requested version is installed
    installed-mismatching   another version occupies the install path

Transitions:
    absent       + install/upgrade -> install
    matching     + install/upgrade -> no-op
    mismatching  + upgrade         -> install (replaces the previous version)
    mismatching  + install         -> no-op (only upgrade replaces versions)
    any          + remove          -> remove, or NothingToRemove if unrecorded
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from firefoxkit.core.exceptions import NothingToRemove
from firefoxkit.core.platform import ResolvedPlatform
from firefoxkit.core.state import InstalledRecord, InstalledStateStore
from firefoxkit.core.version import (
    ABSENT,
    ParsedVersion,
    installed_version,
    parse_version,
)
from firefoxkit.package.spec import Action, PackageSpec

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """Observed state of a (version, language) key."""

    ABSENT = "absent"
    MATCHING = "installed-matching"
    MISMATCHING = "installed-mismatching"


class Operation(Enum):
    """What an action resolves to."""

    INSTALL = "install"
    REMOVE = "remove"
    NOOP = "no-op"


@dataclass(frozen=True)
class Observation:
    """
    Observed install state.

    Attributes:
        state: Classified state
        record: Recorded install the classification is based on, if any
        installed: Version found installed (0.0 if none)
    """

    state: InstallState
    record: Optional[InstalledRecord] = None
    installed: ParsedVersion = ABSENT


@dataclass(frozen=True)
class Decision:
    """
    Outcome of deciding an action.

    Attributes:
        action: Requested action
        operation: What has to be done
        state: Observed state the decision was based on
        reason: Human-readable explanation
        record: Recorded install involved (the one to remove, or the
            previous version being replaced)
    """

    action: Action
    operation: Operation
    state: InstallState
    reason: str
    record: Optional[InstalledRecord] = None

    @property
    def requires_install(self) -> bool:
        return self.operation is Operation.INSTALL

    @property
    def is_noop(self) -> bool:
        return self.operation is Operation.NOOP


class InstallDecisionEngine:
    """
    Decides install, upgrade, remove, or no-op for a package spec.

    Args:
        state_store: Store of recorded installs
        version_probe: Returns the version of the executable at a path
            (0.0 when nothing is installed there)
    """

    def __init__(
        self,
        state_store: InstalledStateStore,
        version_probe: Callable[[Path], ParsedVersion] = installed_version,
    ):
        self.state_store = state_store
        self.version_probe = version_probe

    def observe(self, spec: PackageSpec, platform: ResolvedPlatform) -> Observation:
        """
        Classify the current install state for a spec.

        Raises:
            MalformedVersion: If spec.version holds no version
        """
        desired = parse_version(spec.version, strict=True)

        record = self.state_store.get(spec.version, spec.language)
        if record is not None:
            recorded = parse_version(record.recorded_version or record.version)
            if desired.is_latest_alias or recorded == desired:
                return Observation(InstallState.MATCHING, record, recorded)
            return Observation(InstallState.MISMATCHING, record, recorded)

        # Another version recorded at the same path for this language
        for other in self.state_store.find_by_path(spec.install_path):
            if other.language == spec.language:
                recorded = parse_version(other.recorded_version or other.version)
                if not desired.is_latest_alias and recorded == desired:
                    return Observation(InstallState.MATCHING, other, recorded)
                return Observation(InstallState.MISMATCHING, other, recorded)

        if not platform.is_windows and not desired.is_latest_alias:
            executable = Path(spec.install_path) / "firefox"
            found = self.version_probe(executable)
            if not found.is_absent:
                state = (
                    InstallState.MATCHING
                    if found == desired
                    else InstallState.MISMATCHING
                )
                return Observation(state, None, found)

        return Observation(InstallState.ABSENT)

    def decide(
        self, action: Action, spec: PackageSpec, platform: ResolvedPlatform
    ) -> Decision:
        """
        Decide what an action has to do.

        Args:
            action: Requested action
            spec: Desired state
            platform: Target platform

        Returns:
            Decision for the action

        Raises:
            MalformedVersion: If an install/upgrade target version is malformed
            NothingToRemove: If a remove action has no recorded install
        """
        if action is Action.REMOVE:
            record = self.state_store.get(spec.version, spec.language)
            if record is None:
                raise NothingToRemove(spec.version, spec.language)
            return Decision(
                action,
                Operation.REMOVE,
                InstallState.MATCHING,
                f"{spec.version} ({spec.language}) is recorded at {record.path}",
                record,
            )

        observation = self.observe(spec, platform)
        logger.debug(
            f"Observed {observation.state.value} for {spec.version} "
            f"({spec.language}), installed {observation.installed}"
        )

        if observation.state is InstallState.ABSENT:
            return Decision(
                action,
                Operation.INSTALL,
                observation.state,
                f"{spec.version} ({spec.language}) is not installed",
            )

        if observation.state is InstallState.MATCHING:
            return Decision(
                action,
                Operation.NOOP,
                observation.state,
                f"{spec.version} ({spec.language}) is already installed",
                observation.record,
            )

        if action is Action.UPGRADE:
            return Decision(
                action,
                Operation.INSTALL,
                observation.state,
                f"replacing {observation.installed} at {_where(observation, spec)} "
                f"with {spec.version}",
                observation.record,
            )

        return Decision(
            action,
            Operation.NOOP,
            observation.state,
            f"{observation.installed} is installed at {_where(observation, spec)}; "
            f"use upgrade to replace it",
            observation.record,
        )


def _where(observation: Observation, spec: PackageSpec) -> str:
    if observation.record is not None:
        return observation.record.path
    return spec.install_path


__all__ = [
    "InstallState",
    "Operation",
    "Observation",
    "Decision",
    "InstallDecisionEngine",
]
