"""
Persisted install state for FirefoxKit.

Records where each (version, language) pair was installed. The decision
engine reads the state before acting; executors update it only after an
action succeeds. State is persisted to ``~/.firefoxkit/state.json`` with
atomic writes, and updates are serialized with a file lock.

File layout:
    {
      "version": 1,
      "firefox": {
        "38.0": {
          "en-US": {
            "path": "/opt/firefox/38.0_en-US",
            "recorded_version": "38.0",
            "installed_at": "2015-05-12T10:00:00"
          }
        }
      }
    }

Example:
    >>> store = InstalledStateStore(Path("~/.firefoxkit/state.json").expanduser())
    >>> store.record("38.0", "en-US", "/opt/firefox/38.0_en-US", "38.0")
    >>> store.get("38.0", "en-US").path
    '/opt/firefox/38.0_en-US'
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from filelock import FileLock, Timeout as LockTimeout

from firefoxkit.core.exceptions import FirefoxKitError
from firefoxkit.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1


class StateError(FirefoxKitError):
    """Base exception for state management errors."""

    pass


@dataclass(frozen=True)
class InstalledRecord:
    """
    A recorded install.

    Attributes:
        version: Version string the install was requested with
        language: Language code
        path: Install path
        recorded_version: Version the install reports (Windows long
            version, e.g. '38.0 ESR'); defaults to the requested version
        installed_at: ISO 8601 timestamp of the install
    """

    version: str
    language: str
    path: str
    recorded_version: Optional[str] = None
    installed_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "recorded_version": self.recorded_version,
            "installed_at": self.installed_at,
        }


def _to_record(version: str, language: str, entry) -> InstalledRecord:
    """Build a record from a stored entry."""
    # Older files stored the bare path string
    if isinstance(entry, str):
        entry = {"path": entry}

    return InstalledRecord(
        version=version,
        language=language,
        path=entry["path"],
        recorded_version=entry.get("recorded_version") or version,
        installed_at=entry.get("installed_at"),
    )


class InstalledStateStore:
    """
    JSON-backed store of installs keyed by (version, language).

    Attributes:
        state_file: Path to the JSON state file
        lock_timeout: Seconds to wait for the state lock
    """

    def __init__(self, state_file: Path, lock_timeout: int = 30):
        self.state_file = Path(state_file)
        self.lock_timeout = lock_timeout
        self._lock_file = self.state_file.with_name(self.state_file.name + ".lock")

    def _lock(self) -> FileLock:
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(self._lock_file), timeout=self.lock_timeout)

    def _read(self) -> Dict[str, dict]:
        """Read the version/language mapping from disk."""
        if not self.state_file.exists():
            logger.debug(f"State file not found: {self.state_file}")
            return {}

        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Invalid state file {self.state_file}, ignoring it: {e}")
            return {}

        if not isinstance(data, dict) or not isinstance(data.get("firefox"), dict):
            logger.warning(f"Unexpected state layout in {self.state_file}, ignoring it")
            return {}

        if data.get("version", STATE_FORMAT_VERSION) != STATE_FORMAT_VERSION:
            logger.warning(
                f"State version {data.get('version')} not supported, "
                f"reading as version {STATE_FORMAT_VERSION}"
            )

        return data["firefox"]

    def _write(self, installs: Dict[str, dict]) -> None:
        content = json.dumps(
            {"version": STATE_FORMAT_VERSION, "firefox": installs}, indent=2
        )
        atomic_write(self.state_file, content)
        logger.debug(f"Saved state to {self.state_file}")

    def _update(self, mutate) -> None:
        """Apply a mutation to the stored mapping under the state lock."""
        try:
            with self._lock():
                installs = self._read()
                mutate(installs)
                self._write(installs)
        except LockTimeout as e:
            raise StateError(
                f"Could not acquire state lock after {self.lock_timeout}s: "
                f"{self._lock_file}. Another FirefoxKit process may be running."
            ) from e

    def get(self, version: str, language: str) -> Optional[InstalledRecord]:
        """
        Get the recorded install for a version and language.

        Returns:
            InstalledRecord, or None if nothing is recorded
        """
        entry = self._read().get(version, {}).get(language)
        if entry is None:
            return None
        return _to_record(version, language, entry)

    def record(
        self,
        version: str,
        language: str,
        path: str,
        recorded_version: Optional[str] = None,
    ) -> InstalledRecord:
        """
        Record a successful install.

        Args:
            version: Requested version string
            language: Language code
            path: Install path
            recorded_version: Version the install reports (defaults to version)

        Returns:
            The stored record
        """
        record = InstalledRecord(
            version=version,
            language=language,
            path=str(path),
            recorded_version=recorded_version or version,
            installed_at=datetime.now().isoformat(timespec="seconds"),
        )

        def mutate(installs):
            installs.setdefault(version, {})[language] = record.to_dict()

        self._update(mutate)
        logger.info(f"Recorded install of {version} ({language}) at {record.path}")
        return record

    def remove(self, version: str, language: str) -> bool:
        """
        Forget the install for a version and language.

        Returns:
            True if a record was removed
        """
        removed = []

        def mutate(installs):
            languages = installs.get(version, {})
            if languages.pop(language, None) is not None:
                removed.append(language)
            if not languages:
                installs.pop(version, None)

        self._update(mutate)
        if removed:
            logger.info(f"Cleared recorded install of {version} ({language})")
        return bool(removed)

    def entries(self) -> List[InstalledRecord]:
        """List all recorded installs, ordered by version and language."""
        records = []
        for version, languages in sorted(self._read().items()):
            for language in sorted(languages):
                records.append(_to_record(version, language, languages[language]))
        return records

    def find_by_path(self, path: str) -> List[InstalledRecord]:
        """Find recorded installs that live at the given path."""
        return [record for record in self.entries() if record.path == str(path)]


__all__ = [
    "StateError",
    "InstalledRecord",
    "InstalledStateStore",
]
