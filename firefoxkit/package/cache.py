"""
Download cache freshness ("splay") checks.

A cached artifact is reused instead of re-fetched while it is younger than
the splay window. After a fetch the cache file is touched, so the window
is measured from fetch time rather than from the timestamp the download
carried.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from firefoxkit.core.filesystem import touch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedArtifact:
    """
    Observed state of a cached artifact.

    Attributes:
        local_path: Cache file path
        exists_on_disk: Whether the file exists
        last_modified: Modification time (POSIX timestamp, 0 if missing)
        size_bytes: File size (0 if missing)
    """

    local_path: Path
    exists_on_disk: bool
    last_modified: float
    size_bytes: int

    @classmethod
    def from_path(cls, path: Path) -> "CachedArtifact":
        """Stat a cache file."""
        path = Path(path)
        try:
            stat = path.stat()
        except FileNotFoundError:
            return cls(path, False, 0.0, 0)
        return cls(path, path.is_file(), stat.st_mtime, stat.st_size)


def is_fresh(artifact: CachedArtifact, splay_seconds: int, now: float) -> bool:
    """
    Decide whether a cached artifact can be reused.

    A splay of 0 is never fresh. Empty files are never fresh.

    Args:
        artifact: Observed cache file state
        splay_seconds: Freshness window in seconds
        now: Current POSIX timestamp

    Returns:
        True if the artifact does not need to be fetched again
    """
    if splay_seconds <= 0:
        return False
    if not artifact.exists_on_disk or artifact.size_bytes <= 0:
        return False
    return artifact.last_modified > now - splay_seconds


class CacheFreshnessGuard:
    """Checks cache files against a splay window using an injectable clock."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time

    def is_fresh(self, path: Path, splay_seconds: int) -> bool:
        """Check whether the cache file at path is fresh."""
        artifact = CachedArtifact.from_path(path)
        fresh = is_fresh(artifact, splay_seconds, self.clock())
        logger.debug(
            f"Cache {path}: exists={artifact.exists_on_disk} "
            f"size={artifact.size_bytes} splay={splay_seconds}s fresh={fresh}"
        )
        return fresh

    def mark_fetched(self, path: Path) -> None:
        """Reset a cache file's modification time to now after a fetch."""
        touch(path, self.clock())


__all__ = ["CachedArtifact", "CacheFreshnessGuard", "is_fresh"]
