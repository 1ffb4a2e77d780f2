"""
Symlink management for installed Firefox executables.

Links such as /usr/bin/firefox point at the executable inside a versioned
install path, so the active version can change by relinking.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from firefoxkit.core.exceptions import LinkError

logger = logging.getLogger(__name__)


class LinkManager:
    """Creates, inspects, and removes symbolic links."""

    def create_link(
        self, link_path: Path, target_path: Path, force: bool = True
    ) -> bool:
        """
        Create a symbolic link.

        Args:
            link_path: Path where link should be created
            target_path: Path that link should point to
            force: Replace an existing link or file at link_path

        Returns:
            True if a link was created, False if it already pointed at target

        Raises:
            LinkError: If target is missing, link_path exists and force is
                False, or link creation fails
        """
        link_path = Path(link_path).absolute()
        target_path = Path(target_path).absolute()

        if not target_path.exists():
            raise LinkError(f"Link target does not exist: {target_path}")

        if self.points_to(link_path, target_path):
            logger.debug(f"Link already up to date: {link_path} -> {target_path}")
            return False

        if link_path.exists() or link_path.is_symlink():
            if not force:
                raise LinkError(f"Link path already exists: {link_path}")
            if link_path.is_dir() and not link_path.is_symlink():
                raise LinkError(f"Refusing to replace directory with link: {link_path}")
            link_path.unlink()

        link_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            os.symlink(target_path, link_path, target_is_directory=target_path.is_dir())
        except OSError as e:
            raise LinkError(
                f"Failed to create link {link_path} -> {target_path}: {e}"
            ) from e

        logger.info(f"Created symlink: {link_path} -> {target_path}")
        return True

    def resolve_link(self, link_path: Path) -> Optional[Path]:
        """
        Resolve link to absolute target path.

        Returns:
            Absolute path to link target, or None if not a link
        """
        link_path = Path(link_path)
        if not link_path.is_symlink():
            return None

        target = Path(os.readlink(link_path))
        if not target.is_absolute():
            target = (link_path.parent / target).resolve()
        return target

    def points_to(self, link_path: Path, target_path: Path) -> bool:
        """Check if link_path is a symlink pointing at target_path."""
        target = self.resolve_link(link_path)
        return target is not None and target == Path(target_path).absolute()

    def remove_link(self, link_path: Path) -> bool:
        """
        Remove a symlink.

        Returns:
            True if removed, False if link_path is not a symlink
        """
        link_path = Path(link_path)
        if not link_path.is_symlink():
            return False

        try:
            link_path.unlink()
        except OSError as e:
            raise LinkError(f"Failed to remove link {link_path}: {e}") from e

        logger.info(f"Removed link: {link_path}")
        return True


__all__ = ["LinkManager"]
