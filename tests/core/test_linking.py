"""
Tests for symlink management.
"""

import pytest

from firefoxkit.core.exceptions import LinkError
from firefoxkit.core.linking import LinkManager

pytestmark = pytest.mark.posix_only


@pytest.fixture
def executable(temp_dir):
    """Installed firefox executable."""
    path = temp_dir / "opt" / "38.0_en-US" / "firefox"
    path.parent.mkdir(parents=True)
    path.write_text("#!/bin/sh\n")
    return path


class TestLinkManager:
    """Test LinkManager."""

    def test_create_link(self, temp_dir, executable):
        """Test creating a link to the executable."""
        link = temp_dir / "bin" / "firefox"
        manager = LinkManager()

        assert manager.create_link(link, executable) is True
        assert link.is_symlink()
        assert manager.resolve_link(link) == executable

    def test_create_link_is_idempotent(self, temp_dir, executable):
        """Test a correct link is left alone."""
        link = temp_dir / "firefox"
        manager = LinkManager()
        manager.create_link(link, executable)

        assert manager.create_link(link, executable) is False

    def test_create_link_replaces_other_target(self, temp_dir, executable):
        """Test a link to another version is repointed."""
        other = temp_dir / "opt" / "45.0_en-US" / "firefox"
        other.parent.mkdir(parents=True)
        other.write_text("#!/bin/sh\n")
        link = temp_dir / "firefox"
        manager = LinkManager()
        manager.create_link(link, other)

        assert manager.create_link(link, executable) is True
        assert manager.points_to(link, executable)

    def test_create_link_without_force(self, temp_dir, executable):
        """Test existing paths are kept when force is False."""
        link = temp_dir / "firefox"
        link.write_text("existing")

        with pytest.raises(LinkError, match="already exists"):
            LinkManager().create_link(link, executable, force=False)

    def test_create_link_missing_target(self, temp_dir):
        """Test links to missing targets are refused."""
        with pytest.raises(LinkError, match="does not exist"):
            LinkManager().create_link(temp_dir / "firefox", temp_dir / "missing")

    def test_refuses_to_replace_directory(self, temp_dir, executable):
        """Test a real directory is never replaced by a link."""
        link = temp_dir / "firefox-dir"
        link.mkdir()

        with pytest.raises(LinkError, match="directory"):
            LinkManager().create_link(link, executable)

    def test_resolve_non_link(self, executable):
        """Test resolve_link on a regular file."""
        assert LinkManager().resolve_link(executable) is None

    def test_remove_link(self, temp_dir, executable):
        """Test removing a link keeps its target."""
        link = temp_dir / "firefox"
        manager = LinkManager()
        manager.create_link(link, executable)

        assert manager.remove_link(link) is True
        assert not link.exists()
        assert executable.exists()

    def test_remove_non_link(self, executable):
        """Test regular files are not removed."""
        assert LinkManager().remove_link(executable) is False
        assert executable.exists()
