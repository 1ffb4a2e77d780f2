"""
Pytest configuration and shared fixtures for FirefoxKit tests.
"""

import io
import os
import tarfile
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from firefoxkit.core.platform import resolve_platform
from firefoxkit.core.state import InstalledStateStore

FIREFOX_SCRIPT = """#!/bin/sh
echo "Mozilla Firefox {version}"
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "posix_only: marks tests that need POSIX symlinks and permissions"
    )


def pytest_collection_modifyitems(config, items):
    """Skip POSIX-only tests on Windows."""
    if os.name != "nt":
        return
    skip_posix = pytest.mark.skip(reason="requires a POSIX host")
    for item in items:
        if "posix_only" in item.keywords:
            item.add_marker(skip_posix)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def linux64():
    """Resolved linux64 platform."""
    return resolve_platform("linux", "x86_64")


@pytest.fixture
def win32():
    """Resolved 32-bit Windows platform."""
    return resolve_platform("windows", "i686")


@pytest.fixture
def state_store(temp_dir: Path) -> InstalledStateStore:
    """State store backed by a temporary file."""
    return InstalledStateStore(temp_dir / "state" / "state.json")


def build_firefox_tarball(archive_path: Path, version: str = "38.0") -> Path:
    """
    Build a tarball laid out like a Firefox release.

    The archive holds a top-level 'firefox/' directory with an executable
    'firefox' script that reports the given version.
    """
    archive_path.parent.mkdir(parents=True, exist_ok=True)

    with tarfile.open(archive_path, "w:bz2") as tar:
        top = tarfile.TarInfo("firefox")
        top.type = tarfile.DIRTYPE
        top.mode = 0o755
        tar.addfile(top)

        script = FIREFOX_SCRIPT.format(version=version).encode()
        executable = tarfile.TarInfo("firefox/firefox")
        executable.size = len(script)
        executable.mode = 0o755
        tar.addfile(executable, io.BytesIO(script))

        ini = b"[App]\nVendor=Mozilla\n"
        app_ini = tarfile.TarInfo("firefox/application.ini")
        app_ini.size = len(ini)
        app_ini.mode = 0o644
        tar.addfile(app_ini, io.BytesIO(ini))

    return archive_path


@pytest.fixture
def firefox_tarball(temp_dir: Path) -> Path:
    """Firefox 38.0 release tarball."""
    return build_firefox_tarball(temp_dir / "downloads" / "38.0.tar.bz2")


@pytest.fixture
def make_tarball(temp_dir: Path):
    """Factory building Firefox tarballs for a version."""

    def _make(version: str, name: str = None) -> Path:
        filename = name or f"{version}.tar.bz2"
        return build_firefox_tarball(temp_dir / "downloads" / filename, version)

    return _make
