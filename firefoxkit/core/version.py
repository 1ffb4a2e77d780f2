"""
Version parsing for FirefoxKit.

Extracts a comparable version from Firefox version strings ('38.0',
'38.0.1', '38.0esr', 'firefox-latest') and from the output of an installed
``firefox --version``.

Versions compare by their numeric components only. Missing trailing
components count as zero, so '38.0' == '38.0.0', and an ESR build equals
the regular release with the same number.

Example:
    >>> from firefoxkit.core.version import parse_version
    >>> parse_version("38.0esr") == parse_version("38.0.0")
    True
    >>> parse_version("38.0esr").is_esr
    True
"""

import functools
import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from firefoxkit.core.exceptions import MalformedVersion

logger = logging.getLogger(__name__)

# 2 or 3 dotted numeric components, e.g. "38.0" or "38.0.1"
_VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")

_COMPONENTS = 3


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class ParsedVersion:
    """
    A version extracted from text.

    Attributes:
        numeric: Version components, zero-padded to three
        is_esr: Whether the text named an Extended Support Release
        is_latest_alias: Whether the text named a 'latest' alias
    """

    numeric: Tuple[int, int, int]
    is_esr: bool = False
    is_latest_alias: bool = False

    @property
    def is_absent(self) -> bool:
        """Whether this is the 0.0 sentinel used for 'not installed'."""
        return self.numeric == (0, 0, 0)

    def numeric_string(self) -> str:
        """
        Format the numeric components, omitting a zero patch component.

        Example:
            >>> parse_version("38.0.0").numeric_string()
            '38.0'
            >>> parse_version("38.0.5").numeric_string()
            '38.0.5'
        """
        major, minor, patch = self.numeric
        if patch:
            return f"{major}.{minor}.{patch}"
        return f"{major}.{minor}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParsedVersion):
            return NotImplemented
        return self.numeric == other.numeric

    def __lt__(self, other) -> bool:
        if not isinstance(other, ParsedVersion):
            return NotImplemented
        return self.numeric < other.numeric

    def __hash__(self) -> int:
        return hash(self.numeric)

    def __str__(self) -> str:
        if self.is_latest_alias and self.is_absent:
            return "latest"
        text = self.numeric_string()
        if self.is_esr:
            text += "esr"
        return text


ABSENT = ParsedVersion((0, 0, 0))


def parse_version(text: str, strict: bool = False) -> ParsedVersion:
    """
    Parse the first dotted numeric version found in text.

    A 'latest' alias without a numeric part parses to 0.0 with
    ``is_latest_alias`` set, even in strict mode.

    Args:
        text: Text containing a version (e.g. '38.0esr', 'Mozilla Firefox 38.0.1')
        strict: Raise instead of returning 0.0 when no version is found

    Returns:
        ParsedVersion for the text

    Raises:
        MalformedVersion: If strict and the text holds no version

    Example:
        >>> parse_version("Mozilla Firefox 38.0.1").numeric
        (38, 0, 1)
        >>> parse_version("garbage").numeric
        (0, 0, 0)
    """
    text = text or ""
    lowered = text.lower()
    is_esr = "esr" in lowered
    is_latest_alias = "latest" in lowered

    match = _VERSION_PATTERN.search(text)
    if not match:
        if strict and not is_latest_alias:
            raise MalformedVersion(text)
        logger.debug(f"No version found in {text!r}, using 0.0")
        return ParsedVersion((0, 0, 0), is_esr, is_latest_alias)

    parts = [int(group) for group in match.groups() if group is not None]
    parts += [0] * (_COMPONENTS - len(parts))

    return ParsedVersion(tuple(parts), is_esr, is_latest_alias)


def is_esr(text: str) -> bool:
    """Determine if a version string or filename names an ESR build."""
    return "esr" in (text or "").lower()


def is_latest(text: str) -> bool:
    """Determine if a version string or filename names a 'latest' alias."""
    return "latest" in (text or "").lower()


def installed_version(executable_path: Union[str, Path]) -> ParsedVersion:
    """
    Obtain the version of an installed Firefox executable.

    Runs ``<executable> --version`` and parses its output.

    Args:
        executable_path: Path to the firefox executable

    Returns:
        The installed version, or 0.0 if nothing executable is at the path
    """
    path = Path(executable_path)

    if not (path.is_file() and os.access(path, os.X_OK)):
        logger.debug(f"No executable at {path}, treating as not installed")
        return ABSENT

    try:
        result = subprocess.run(
            [str(path), "--version"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Failed to run {path} --version: {e}")
        return ABSENT

    version = parse_version(result.stdout)
    logger.debug(f"Installed version at {path}: {version}")
    return version


def windows_long_version(text: str, fallback: Optional[str] = None) -> str:
    """
    Build the version string Windows records for an installed build.

    The version is kept as written ('38.0.0' stays '38.0.0'). ESR builds
    get ' ESR' appended so the value matches the name the Firefox installer
    registers. Text without a dotted version (a 'latest' alias) yields the
    fallback, or the text itself.

    Args:
        text: Version string or artifact filename (e.g. '38.0esr.exe')
        fallback: Value to use when text holds no dotted version

    Returns:
        Long version string

    Example:
        >>> windows_long_version("38.0esr")
        '38.0 ESR'
        >>> windows_long_version("38.0.5.exe")
        '38.0.5'
        >>> windows_long_version("firefox-latest.exe", fallback="firefox-latest")
        'firefox-latest'
    """
    match = _VERSION_PATTERN.search(text or "")
    if not match:
        return fallback or text

    long_version = match.group(0)
    if is_esr(text):
        long_version = f"{long_version} ESR"
    return long_version


__all__ = [
    "ParsedVersion",
    "ABSENT",
    "parse_version",
    "is_esr",
    "is_latest",
    "installed_version",
    "windows_long_version",
]
