"""YAML configuration parser for FirefoxKit.

This module provides parsing and validation for firefoxkit.yaml configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from firefoxkit.core.exceptions import FirefoxKitError
from firefoxkit.package.spec import (
    DEFAULT_INI_SCOPE,
    DEFAULT_INI_SOURCE,
    DEFAULT_LANGUAGE,
    DEFAULT_URI,
)

CONFIG_FILENAME = "firefoxkit.yaml"


class ConfigError(FirefoxKitError):
    """Configuration parsing or validation error."""

    pass


@dataclass
class WindowsIniConfig:
    """Windows installer INI configuration."""

    source: str = DEFAULT_INI_SOURCE
    scope: str = DEFAULT_INI_SCOPE  # 'firefoxkit' or a template directory
    content: Optional[Dict[str, Any]] = None  # None: {'install_path': <path>}


@dataclass
class PackageConfig:
    """Firefox package configuration."""

    version: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    uri: str = DEFAULT_URI
    checksum: Optional[str] = None
    splay: int = 0
    platform: Optional[str] = None  # OS family override, e.g. 'linux'
    path: Optional[str] = None
    links: List[str] = field(default_factory=list)
    windows_ini: WindowsIniConfig = field(default_factory=WindowsIniConfig)


@dataclass
class FirefoxKitConfig:
    """Complete FirefoxKit configuration."""

    version: int
    cache_dir: Optional[str] = None
    state_file: Optional[str] = None
    install_root: Optional[str] = None
    package: PackageConfig = field(default_factory=PackageConfig)


def find_config(start_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Find firefoxkit.yaml in a directory.

    Args:
        start_dir: Directory to look in (default: current directory)

    Returns:
        Path to the configuration file, or None if there is none
    """
    candidate = Path(start_dir or Path.cwd()) / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def parse_config(config_path: Path) -> FirefoxKitConfig:
    """
    Parse firefoxkit.yaml configuration file.

    Args:
        config_path: Path to firefoxkit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> FirefoxKitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    for key in ("cache_dir", "state_file", "install_root"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"{key} must be a string")

    return FirefoxKitConfig(
        version=data["version"],
        cache_dir=data.get("cache_dir"),
        state_file=data.get("state_file"),
        install_root=data.get("install_root"),
        package=_parse_package(data.get("package") or {}),
    )


def _parse_package(data: dict) -> PackageConfig:
    """Parse package configuration."""
    if not isinstance(data, dict):
        raise ConfigError("package must be a mapping")

    version = data.get("version")
    if version is not None and not isinstance(version, str):
        # YAML reads an unquoted 38.10 as the float 38.1
        raise ConfigError(
            f"package.version must be a string, got {version!r}; "
            f'quote it, e.g. version: "{version}"'
        )

    splay = data.get("splay", 0)
    if isinstance(splay, bool) or not isinstance(splay, int):
        raise ConfigError(f"package.splay must be an integer, got {splay!r}")
    if splay < 0:
        raise ConfigError(f"package.splay must not be negative, got {splay}")

    return PackageConfig(
        version=version,
        language=data.get("language", DEFAULT_LANGUAGE),
        uri=data.get("uri", DEFAULT_URI),
        checksum=data.get("checksum"),
        splay=splay,
        platform=data.get("platform"),
        path=data.get("path"),
        links=_parse_links(data.get("link")),
        windows_ini=_parse_windows_ini(data.get("windows_ini")),
    )


def _parse_links(data) -> List[str]:
    """Parse the link attribute (a path or a list of paths)."""
    if data is None:
        return []

    if isinstance(data, str):
        return [data]

    if isinstance(data, list) and all(isinstance(item, str) for item in data):
        return list(data)

    raise ConfigError("package.link must be a string or a list of strings")


def _parse_windows_ini(data: Optional[dict]) -> WindowsIniConfig:
    """Parse Windows installer INI configuration."""
    if data is None:
        return WindowsIniConfig()

    if not isinstance(data, dict):
        raise ConfigError("package.windows_ini must be a mapping")

    content = data.get("content")
    if content is not None and not isinstance(content, dict):
        raise ConfigError("package.windows_ini.content must be a mapping")

    return WindowsIniConfig(
        source=data.get("source", DEFAULT_INI_SOURCE),
        scope=data.get("scope", DEFAULT_INI_SCOPE),
        content=content,
    )
