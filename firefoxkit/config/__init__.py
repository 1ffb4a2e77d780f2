"""Configuration module for FirefoxKit.

This module provides YAML configuration parsing and validation for firefoxkit.yaml.
"""

from firefoxkit.config.parser import (
    CONFIG_FILENAME,
    WindowsIniConfig,
    PackageConfig,
    FirefoxKitConfig,
    ConfigError,
    find_config,
    parse_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "WindowsIniConfig",
    "PackageConfig",
    "FirefoxKitConfig",
    "ConfigError",
    "find_config",
    "parse_config",
]
