"""
Shared utilities for CLI commands.

Merges command-line options over firefoxkit.yaml values and builds the
package objects the install/upgrade/remove commands run.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from firefoxkit.config.parser import (
    ConfigError,
    FirefoxKitConfig,
    find_config,
    parse_config,
)
from firefoxkit.core.directory import get_state_file
from firefoxkit.core.platform import (
    ResolvedPlatform,
    detect_host_facts,
    detect_platform,
    resolve_platform,
)
from firefoxkit.core.state import InstalledStateStore
from firefoxkit.package.provider import ActionResult, FirefoxPackage
from firefoxkit.package.spec import Action, PackageSpec

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(args) -> FirefoxKitConfig:
    """
    Load the configuration file named by --config, or ./firefoxkit.yaml.

    Args:
        args: Parsed command-line arguments

    Returns:
        Parsed configuration (an empty one if no file exists)

    Raises:
        ConfigError: If the configuration file is invalid
    """
    config_file = getattr(args, "config", None) or find_config()
    if config_file is None:
        logger.debug("No configuration file found, using defaults")
        return FirefoxKitConfig(version=1)

    logger.debug(f"Loading configuration from {config_file}")
    return parse_config(Path(config_file))


def _option(args, name: str, fallback):
    value = getattr(args, name, None)
    return fallback if value is None else value


def resolve_target_platform(os_family: Optional[str]) -> ResolvedPlatform:
    """Resolve the target platform, honoring an OS family override."""
    if not os_family:
        return detect_platform()
    return resolve_platform(os_family, detect_host_facts().machine)


def build_spec(args, config: FirefoxKitConfig) -> Tuple[PackageSpec, ResolvedPlatform]:
    """
    Build the package spec from command-line options and configuration.

    Command-line options take precedence over configuration values.

    Raises:
        ConfigError: If no version is given
    """
    package = config.package

    version = _option(args, "package_version", package.version)
    if not version:
        raise ConfigError(
            "No Firefox version given (pass VERSION or set package.version)"
        )

    platform = resolve_target_platform(_option(args, "platform", package.platform))

    spec = PackageSpec.create(
        version,
        platform,
        language=_option(args, "language", package.language),
        uri=_option(args, "uri", package.uri),
        checksum=_option(args, "checksum", package.checksum),
        splay=_option(args, "splay", package.splay),
        path=_option(args, "path", package.path),
        install_root=config.install_root,
        link=_option(args, "link", package.links),
        windows_ini_source=package.windows_ini.source,
        windows_ini_content=package.windows_ini.content,
        windows_ini_scope=package.windows_ini.scope,
    )
    return spec, platform


def build_package(args) -> FirefoxPackage:
    """Build a FirefoxPackage from command-line options and configuration."""
    config = load_config(args)
    spec, platform = build_spec(args, config)
    logger.debug(f"Target platform: {platform}, install path: {spec.install_path}")

    return FirefoxPackage.create(
        spec,
        platform,
        cache_dir=_option(args, "cache_dir", config.cache_dir),
        state_file=_option(args, "state_file", config.state_file),
    )


def open_state_store(args) -> InstalledStateStore:
    """Open the state store named by --state-file or the configuration."""
    config = load_config(args)
    return InstalledStateStore(
        get_state_file(_option(args, "state_file", config.state_file))
    )


# ============================================================================
# Command Execution
# ============================================================================


def run_package_action(args, action: Action) -> int:
    """
    Run a package action and report its outcome.

    Args:
        args: Parsed command-line arguments
        action: Action to run

    Returns:
        Exit code (0 for success, including unchanged results)
    """
    package = build_package(args)
    result = package.run_action(action)
    print(format_result(result))
    return 0


def format_result(result: ActionResult) -> str:
    """
    Format an action result as a one-line report.

    Example:
        >>> format_result(result)
        '[changed] installing 38.0 en-US (downloaded)'
    """
    status = "changed" if result.changed else "unchanged"
    line = f"[{status}] {result.summary}"
    if result.downloaded:
        line += " (downloaded)"
    return line

