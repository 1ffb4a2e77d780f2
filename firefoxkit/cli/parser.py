"""
FirefoxKit CLI argument parser.

This module implements the command-line interface for FirefoxKit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("firefoxkit")
except Exception:
    from firefoxkit import __version__

logger = logging.getLogger(__name__)


class CLI:
    """FirefoxKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="fxkit",
            description="FirefoxKit - Version-aware Firefox installs",
            epilog='Use "fxkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"FirefoxKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./firefoxkit.yaml)",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Download cache directory (default: ~/.firefoxkit/cache)",
        )
        parser.add_argument(
            "--state-file",
            type=Path,
            metavar="PATH",
            help="Install state file (default: ~/.firefoxkit/state.json)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_upgrade_command(subparsers)
        self._add_remove_command(subparsers)
        self._add_status_command(subparsers)

        return parser

    def _add_version_argument(self, parser):
        parser.add_argument(
            "package_version",
            nargs="?",
            metavar="VERSION",
            help="Firefox version, e.g. 38.0, 38.0esr, or latest "
            "(default: package.version from the configuration file)",
        )

    def _add_package_options(self, parser):
        """Add options shared by 'install' and 'upgrade'."""
        parser.add_argument(
            "--language", "-l", metavar="CODE", help="Language code (default: en-US)"
        )
        parser.add_argument(
            "--uri",
            metavar="URL",
            help="Download service base URI (default: https://download.mozilla.org)",
        )
        parser.add_argument(
            "--checksum", metavar="SHA256", help="Expected SHA256 of the download"
        )
        parser.add_argument(
            "--splay",
            type=int,
            metavar="SECONDS",
            help="Reuse a cached download younger than this (default: 0)",
        )
        parser.add_argument(
            "--platform",
            metavar="OS",
            help="OS family override, e.g. linux or windows (default: detected)",
        )
        parser.add_argument(
            "--path",
            metavar="DIR",
            help="Install path (default: <install root>/<version>_<language>)",
        )
        parser.add_argument(
            "--link",
            action="append",
            metavar="PATH",
            help="Link PATH to the installed executable (repeatable)",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install a Firefox version",
            description="Install a Firefox version unless it is already installed",
        )
        self._add_version_argument(parser)
        self._add_package_options(parser)

    def _add_upgrade_command(self, subparsers):
        """Add 'upgrade' subcommand."""
        parser = subparsers.add_parser(
            "upgrade",
            help="Install a Firefox version, replacing another version",
            description="Install a Firefox version, replacing a different "
            "version recorded at the same install path",
        )
        self._add_version_argument(parser)
        self._add_package_options(parser)

    def _add_remove_command(self, subparsers):
        """Add 'remove' subcommand."""
        parser = subparsers.add_parser(
            "remove",
            help="Remove a Firefox version",
            description="Remove a recorded Firefox install",
        )
        self._add_version_argument(parser)
        parser.add_argument(
            "--language", "-l", metavar="CODE", help="Language code (default: en-US)"
        )
        parser.add_argument(
            "--platform",
            metavar="OS",
            help="OS family override, e.g. linux or windows (default: detected)",
        )
        parser.add_argument(
            "--link",
            action="append",
            metavar="PATH",
            help="Remove PATH if it links to the removed install (repeatable)",
        )

    def _add_status_command(self, subparsers):
        """Add 'status' subcommand."""
        subparsers.add_parser(
            "status",
            help="List recorded installs",
            description="List the Firefox installs recorded in the state file",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "install": "firefoxkit.cli.commands.install",
            "upgrade": "firefoxkit.cli.commands.upgrade",
            "remove": "firefoxkit.cli.commands.remove",
            "status": "firefoxkit.cli.commands.status",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            # Dynamic import of command module
            import importlib

            module = importlib.import_module(module_name)

            # Call run() function in module
            if not hasattr(module, "run"):
                logger.error(f"Command module {module_name} has no run() function")
                return 1

            return module.run(args)

        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
