"""
Install command implementation.

Installs a Firefox version unless it is already installed.
"""

import logging

from firefoxkit.cli.utils import run_package_action
from firefoxkit.package.spec import Action

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    return run_package_action(args, Action.INSTALL)
