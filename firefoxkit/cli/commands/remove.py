"""
Remove command implementation.

Removes a recorded Firefox install. Removing a version that was never
recorded is reported and exits successfully.
"""

import logging

from firefoxkit.cli.utils import run_package_action
from firefoxkit.package.spec import Action

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the remove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    return run_package_action(args, Action.REMOVE)
