"""
Status command implementation.

Lists the Firefox installs recorded in the state file.
"""

import logging

from firefoxkit.cli.utils import open_state_store

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the status command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    store = open_state_store(args)
    logger.debug(f"Reading state from {store.state_file}")

    records = store.entries()
    if not records:
        print("No Firefox installs recorded")
        return 0

    print(f"{'VERSION':<14} {'LANGUAGE':<10} PATH")
    for record in records:
        version = record.version
        if record.recorded_version and record.recorded_version != record.version:
            version = f"{record.version} ({record.recorded_version})"
        print(f"{version:<14} {record.language:<10} {record.path}")

    return 0
