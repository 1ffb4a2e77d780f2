"""
FirefoxKit - version-aware installation of Firefox builds.

Downloads, installs, upgrades, and removes a specific Firefox version and
language on Linux and Windows hosts, skipping work that is already done.
"""

__version__ = "0.6.1"
