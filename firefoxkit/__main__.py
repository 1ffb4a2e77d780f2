"""
Entry point for running FirefoxKit as a module.

Usage: python -m firefoxkit [command] [options]
"""

from firefoxkit.cli.parser import main

if __name__ == "__main__":
    main()
