"""
Entry point for running FirefoxKit CLI as a module.

Usage: python -m firefoxkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
