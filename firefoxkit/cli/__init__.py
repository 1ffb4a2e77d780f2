"""
FirefoxKit CLI module.

This module provides the command-line interface for FirefoxKit.
"""

from .parser import CLI, main
from . import utils

__all__ = ["CLI", "main", "utils"]
