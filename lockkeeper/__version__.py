"""
lockkeeper version information.

This module provides a single source of truth for the package version.
"""

__version__ = "0.2.0.dev0"
