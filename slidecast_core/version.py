"""
SlideCast Version Management - Centralized version for all components

This module provides a single source of truth for the SlideCast version.
"""

__version__ = "0.3.0"


def get_version() -> str:
    """Get the current SlideCast version string."""
    return __version__


def get_short_banner() -> str:
    """Get a compact version banner for CLI tools."""
    return f"SlideCast v{__version__} | local slide presenter"
