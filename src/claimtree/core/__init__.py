"""
Claimtree - Core Package

Settings shared by the rest of the package.
"""

from claimtree.core.config import Settings, get_settings, settings

__all__ = [
    "Settings",
    "get_settings",
    "settings",
]
