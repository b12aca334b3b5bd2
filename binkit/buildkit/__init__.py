"""
BuildKit helpers.
"""

from .config import BuildKitConfig

__all__ = ["BuildKitConfig"]
