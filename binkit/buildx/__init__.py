"""
Docker Buildx helpers.
"""

from .buildx import Buildx, parse_version

__all__ = ["Buildx", "parse_version"]
