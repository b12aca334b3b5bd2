"""Test fixtures for binkit tests.

This package provides reusable pytest fixtures for testing binkit components.
Fixtures are organized by type:

- directories: Settings and runner directory layouts (home, temp, tool cache)
- archives: Release archives containing a fake tool binary

Import fixtures in your tests using:
    from tests.fixtures.directories import settings
    from tests.fixtures.archives import make_tar_gz
"""

__all__ = [
    "directories",
    "archives",
]
