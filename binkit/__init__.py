"""
binkit - release binary acquisition and caching for CI jobs.

Downloads tool binaries from GitHub releases, caches them in the runner's
hosted tool cache and an optional remote cache, and installs them onto the
job PATH.
"""

__version__ = "0.1.0"
