#!/usr/bin/env python3
# grid36/version.py
"""
Version and build metadata for Grid36.
"""

__version__ = "1.0.0"
__build__ = "2026-10-18"
__license__ = "MIT"

def version_info() -> str:
    """Return human-readable version string."""
    return f"Grid36 v{__version__} (build {__build__})"
