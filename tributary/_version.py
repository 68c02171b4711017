"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Version information for Tributary.

Source checkouts read the VERSION file next to the package; installed copies
fall back to the distribution metadata.
"""

from importlib import metadata
from pathlib import Path

VERSION_FILE = Path(__file__).parent.parent / "VERSION"


def get_version() -> str:
    """Return the Tributary version string, or "unknown" if it cannot be found."""
    if VERSION_FILE.exists():
        return VERSION_FILE.read_text().strip()
    try:
        return metadata.version("tributary")
    except metadata.PackageNotFoundError:
        return "unknown"


__version__ = get_version()
