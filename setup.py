"""
Setup shim for Tributary.

Project metadata lives in pyproject.toml. This script only supplies the
version, which is kept in the VERSION file shared with tributary._version.
"""

from pathlib import Path
from setuptools import setup

ROOT = Path(__file__).resolve().parent


def read_version() -> str:
    version = (ROOT / "VERSION").read_text().strip()
    if not version:
        raise RuntimeError(f"{ROOT / 'VERSION'} is empty")
    return version


setup(version=read_version())
