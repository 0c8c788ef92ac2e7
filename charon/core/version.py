"""
Version helpers for Charon.

Resolution order:
    1) CHARON_VERSION env var (authoritative override, e.g. set by a release pipeline)
    2) installed distribution metadata
    3) DEFAULT_VERSION
"""

from __future__ import annotations

import os
from importlib import metadata

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "charon-vault"


def detect_version() -> str:
    env = os.environ.get("CHARON_VERSION")
    if env:
        return env.strip()
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


__version__ = detect_version()
