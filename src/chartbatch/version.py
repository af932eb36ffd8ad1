"""Version string for ``--version`` and the run header."""

from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "chartbatch"
UNKNOWN_VERSION = "unknown"


def _get_git_sha() -> str | None:
    """Short SHA of the checkout this module lives in, if any."""
    command = ["git", "rev-parse", "--short", "HEAD"]
    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=5, check=False, cwd=Path(__file__).parent)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    sha = result.stdout.strip()
    return sha if result.returncode == 0 and sha else None


def get_version() -> str:
    """Resolve the version: ``BUILD_VERSION``, then the installed distribution, then ``dev (<sha>)``."""
    build_version = (os.environ.get("BUILD_VERSION") or "").strip()
    if build_version:
        return build_version

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        sha = _get_git_sha()
    return f"dev ({sha})" if sha else UNKNOWN_VERSION


__version__ = get_version()
