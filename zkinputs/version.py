"""
zkinputs.version — semantic version string and VCS describe helper.

Usage:
    from zkinputs.version import __version__, git_describe, version_metadata
"""

from __future__ import annotations

import os
import subprocess
from functools import lru_cache
from typing import Dict

# Bump this when making a tagged release. Use semver (major.minor.patch).
__version__ = "0.1.0"


@lru_cache(maxsize=1)
def git_describe() -> str:
    """
    Return a best-effort 'git describe' style string.

    Resolution order:
      1) Environment override ZKINPUTS_GIT_DESCRIBE (useful in containers).
      2) `git describe --tags --dirty --always` (if .git and git available).
      3) Fallback to '<__version__>+local'.
    """
    override = os.getenv("ZKINPUTS_GIT_DESCRIBE")
    if override:
        return override.strip()

    try:
        out = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty", "--always"],
            stderr=subprocess.DEVNULL,
        )
        desc = out.decode("utf-8", "replace").strip()
        if desc:
            return desc
    except (OSError, subprocess.CalledProcessError):
        pass

    return f"{__version__}+local"


@lru_cache(maxsize=1)
def version_metadata() -> Dict[str, str]:
    """
    Structured version info for logs / diagnostics.

    Keys:
        version      -> semantic version (from __version__)
        describe     -> git describe or fallback
        wire_format  -> input buffer wire format version
    """
    from zkinputs.inputs.encoding import WIRE_FORMAT_VERSION

    return {
        "version": __version__,
        "describe": git_describe(),
        "wire_format": str(WIRE_FORMAT_VERSION),
    }


__all__ = ["__version__", "git_describe", "version_metadata"]
