"""
zkinputs.cli — command-line entry point (`zkinputs`).

    zkinputs prove BLOCK_ID EXPECTED_STATE (-i | -t | -p) [--output PATH] [--bundle PATH]
    zkinputs config
    zkinputs version
"""

from __future__ import annotations

from .main import app, main

__all__ = ["app", "main"]
