"""
zkinputs.host — local execution of a guest against generated inputs.

  • mock:   MockHost, the two-cursor input interface, plus field readers
  • guest:  ReferenceGuest, a Python guest that re-validates the inputs
"""

from __future__ import annotations

from .guest import GuestResult, ReferenceGuest, load_handler
from .mock import InputSource, MockHost, read_blob, read_u64

__all__ = [
    "InputSource",
    "MockHost",
    "read_u64",
    "read_blob",
    "GuestResult",
    "ReferenceGuest",
    "load_handler",
]
