"""
zkinputs.inputs — guest input buffers and their on-disk bundle form.

    from zkinputs.inputs import encode_public, encode_private, InputBuffer
    from zkinputs.inputs import InputBundle, save_bundle, load_bundle
"""

from __future__ import annotations

from .bundle import InputBundle, load_bundle, save_bundle
from .encoding import (WIRE_FORMAT_VERSION, InputBuffer, encode_private,
                       encode_public, normalize_state, pack_blob, unpack_blob)

__all__ = [
    "WIRE_FORMAT_VERSION",
    "InputBuffer",
    "encode_public",
    "encode_private",
    "normalize_state",
    "pack_blob",
    "unpack_blob",
    "InputBundle",
    "save_bundle",
    "load_bundle",
]
