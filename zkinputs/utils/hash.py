"""
zkinputs.utils.hash — hashing helpers.

- Keccak-256 (pycryptodome) for Solidity event signatures:
  topic0 = keccak256("Transfer(address,address,uint256)")
- MD5 image digests, the identifier the proving service keys guest images by.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Union

from Crypto.Hash import keccak as _keccak

log = logging.getLogger(__name__)


def keccak_256(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """Keccak-256 digest (pre-standard SHA-3 padding, as used by the EVM)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak_256 expects bytes-like input")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def event_signature_hash(signature: str) -> bytes:
    """
    Topic-0 hash of a canonical event signature.

    Whitespace is removed first, so "Sync(uint112, uint112)" and
    "Sync(uint112,uint112)" hash identically.
    """
    canonical = "".join(signature.split())
    if "(" not in canonical or not canonical.endswith(")"):
        raise ValueError(f"not an event signature: {signature!r}")
    return keccak_256(canonical.encode("ascii"))


def image_md5(path: Union[str, Path]) -> str:
    """Upper-case MD5 hex digest of a compiled guest image file."""
    p = Path(path)
    digest = hashlib.md5(p.read_bytes()).hexdigest().upper()
    log.debug("image %s md5=%s", p, digest)
    return digest


__all__ = ["keccak_256", "event_signature_hash", "image_md5"]
