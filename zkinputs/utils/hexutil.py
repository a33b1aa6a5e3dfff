"""
zkinputs.utils.hexutil — hex/bytes normalization.

Inputs may be provided as hex strings (with or without 0x) or bytes-like values
and are normalized to `bytes`. Odd-length hex is rejected rather than padded:
every hex value handled here stands for whole bytes on the wire.
"""

from __future__ import annotations

from typing import Optional, Union

HexLike = Union[str, bytes, bytearray, memoryview]


def strip_0x(s: str) -> str:
    """Remove a single leading '0x'/'0X' if present."""
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(v: HexLike, *, size: Optional[int] = None, what: str = "value") -> bytes:
    """
    Normalize a hex string or bytes-like value to bytes.

    Args:
        v:    hex string (0x optional) or bytes-like
        size: if given, the exact byte length required
        what: field name used in error messages
    """
    if isinstance(v, (bytes, bytearray, memoryview)):
        b = bytes(v)
    elif isinstance(v, str):
        s = strip_0x(v.strip())
        if len(s) % 2:
            raise ValueError(f"{what}: odd-length hex string {v!r}")
        try:
            b = bytes.fromhex(s)
        except ValueError as e:
            raise ValueError(f"{what}: invalid hex string {v!r}") from e
    else:
        raise TypeError(f"{what}: expected hex-like value, got {type(v).__name__}")
    if size is not None and len(b) != size:
        raise ValueError(f"{what}: expected {size} bytes, got {len(b)}")
    return b


def to_hex(b: bytes, prefix: str = "0x") -> str:
    """Lower-case hex with optional prefix (default `0x`)."""
    if not isinstance(b, (bytes, bytearray, memoryview)):
        raise TypeError("to_hex expects bytes-like input")
    return (prefix or "") + bytes(b).hex()


def is_hash_hex(s: str, size: int = 32) -> bool:
    """True if `s` is a 0x-optional hex string of exactly `size` bytes."""
    body = strip_0x(s.strip())
    if len(body) != size * 2:
        return False
    try:
        bytes.fromhex(body)
    except ValueError:
        return False
    return True


__all__ = ["HexLike", "strip_0x", "to_bytes", "to_hex", "is_hash_hex"]
