"""
zkinputs test package bootstrap.

On import:
- registers Hypothesis profiles (dev/ci/fast) and selects one from
  HYPOTHESIS_PROFILE, else "ci" when CI is set, else "dev";
- provides receipt builders on top of pyrlp, so the decoder is always checked
  against an independent encoder.

Usage in tests:
    from zkinputs.tests import SOURCE, SYNC, build_log, build_receipt, given, st
"""

from __future__ import annotations

import os
from typing import Optional, Sequence

import rlp
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from zkinputs.types.receipt import BLOOM_SIZE
from zkinputs.utils.hash import event_signature_hash

# ---- profiles ----------------------------------------------------------------

# the autouse env fixture is function-scoped and idempotent
_SUPPRESSED = (HealthCheck.too_slow, HealthCheck.function_scoped_fixture)

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=_SUPPRESSED),
)
settings.register_profile(
    "ci",
    settings(max_examples=300, deadline=None, suppress_health_check=_SUPPRESSED),
)
settings.register_profile("fast", settings(max_examples=25, deadline=None, suppress_health_check=_SUPPRESSED))
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if os.getenv("CI") else "dev"))

# ---- constants ---------------------------------------------------------------

SOURCE = bytes.fromhex("a60ecf32309539dd84f27a9563754dca818b815e")
OTHER = bytes.fromhex("c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")
SYNC_SIG = "Sync(uint112,uint112)"
TRANSFER_SIG = "Transfer(address,address,uint256)"
SYNC = event_signature_hash(SYNC_SIG)
TRANSFER = event_signature_hash(TRANSFER_SIG)

BLOCK_NUMBER = 17_000_000
BLOCK_HASH = bytes(range(32))
RECEIPTS_ROOT = bytes(range(32, 64))

# ---- builders ----------------------------------------------------------------


def build_log(address: bytes, topics: Sequence[bytes], data: bytes = b"") -> list:
    return [address, list(topics), data]


def build_receipt(
    logs: Sequence[list],
    *,
    tx_type: int = 0,
    status: bytes = b"\x01",
    gas: int = 21000,
    bloom: Optional[bytes] = None,
) -> bytes:
    """Legacy receipt, or `tx_type || rlp(...)` when tx_type is non-zero."""
    body = rlp.encode([status, gas, bloom if bloom is not None else b"\x00" * BLOOM_SIZE, list(logs)])
    if tx_type:
        return bytes([tx_type]) + body
    return body


__all__ = [
    "given",
    "st",
    "SOURCE",
    "OTHER",
    "SYNC_SIG",
    "TRANSFER_SIG",
    "SYNC",
    "TRANSFER",
    "BLOCK_NUMBER",
    "BLOCK_HASH",
    "RECEIPTS_ROOT",
    "build_log",
    "build_receipt",
]
