"""
zkinputs.types.receipt — raw and decoded receipt records.

`RawReceipt` is the opaque ledger payload; `DecodedReceipt` and `LogEntry` are
its structured view. Every `LogEntry` also remembers *where* its fields sit in
the raw bytes (`LogSpan`), which is what later lets the stream builder point
the guest program at each event without re-decoding.

Conventions
-----------
* `address` is 20 raw bytes; `topics` an ordered tuple of 32-byte values;
  `data` an arbitrary payload.
* Span positions are offsets of the first *payload* byte of each RLP item
  (after its length prefix), relative to the first byte of the raw receipt
  including any EIP-2718 type byte.
* Inputs may be provided as hex strings (with or without 0x) and are normalized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from zkinputs.utils.hexutil import HexLike, to_bytes, to_hex

ADDRESS_SIZE = 20
TOPIC_SIZE = 32
HASH_SIZE = 32
BLOOM_SIZE = 256
# LOG0..LOG4
MAX_LOG_TOPICS = 4


@dataclass(frozen=True)
class RawReceipt:
    """One receipt exactly as the ledger stores it, keyed by its index in the block."""

    tx_index: int
    data: bytes

    def __post_init__(self) -> None:
        if self.tx_index < 0:
            raise ValueError("tx_index must be >= 0")
        object.__setattr__(self, "data", to_bytes(self.data, what="receipt"))

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"RawReceipt(tx_index={self.tx_index}, len={len(self.data)})"


@dataclass(frozen=True)
class LogSpan:
    """Payload positions of one log's fields inside a byte buffer."""

    address: int
    topics: Tuple[int, ...]
    data: int
    data_len: int

    def shifted(self, base: int) -> "LogSpan":
        """The same span relative to a buffer that starts `base` bytes earlier."""
        return LogSpan(
            address=self.address + base,
            topics=tuple(t + base for t in self.topics),
            data=self.data + base,
            data_len=self.data_len,
        )


@dataclass(frozen=True)
class LogEntry:
    """
    A single event/log emitted by a contract.

    Attributes:
        address: bytes — 20-byte emitter address
        topics:  tuple[bytes, ...] — ordered 32-byte topics; topics[0] is
                 conventionally the event signature hash
        data:    bytes — unstructured payload
        span:    LogSpan | None — positions in the raw receipt, when decoded
                 from one
    """

    address: bytes
    topics: Tuple[bytes, ...]
    data: bytes
    span: Optional[LogSpan] = field(default=None, compare=False)

    def __init__(
        self,
        address: HexLike,
        topics: Sequence[HexLike] = (),
        data: HexLike = b"",
        span: Optional[LogSpan] = None,
    ):
        addr_b = to_bytes(address, size=ADDRESS_SIZE, what="log address")
        topics_b = tuple(to_bytes(t, size=TOPIC_SIZE, what="log topic") for t in topics)
        data_b = to_bytes(data, what="log data")
        if span is not None and len(span.topics) != len(topics_b):
            raise ValueError("span topic count does not match topics")
        object.__setattr__(self, "address", addr_b)
        object.__setattr__(self, "topics", topics_b)
        object.__setattr__(self, "data", data_b)
        object.__setattr__(self, "span", span)

    @property
    def signature(self) -> Optional[bytes]:
        """topics[0], or None for anonymous logs without topics."""
        return self.topics[0] if self.topics else None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a JSON-friendly mapping using hex strings.

        Returns:
            {
              "address": "0x..",
              "topics":  ["0x..", ...],
              "data":    "0x.."
            }
        """
        return {
            "address": to_hex(self.address),
            "topics": [to_hex(t) for t in self.topics],
            "data": to_hex(self.data),
        }

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        ts = ", ".join(to_hex(t)[:12] + "…" for t in self.topics)
        data_h = to_hex(self.data)
        if len(data_h) > 18:
            data_h = data_h[:18] + "…"
        return f"LogEntry(address={to_hex(self.address)}, topics=[{ts}], data={data_h})"


@dataclass(frozen=True)
class DecodedReceipt:
    """
    Structured view of a RawReceipt.

    `status` is True for success. Pre-Byzantium receipts carry a 32-byte
    intermediate state root instead of a status byte; it is kept in
    `post_state` and `status` is reported as True.
    """

    tx_index: int
    tx_type: int
    status: bool
    cumulative_gas_used: int
    logs_bloom: bytes
    logs: Tuple[LogEntry, ...]
    raw: bytes = field(repr=False, compare=False)
    post_state: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "txIndex": self.tx_index,
            "type": self.tx_type,
            "status": int(self.status),
            "cumulativeGasUsed": self.cumulative_gas_used,
            "logsBloom": to_hex(self.logs_bloom),
            "logs": [lg.to_dict() for lg in self.logs],
        }
        if self.post_state is not None:
            out["root"] = to_hex(self.post_state)
        return out


@dataclass(frozen=True)
class BlockHeader:
    """The three header fields the inputs bind to."""

    number: int
    hash: bytes
    receipts_root: bytes

    def __post_init__(self) -> None:
        if self.number < 0:
            raise ValueError("block number must be >= 0")
        object.__setattr__(self, "hash", to_bytes(self.hash, size=HASH_SIZE, what="block hash"))
        object.__setattr__(
            self,
            "receipts_root",
            to_bytes(self.receipts_root, size=HASH_SIZE, what="receipts root"),
        )


__all__ = [
    "ADDRESS_SIZE",
    "TOPIC_SIZE",
    "HASH_SIZE",
    "BLOOM_SIZE",
    "MAX_LOG_TOPICS",
    "RawReceipt",
    "LogSpan",
    "LogEntry",
    "DecodedReceipt",
    "BlockHeader",
]
