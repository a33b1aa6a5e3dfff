"""
zkinputs.types.events — match specifications and matched-event records.

* `EventMatcher` is the capability the filter needs: `match(log) -> bool`.
  `EventMatchSpec` (address + accepted topic-0 hashes) is the standard one;
  anything else implementing `match` can be passed to the filter instead.
* `MatchedEvent` points back at the transaction and log index a match came
  from.
* `EventOffsetRecord` is the fixed 7-integer record the guest program uses to
  find an event inside the receipt stream (wire contract version 1):

      (address, topic0, topic1, topic2, topic3, data, data_len)

  Positions are absolute byte offsets into the stream; absent topics are 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (FrozenSet, Iterable, List, NamedTuple, Protocol,
                    Sequence, Tuple, runtime_checkable)

from zkinputs.types.receipt import (ADDRESS_SIZE, MAX_LOG_TOPICS, TOPIC_SIZE,
                                    LogEntry, LogSpan)
from zkinputs.utils.hexutil import HexLike, to_bytes, to_hex

OFFSET_RECORD_ARITY = 7
MAX_OFFSET_TOPICS = MAX_LOG_TOPICS


@runtime_checkable
class EventMatcher(Protocol):
    def match(self, log: LogEntry) -> bool:
        ...


@dataclass(frozen=True)
class EventMatchSpec:
    """
    Target contract address plus the set of accepted event signature hashes.

    Addresses compare as raw bytes, so checksummed, upper- and lower-case hex
    all configure the same spec.
    """

    address: bytes
    signatures: FrozenSet[bytes]

    def __init__(self, address: HexLike, signatures: Iterable[HexLike]):
        addr_b = to_bytes(address, size=ADDRESS_SIZE, what="source address")
        sigs = frozenset(to_bytes(s, size=TOPIC_SIZE, what="event signature") for s in signatures)
        if not sigs:
            raise ValueError("at least one event signature is required")
        object.__setattr__(self, "address", addr_b)
        object.__setattr__(self, "signatures", sigs)

    def match(self, log: LogEntry) -> bool:
        return log.address == self.address and log.signature in self.signatures


@dataclass(frozen=True)
class MatchedEvent:
    """A log confirmed against a matcher, with its position in the block."""

    tx_index: int
    log_index: int
    log: LogEntry

    def pretty(self, label: str = "") -> str:
        lines = [f"{label}Tx[{self.tx_index}]Event[{self.log_index}]"]
        lines.append(f"  address: {to_hex(self.log.address)}")
        for i, t in enumerate(self.log.topics):
            lines.append(f"  topic[{i}]: {to_hex(t)}")
        lines.append(f"  data:    {to_hex(self.log.data)}")
        return "\n".join(lines)


class EventOffsetRecord(NamedTuple):
    address: int
    topic0: int
    topic1: int
    topic2: int
    topic3: int
    data: int
    data_len: int

    @classmethod
    def from_span(cls, span: LogSpan, base: int = 0) -> "EventOffsetRecord":
        """Record for a log whose span is relative to a receipt starting at `base`."""
        if not span.topics:
            raise ValueError("matched event has no topics")
        if len(span.topics) > MAX_OFFSET_TOPICS:
            raise ValueError(f"matched event has {len(span.topics)} topics (max {MAX_OFFSET_TOPICS})")
        s = span.shifted(base)
        topics = list(s.topics) + [0] * (MAX_OFFSET_TOPICS - len(s.topics))
        return cls(s.address, topics[0], topics[1], topics[2], topics[3], s.data, s.data_len)


def flatten_offsets(records: Iterable[EventOffsetRecord]) -> List[int]:
    out: List[int] = []
    for r in records:
        out.extend(r)
    return out


def offset_records(offsets: Sequence[int]) -> List[EventOffsetRecord]:
    """Regroup a flat offset list into records of seven."""
    if len(offsets) % OFFSET_RECORD_ARITY:
        raise ValueError(f"offset list length {len(offsets)} is not a multiple of {OFFSET_RECORD_ARITY}")
    return [
        EventOffsetRecord(*offsets[i : i + OFFSET_RECORD_ARITY])
        for i in range(0, len(offsets), OFFSET_RECORD_ARITY)
    ]


def slice_event(stream: bytes, record: EventOffsetRecord, topic_count: int) -> Tuple[bytes, Tuple[bytes, ...], bytes]:
    """
    Cut (address, topics, data) back out of a stream using one offset record.

    `topic_count` says how many of the four topic slots are populated; a
    position of 0 is otherwise indistinguishable from "absent".
    """
    if not 1 <= topic_count <= MAX_OFFSET_TOPICS:
        raise ValueError("topic_count must be in [1, 4]")
    topic_pos = (record.topic0, record.topic1, record.topic2, record.topic3)[:topic_count]
    address = stream[record.address : record.address + ADDRESS_SIZE]
    topics = tuple(stream[p : p + TOPIC_SIZE] for p in topic_pos)
    data = stream[record.data : record.data + record.data_len]
    return address, topics, data


__all__ = [
    "OFFSET_RECORD_ARITY",
    "EventMatcher",
    "EventMatchSpec",
    "MatchedEvent",
    "EventOffsetRecord",
    "flatten_offsets",
    "offset_records",
    "slice_event",
]
