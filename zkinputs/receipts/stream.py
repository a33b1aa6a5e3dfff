"""
zkinputs.receipts.stream — receipt stream and per-event offsets.

The stream is the byte concatenation of every matched raw receipt, tx index
ascending, with no separators. Receipt boundaries stay recoverable from the RLP
framing alone (`split_stream`), which is how the guest program walks it.

For every matched event the builder emits one `EventOffsetRecord`: the log's
span inside its own receipt shifted by the total length of the receipts that
precede it in the stream. Slicing the stream at those positions gives back the
event's address, topics and data byte for byte.

Public API
----------
- build_stream(raw_receipts, events) -> (stream: bytes, offsets: list[int])
- split_stream(stream) -> list[bytes]
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from zkinputs.receipts.decoder import receipt_extent
from zkinputs.types.events import (EventOffsetRecord, MatchedEvent,
                                   flatten_offsets)
from zkinputs.types.receipt import RawReceipt

log = logging.getLogger(__name__)


def build_stream(
    raw_receipts: Sequence[RawReceipt],
    events: Sequence[Sequence[MatchedEvent]],
) -> Tuple[bytes, List[int]]:
    """
    Concatenate matched receipts and compute flat offsets (7 ints per event).

    Raises:
        ValueError: the two lists disagree in length or tx index, or an event
                    carries no span (it was not produced by the decoder).
    """
    if len(raw_receipts) != len(events):
        raise ValueError(
            f"receipt/event list length mismatch: {len(raw_receipts)} != {len(events)}"
        )

    chunks: List[bytes] = []
    records: List[EventOffsetRecord] = []
    base = 0
    for rcpt, evs in zip(raw_receipts, events):
        for ev in evs:
            if ev.tx_index != rcpt.tx_index:
                raise ValueError(
                    f"event from tx {ev.tx_index} grouped under receipt {rcpt.tx_index}"
                )
            if ev.log.span is None:
                raise ValueError(f"event tx={ev.tx_index} log={ev.log_index} has no span")
            records.append(EventOffsetRecord.from_span(ev.log.span, base))
        chunks.append(rcpt.data)
        base += len(rcpt.data)

    stream = b"".join(chunks)
    offsets = flatten_offsets(records)
    log.debug(
        "stream: %d receipts, %d bytes, %d events",
        len(chunks),
        len(stream),
        len(records),
    )
    return stream, offsets


def split_stream(stream: bytes) -> List[bytes]:
    """
    Cut a receipt stream back into raw receipts using only RLP framing.

    Raises:
        MalformedReceiptError: the stream is truncated or starts a receipt with
                               something other than a type byte or list prefix.
                               `tx_index` is the position in the stream.
    """
    out: List[bytes] = []
    pos = 0
    while pos < len(stream):
        end = receipt_extent(stream, pos, tx_index=len(out))
        out.append(stream[pos:end])
        pos = end
    return out


__all__ = ["build_stream", "split_stream"]
