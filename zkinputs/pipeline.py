"""
zkinputs.pipeline — raw receipts + block header -> guest input buffers.

    decode -> filter -> stream/offsets -> encode

`prepare_inputs` is pure: the same receipts, header, state and matcher always
produce byte-identical buffers. `fetch_and_prepare` adds the two ledger calls
in front of it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from zkinputs.inputs.bundle import InputBundle
from zkinputs.inputs.encoding import (InputBuffer, encode_private,
                                      encode_public, normalize_state)
from zkinputs.receipts.decoder import decode_many
from zkinputs.receipts.filter import FilterResult, filter_events
from zkinputs.receipts.stream import build_stream
from zkinputs.types.events import (EventMatcher, EventOffsetRecord,
                                   MatchedEvent, offset_records)
from zkinputs.types.receipt import BlockHeader, RawReceipt

log = logging.getLogger(__name__)


class ReceiptSource(Protocol):
    def get_raw_receipts(self, block_id): ...

    def get_block(self, block_id) -> BlockHeader: ...


@dataclass(frozen=True)
class PreparedInputs:
    header: BlockHeader
    expected_state: str
    matched: FilterResult
    stream: bytes
    offsets: Tuple[int, ...]
    public: InputBuffer
    private: InputBuffer

    @property
    def events(self) -> List[MatchedEvent]:
        return [ev for evs in self.matched.events for ev in evs]

    def offset_records(self) -> List[EventOffsetRecord]:
        return offset_records(self.offsets)

    def to_bundle(self) -> InputBundle:
        return InputBundle(
            header=self.header,
            expected_state=self.expected_state,
            offsets=self.offsets,
            public=self.public,
            private=self.private,
        )


def prepare_inputs(
    raw_receipts: Sequence[RawReceipt],
    header: BlockHeader,
    expected_state: str,
    matcher: EventMatcher,
) -> PreparedInputs:
    """
    Build both input buffers for one block.

    Receipts may arrive in any order; they are sorted by tx index first.
    An empty match still yields valid buffers (empty stream, no offsets);
    call `result.matched.require_matches()` to refuse that case.

    Raises:
        MalformedReceiptError: a receipt does not decode.
        ValueError:            expected state is not even-length hex.
    """
    state = normalize_state(expected_state)
    ordered = sorted(raw_receipts, key=lambda r: r.tx_index)

    decoded = decode_many(ordered)
    matched = filter_events(decoded, matcher)
    stream, offsets = build_stream(matched.raw_receipts, matched.events)

    public = encode_public(header.number, header.hash, state)
    private = encode_private(stream, header.receipts_root)
    log.info(
        "prepared block %d: %d receipts, %d events, stream=%dB public=%d private=%d words",
        header.number,
        len(matched.raw_receipts),
        matched.event_count,
        len(stream),
        len(public),
        len(private),
    )
    return PreparedInputs(
        header=header,
        expected_state=state,
        matched=matched,
        stream=stream,
        offsets=tuple(offsets),
        public=public,
        private=private,
    )


def fetch_and_prepare(
    ledger: ReceiptSource,
    block_id,
    expected_state: str,
    matcher: EventMatcher,
) -> PreparedInputs:
    """Fetch the block header and raw receipts, then `prepare_inputs`."""
    header = ledger.get_block(block_id)
    raws = ledger.get_raw_receipts(block_id)
    return prepare_inputs(raws, header, expected_state, matcher)


__all__ = ["ReceiptSource", "PreparedInputs", "prepare_inputs", "fetch_and_prepare"]
