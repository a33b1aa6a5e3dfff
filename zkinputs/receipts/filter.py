"""
zkinputs.receipts.filter — keep only the receipts and logs a graph listens to.

A log matches when the configured `EventMatcher` says so; for the standard
`EventMatchSpec` that means "emitted by the source address AND topic 0 is one
of the accepted event signature hashes".

Output shape (parallel lists, tx index ascending):

    raw_receipts[i]  RawReceipt of the i-th receipt with >= 1 match
    events[i]        its matching logs only, log index ascending
    receipts[i]      the full DecodedReceipt (every log, for display)

Receipts without a match appear in none of the lists, so they never reach the
stream. An empty result is valid; `require_matches()` turns it into
`NoMatchError` for callers that refuse an empty proof input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from zkinputs.errors import NoMatchError
from zkinputs.types.events import EventMatcher, MatchedEvent
from zkinputs.types.receipt import DecodedReceipt, RawReceipt

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterResult:
    raw_receipts: List[RawReceipt] = field(default_factory=list)
    events: List[List[MatchedEvent]] = field(default_factory=list)
    receipts: List[DecodedReceipt] = field(default_factory=list)
    scanned: int = 0

    @property
    def event_count(self) -> int:
        return sum(len(evs) for evs in self.events)

    def __bool__(self) -> bool:
        return bool(self.raw_receipts)

    def require_matches(self) -> "FilterResult":
        if not self.raw_receipts:
            raise NoMatchError(
                f"no event matched in {self.scanned} receipts", receipts_scanned=self.scanned
            )
        return self


def filter_events(receipts: Iterable[DecodedReceipt], matcher: EventMatcher) -> FilterResult:
    """
    Select matching logs, preserving transaction and log order.

    `receipts` must already be in ascending tx-index order; this is not
    re-checked here (the pipeline sorts before decoding).
    """
    raw_out: List[RawReceipt] = []
    events_out: List[List[MatchedEvent]] = []
    decoded_out: List[DecodedReceipt] = []
    scanned = 0

    for rcpt in receipts:
        scanned += 1
        matched = [
            MatchedEvent(tx_index=rcpt.tx_index, log_index=i, log=lg)
            for i, lg in enumerate(rcpt.logs)
            if matcher.match(lg)
        ]
        if not matched:
            continue
        raw_out.append(RawReceipt(tx_index=rcpt.tx_index, data=rcpt.raw))
        events_out.append(matched)
        decoded_out.append(rcpt)

    result = FilterResult(
        raw_receipts=raw_out, events=events_out, receipts=decoded_out, scanned=scanned
    )
    log.info(
        "filter: %d/%d receipts matched, %d events", len(raw_out), scanned, result.event_count
    )
    return result


__all__ = ["FilterResult", "filter_events"]
