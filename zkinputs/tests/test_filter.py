from __future__ import annotations

import pytest

from zkinputs.errors import NoMatchError
from zkinputs.receipts.decoder import decode, decode_many
from zkinputs.receipts.filter import filter_events
from zkinputs.tests import (OTHER, SOURCE, SYNC, TRANSFER, build_log,
                            build_receipt)
from zkinputs.types.events import EventMatcher, EventMatchSpec
from zkinputs.types.receipt import LogEntry


def test_only_matching_receipt_survives(block_receipts, sync_spec):
    res = filter_events(decode_many(block_receipts), sync_spec)

    assert res.scanned == 3
    assert [r.tx_index for r in res.raw_receipts] == [1]
    assert res.raw_receipts[0].data == block_receipts[1].data
    assert res.event_count == 1
    (ev,) = res.events[0]
    assert (ev.tx_index, ev.log_index) == (1, 1)
    assert ev.log.topics[0] == SYNC
    # full receipt kept for display, including the non-matching log
    assert len(res.receipts[0].logs) == 2
    assert bool(res) is True


def test_multiple_signatures_and_order():
    logs = [
        build_log(SOURCE, [SYNC], b"\x01"),
        build_log(OTHER, [SYNC], b"\x02"),
        build_log(SOURCE, [TRANSFER, b"\x00" * 32], b"\x03"),
        build_log(SOURCE, [SYNC], b"\x04"),
    ]
    rcpt = decode(build_receipt(logs), tx_index=9)
    spec = EventMatchSpec("0x" + SOURCE.hex().upper(), [SYNC, TRANSFER])

    res = filter_events([rcpt], spec)
    assert [ev.log_index for ev in res.events[0]] == [0, 2, 3]
    assert [ev.log.data for ev in res.events[0]] == [b"\x01", b"\x03", b"\x04"]


def test_anonymous_log_never_matches(sync_spec):
    rcpt = decode(build_receipt([build_log(SOURCE, [], b"\x01")]))
    assert rcpt.logs[0].signature is None
    assert decode(build_receipt([build_log(SOURCE, [SYNC, TRANSFER])])).logs[0].signature == SYNC
    assert not filter_events([rcpt], sync_spec)


def test_empty_match_is_valid_until_required(sync_spec):
    rcpt = decode(build_receipt([build_log(OTHER, [SYNC])]))
    res = filter_events([rcpt, rcpt], sync_spec)

    assert res.raw_receipts == [] and res.events == [] and res.receipts == []
    assert res.event_count == 0
    with pytest.raises(NoMatchError) as ei:
        res.require_matches()
    assert ei.value.code == "NO_MATCH"
    assert ei.value.data == {"receipts_scanned": 2}


def test_custom_matcher_is_accepted():
    class DataPrefix:
        def match(self, log: LogEntry) -> bool:
            return log.data.startswith(b"\xfe")

    m = DataPrefix()
    assert isinstance(m, EventMatcher)
    rcpt = decode(build_receipt([build_log(OTHER, [SYNC], b"\xfe\x01"), build_log(SOURCE, [SYNC], b"\x01")]))
    res = filter_events([rcpt], m)
    assert [ev.log_index for ev in res.events[0]] == [0]


def test_match_spec_requires_signatures():
    with pytest.raises(ValueError):
        EventMatchSpec(SOURCE, [])
    with pytest.raises(ValueError):
        EventMatchSpec(SOURCE[:19], [SYNC])
