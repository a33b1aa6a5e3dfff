from __future__ import annotations

import pytest
import rlp

from zkinputs.errors import MalformedReceiptError
from zkinputs.receipts.decoder import decode, decode_many, receipt_extent
from zkinputs.tests import (OTHER, SOURCE, SYNC, TRANSFER, build_log,
                            build_receipt)
from zkinputs.types.receipt import BLOOM_SIZE, RawReceipt


def _two_log_logs():
    return [
        build_log(SOURCE, [TRANSFER, b"\x01" * 32, b"\x02" * 32], b"\xaa" * 40),
        build_log(OTHER, [SYNC], b""),
    ]


def test_legacy_receipt_fields():
    raw = build_receipt(_two_log_logs(), gas=52_000)
    r = decode(raw, tx_index=3)

    assert r.tx_index == 3
    assert r.tx_type == 0
    assert r.status is True
    assert r.post_state is None
    assert r.cumulative_gas_used == 52_000
    assert r.logs_bloom == b"\x00" * BLOOM_SIZE
    assert r.raw == raw
    assert [lg.address for lg in r.logs] == [SOURCE, OTHER]
    assert r.logs[0].topics == (TRANSFER, b"\x01" * 32, b"\x02" * 32)
    assert r.logs[0].data == b"\xaa" * 40
    assert r.logs[1].data == b""


def test_typed_and_legacy_decode_identically_apart_from_type():
    logs = _two_log_logs()
    legacy = decode(build_receipt(logs))
    typed = decode(build_receipt(logs, tx_type=2))

    assert typed.tx_type == 2
    assert typed.logs == legacy.logs
    assert typed.status == legacy.status
    assert typed.cumulative_gas_used == legacy.cumulative_gas_used


def test_failed_status_and_pre_byzantium_root():
    failed = decode(build_receipt([], status=b""))
    assert failed.status is False

    root = b"\x9c" * 32
    pre = decode(build_receipt([], status=root))
    assert pre.status is True
    assert pre.post_state == root
    assert pre.to_dict()["root"] == "0x" + root.hex()


def test_spans_point_at_payload_bytes():
    raw = build_receipt(_two_log_logs(), tx_type=1)
    r = decode(raw)
    for lg in r.logs:
        sp = lg.span
        assert raw[sp.address : sp.address + 20] == lg.address
        # short string prefixes: 0x80 + len
        assert raw[sp.address - 1] == 0x80 + 20
        for pos, topic in zip(sp.topics, lg.topics):
            assert raw[pos : pos + 32] == topic
            assert raw[pos - 1] == 0x80 + 32
        assert raw[sp.data : sp.data + sp.data_len] == lg.data
        assert sp.data_len == len(lg.data)


def test_single_byte_data_has_no_prefix():
    raw = build_receipt([build_log(SOURCE, [SYNC], b"\x07")])
    lg = decode(raw).logs[0]
    assert lg.span.data_len == 1
    assert raw[lg.span.data] == 0x07


def test_receipt_without_logs():
    r = decode(build_receipt([]))
    assert r.logs == ()


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\x02",  # type byte only
        b"\x85hello",  # starts with an RLP string
        rlp.encode([b"\x01", 1, b"\x00" * BLOOM_SIZE]),  # 3 fields
        rlp.encode([b"\x01", 1, b"\x00" * 10, []]),  # short bloom
        rlp.encode([b"\x02", 1, b"\x00" * BLOOM_SIZE, []]),  # bad status
        rlp.encode([b"\x01", 1, b"\x00" * BLOOM_SIZE, [[b"\x01" * 19, [], b""]]]),  # short address
        rlp.encode([b"\x01", 1, b"\x00" * BLOOM_SIZE, [[b"\x01" * 20, [b"\x02" * 31], b""]]]),
        rlp.encode([b"\x01", 1, b"\x00" * BLOOM_SIZE, [[b"\x01" * 20, []]]]),  # log arity
        rlp.encode([b"\x01", 1, b"\x00" * BLOOM_SIZE, b"not-a-list"]),
        rlp.encode([b"\x01", b"\x00\x01", b"\x00" * BLOOM_SIZE, []]),  # leading zero gas
    ],
)
def test_malformed_receipts_rejected(raw):
    with pytest.raises(MalformedReceiptError):
        decode(raw, tx_index=7)


def test_truncated_and_trailing_bytes():
    raw = build_receipt(_two_log_logs())
    with pytest.raises(MalformedReceiptError) as ei:
        decode(raw[:-1], tx_index=4)
    assert ei.value.tx_index == 4
    assert ei.value.to_dict()["code"] == "MALFORMED_RECEIPT"

    with pytest.raises(MalformedReceiptError):
        decode(raw + b"\x00")


def test_more_than_four_topics_rejected():
    ok = build_receipt([build_log(SOURCE, [SYNC] + [b"\x01" * 32] * 3, b"")])
    assert len(decode(ok).logs[0].topics) == 4

    raw = build_receipt([build_log(SOURCE, [SYNC] + [b"\x01" * 32] * 4, b"")])
    with pytest.raises(MalformedReceiptError) as ei:
        decode_many([RawReceipt(0, build_receipt([])), RawReceipt(3, raw)])
    assert ei.value.tx_index == 3
    assert "5 topics" in ei.value.message


def test_decode_many_reports_failing_index():
    good = build_receipt([])
    with pytest.raises(MalformedReceiptError) as ei:
        decode_many([RawReceipt(0, good), RawReceipt(1, good), RawReceipt(5, b"\x85hello")])
    assert ei.value.tx_index == 5
    assert ei.value.data["tx_index"] == 5


def test_receipt_extent_walks_concatenation():
    a = build_receipt(_two_log_logs())
    b = build_receipt([], tx_type=2)
    buf = a + b
    end_a = receipt_extent(buf, 0)
    assert end_a == len(a)
    assert receipt_extent(buf, end_a) == len(buf)
