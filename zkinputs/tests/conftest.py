from __future__ import annotations

import os
from typing import List

import pytest

from zkinputs.config import get_config
from zkinputs.tests import (BLOCK_HASH, BLOCK_NUMBER, OTHER, RECEIPTS_ROOT,
                            SOURCE, SYNC, TRANSFER, build_log, build_receipt)
from zkinputs.types.events import EventMatchSpec
from zkinputs.types.receipt import BlockHeader, RawReceipt


@pytest.fixture
def sync_spec() -> EventMatchSpec:
    return EventMatchSpec(SOURCE, [SYNC])


@pytest.fixture
def header() -> BlockHeader:
    return BlockHeader(number=BLOCK_NUMBER, hash=BLOCK_HASH, receipts_root=RECEIPTS_ROOT)


@pytest.fixture
def block_receipts() -> List[RawReceipt]:
    """
    Three receipts; only tx 1 carries a matching log.

      tx 0: Transfer from OTHER                       (no match)
      tx 1: Transfer + Sync from SOURCE, type 2       (log 1 matches)
      tx 2: Sync from OTHER                           (no match)
    """
    r0 = build_receipt([build_log(OTHER, [TRANSFER, b"\x11" * 32, b"\x22" * 32], b"\x01" * 32)])
    r1 = build_receipt(
        [
            build_log(SOURCE, [TRANSFER, b"\x33" * 32, b"\x44" * 32], b"\x02" * 32),
            build_log(SOURCE, [SYNC], b"\x05" * 32 + b"\x06" * 32),
        ],
        tx_type=2,
        gas=84000,
    )
    r2 = build_receipt([build_log(OTHER, [SYNC], b"\x07" * 64)], gas=120000)
    return [RawReceipt(0, r0), RawReceipt(1, r1), RawReceipt(2, r2)]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch):
    for k in list(os.environ):
        if k.startswith("ZKINPUTS_"):
            monkeypatch.delenv(k, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()
