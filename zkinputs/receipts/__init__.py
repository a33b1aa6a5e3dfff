"""
zkinputs.receipts — decoding, filtering and stream layout for raw receipts.

This package centralizes:
  • decoder:  raw RLP receipt → DecodedReceipt (with per-log byte spans)
  • filter:   DecodedReceipts + matcher → matched receipts and events
  • stream:   matched receipts → byte stream + 7-int offset records

Import convenience
------------------
    from zkinputs.receipts import decode, filter_events, build_stream
"""

from __future__ import annotations

from . import decoder as decoder
from . import filter as filter  # noqa: A001 - submodule name
from . import stream as stream
from .decoder import decode, decode_many, receipt_extent
from .filter import FilterResult, filter_events
from .stream import build_stream, split_stream

__all__ = [
    "decoder",
    "filter",
    "stream",
    "decode",
    "decode_many",
    "receipt_extent",
    "FilterResult",
    "filter_events",
    "build_stream",
    "split_stream",
]
