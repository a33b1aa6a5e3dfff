"""
zkinputs.receipts.decoder — raw (RLP) receipt → DecodedReceipt.

Wire shape (Yellow Paper / EIP-658, EIP-2718):

  legacy:  rlp([status, cumulativeGasUsed, logsBloom, logs])
  typed:   type_byte || rlp([status, cumulativeGasUsed, logsBloom, logs])

  logs  = [log, ...]
  log   = [address(20), [topic(32), ...], data]

`status` is 0x80 (failure) or 0x01 (success); pre-Byzantium receipts put a
32-byte intermediate state root in the same slot.

The decoder walks the RLP framing itself (one `consume_length_prefix` per item)
instead of handing the whole payload to `rlp.decode`, because the stream
builder needs the byte position of every address, topic and data payload, not
only their values. Each `LogEntry` comes back with a `LogSpan` relative to the
first byte of the raw receipt (type byte included).

Public API
----------
- decode(raw, tx_index=0) -> DecodedReceipt
- decode_many(raws) -> list[DecodedReceipt]
- receipt_extent(buf, pos) -> int   (end of the receipt starting at `pos`)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple, Union

from rlp.codec import consume_length_prefix
from rlp.exceptions import DecodingError

from zkinputs.errors import MalformedReceiptError
from zkinputs.types.receipt import (ADDRESS_SIZE, BLOOM_SIZE, HASH_SIZE,
                                    MAX_LOG_TOPICS, TOPIC_SIZE, DecodedReceipt, LogEntry,
                                    LogSpan, RawReceipt)

log = logging.getLogger(__name__)

# Bytes below this value are EIP-2718 transaction types; a receipt never starts
# with an RLP string, and a legacy receipt starts with a list prefix (>= 0xc0).
_TYPE_BYTE_LIMIT = 0x80
_LIST_PREFIX_MIN = 0xC0

_RECEIPT_ARITY = 4
_LOG_ARITY = 3

# (is_list, payload_start, payload_end)
Item = Tuple[bool, int, int]


# ------------------------------ RLP framing ---------------------------------


def _item(buf: bytes, pos: int, end: int, tx_index: int) -> Item:
    if pos >= end:
        raise MalformedReceiptError("truncated RLP item", tx_index=tx_index, data={"pos": pos})
    try:
        _prefix, typ, length, start = consume_length_prefix(buf, pos)
    except (DecodingError, IndexError) as e:
        raise MalformedReceiptError(
            f"invalid RLP prefix: {e}", tx_index=tx_index, data={"pos": pos}
        ) from None
    stop = start + length
    if stop > end:
        raise MalformedReceiptError(
            "RLP item overruns its container",
            tx_index=tx_index,
            data={"pos": pos, "end": end, "length": length},
        )
    return typ is list, start, stop


def _children(buf: bytes, item: Item, tx_index: int, what: str) -> List[Item]:
    is_list, start, stop = item
    if not is_list:
        raise MalformedReceiptError(f"{what}: expected RLP list", tx_index=tx_index)
    out: List[Item] = []
    pos = start
    while pos < stop:
        child = _item(buf, pos, stop, tx_index)
        out.append(child)
        pos = child[2]
    return out


def _string(buf: bytes, item: Item, tx_index: int, what: str, size: int = -1) -> bytes:
    is_list, start, stop = item
    if is_list:
        raise MalformedReceiptError(f"{what}: expected RLP string", tx_index=tx_index)
    value = buf[start:stop]
    if size >= 0 and len(value) != size:
        raise MalformedReceiptError(
            f"{what}: expected {size} bytes, got {len(value)}", tx_index=tx_index
        )
    return value


def _envelope(buf: bytes, pos: int, tx_index: int) -> Tuple[int, Item]:
    """Receipt type and top-level list item for the receipt starting at `pos`."""
    if pos >= len(buf):
        raise MalformedReceiptError("empty receipt", tx_index=tx_index)
    first = buf[pos]
    if first < _TYPE_BYTE_LIMIT:
        tx_type, body = first, pos + 1
    elif first >= _LIST_PREFIX_MIN:
        tx_type, body = 0, pos
    else:
        raise MalformedReceiptError(
            f"receipt starts with RLP string prefix 0x{first:02x}", tx_index=tx_index
        )
    if body >= len(buf) or buf[body] < _LIST_PREFIX_MIN:
        raise MalformedReceiptError("receipt payload is not an RLP list", tx_index=tx_index)
    return tx_type, _item(buf, body, len(buf), tx_index)


def receipt_extent(buf: bytes, pos: int = 0, *, tx_index: int = 0) -> int:
    """
    End position of the receipt whose first byte is at `pos`.

    Only the framing is checked; the body is not decoded.
    """
    _tx_type, top = _envelope(buf, pos, tx_index)
    return top[2]


# ------------------------------ field decoding ------------------------------


def _status(value: bytes, tx_index: int) -> Tuple[bool, Union[bytes, None]]:
    if len(value) == HASH_SIZE:
        return True, value
    if value == b"":
        return False, None
    if value == b"\x01":
        return True, None
    raise MalformedReceiptError(f"invalid status field 0x{value.hex()}", tx_index=tx_index)


def _uint(value: bytes, tx_index: int, what: str) -> int:
    if value[:1] == b"\x00":
        raise MalformedReceiptError(f"{what}: non-canonical integer (leading zero)", tx_index=tx_index)
    return int.from_bytes(value, "big")


def _log(buf: bytes, item: Item, tx_index: int, log_index: int) -> LogEntry:
    what = f"log[{log_index}]"
    fields = _children(buf, item, tx_index, what)
    if len(fields) != _LOG_ARITY:
        raise MalformedReceiptError(
            f"{what}: expected {_LOG_ARITY} fields, got {len(fields)}", tx_index=tx_index
        )
    addr_item, topics_item, data_item = fields

    address = _string(buf, addr_item, tx_index, f"{what}.address", ADDRESS_SIZE)
    topic_items = _children(buf, topics_item, tx_index, f"{what}.topics")
    if len(topic_items) > MAX_LOG_TOPICS:
        raise MalformedReceiptError(
            f"{what}: {len(topic_items)} topics (max {MAX_LOG_TOPICS})", tx_index=tx_index
        )
    topics = [
        _string(buf, t, tx_index, f"{what}.topics[{i}]", TOPIC_SIZE)
        for i, t in enumerate(topic_items)
    ]
    data = _string(buf, data_item, tx_index, f"{what}.data")

    span = LogSpan(
        address=addr_item[1],
        topics=tuple(t[1] for t in topic_items),
        data=data_item[1],
        data_len=data_item[2] - data_item[1],
    )
    return LogEntry(address=address, topics=topics, data=data, span=span)


# ------------------------------ public API ----------------------------------


def decode(raw: bytes, tx_index: int = 0) -> DecodedReceipt:
    """
    Decode one raw receipt.

    Raises:
        MalformedReceiptError: bad RLP, trailing bytes, wrong arity or field sizes.
    """
    buf = bytes(raw)
    tx_type, top = _envelope(buf, 0, tx_index)
    if top[2] != len(buf):
        raise MalformedReceiptError(
            f"{len(buf) - top[2]} trailing bytes after receipt", tx_index=tx_index
        )

    fields = _children(buf, top, tx_index, "receipt")
    if len(fields) != _RECEIPT_ARITY:
        raise MalformedReceiptError(
            f"receipt: expected {_RECEIPT_ARITY} fields, got {len(fields)}", tx_index=tx_index
        )
    status_item, gas_item, bloom_item, logs_item = fields

    status, post_state = _status(_string(buf, status_item, tx_index, "status"), tx_index)
    gas = _uint(_string(buf, gas_item, tx_index, "cumulativeGasUsed"), tx_index, "cumulativeGasUsed")
    bloom = _string(buf, bloom_item, tx_index, "logsBloom", BLOOM_SIZE)
    logs = tuple(
        _log(buf, it, tx_index, i)
        for i, it in enumerate(_children(buf, logs_item, tx_index, "logs"))
    )

    log.debug("decoded receipt tx=%d type=%d logs=%d", tx_index, tx_type, len(logs))
    return DecodedReceipt(
        tx_index=tx_index,
        tx_type=tx_type,
        status=status,
        cumulative_gas_used=gas,
        logs_bloom=bloom,
        logs=logs,
        raw=buf,
        post_state=post_state,
    )


def decode_many(raws: Iterable[RawReceipt]) -> List[DecodedReceipt]:
    """Decode receipts in the order given; the first failure aborts with its tx index."""
    out = [decode(r.data, r.tx_index) for r in raws]
    log.debug("decoded %d receipts", len(out))
    return out


__all__ = ["decode", "decode_many", "receipt_extent"]
