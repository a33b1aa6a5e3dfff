"""
zkinputs.host.guest — reference guest program in Python.

Reads the inputs exactly as a zkVM guest does, through the host's word
interface, and re-derives everything the encoder produced:

  public:   block number, block hash, expected state
  private:  receipt stream, receipts root

then splits the stream on RLP framing, decodes each receipt, re-applies the
matcher and rebuilds the offset records. Every receipt in the stream must carry
at least one matching event; a stream that does not is rejected.

When a state handler is configured (a callable taking the matched events and
returning the resulting state as bytes or hex), its output must equal the
expected state from the public input. This is the check the real guest
asserts before a proof can be produced.

Inside the guest, `MatchedEvent.tx_index` is the receipt's position within the
stream: the block-level transaction index is not part of the inputs.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from zkinputs.errors import ConfigError, GuestAssertionError
from zkinputs.host.mock import InputSource, read_blob, read_u64
from zkinputs.inputs.encoding import normalize_state
from zkinputs.receipts.decoder import decode
from zkinputs.receipts.filter import filter_events
from zkinputs.receipts.stream import build_stream, split_stream
from zkinputs.types.events import EventMatcher, MatchedEvent
from zkinputs.types.receipt import HASH_SIZE

log = logging.getLogger(__name__)

StateHandler = Callable[[List[MatchedEvent]], Union[bytes, str]]


@dataclass(frozen=True)
class GuestResult:
    block_number: int
    block_hash: bytes
    expected_state: str
    receipts_root: bytes
    receipts: Tuple[bytes, ...]
    events: Tuple[MatchedEvent, ...]
    offsets: Tuple[int, ...]
    state: Optional[str] = None


def _state_hex(out: Union[bytes, str]) -> str:
    if isinstance(out, (bytes, bytearray, memoryview)):
        return bytes(out).hex()
    return normalize_state(out)


class ReferenceGuest:
    def __init__(self, matcher: EventMatcher, handler: Optional[StateHandler] = None) -> None:
        self.matcher = matcher
        self.handler = handler

    def run(self, host: InputSource) -> GuestResult:
        block_number = read_u64(host, True)
        block_hash = read_blob(host, True)
        expected_state = read_blob(host, True).hex()
        stream = read_blob(host, False)
        receipts_root = read_blob(host, False)

        if len(block_hash) != HASH_SIZE:
            raise GuestAssertionError(f"block hash is {len(block_hash)} bytes")
        if len(receipts_root) != HASH_SIZE:
            raise GuestAssertionError(f"receipts root is {len(receipts_root)} bytes")

        raws = split_stream(stream)
        decoded = [decode(raw, i) for i, raw in enumerate(raws)]
        matched = filter_events(decoded, self.matcher)
        if len(matched.raw_receipts) != len(raws):
            raise GuestAssertionError(
                "receipt stream carries receipts without a matching event",
                data={"receipts": len(raws), "matched": len(matched.raw_receipts)},
            )
        rebuilt, offsets = build_stream(matched.raw_receipts, matched.events)
        if rebuilt != stream:
            raise GuestAssertionError("receipt stream does not re-serialize to itself")

        events = tuple(ev for evs in matched.events for ev in evs)
        state: Optional[str] = None
        if self.handler is not None:
            state = _state_hex(self.handler(list(events)))
            if state != expected_state:
                raise GuestAssertionError(
                    "state mismatch",
                    data={"expected": "0x" + expected_state, "computed": "0x" + state},
                )

        log.info(
            "guest: block=%d receipts=%d events=%d", block_number, len(raws), len(events)
        )
        return GuestResult(
            block_number=block_number,
            block_hash=block_hash,
            expected_state=expected_state,
            receipts_root=receipts_root,
            receipts=tuple(raws),
            events=events,
            offsets=tuple(offsets),
            state=state,
        )


def load_handler(path: str) -> StateHandler:
    """
    Resolve "package.module:function" to a state handler callable.

    Raises:
        ConfigError: malformed path, missing module or attribute, or not callable.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"handler must look like 'package.module:function', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import handler module {module_name!r}: {e}") from e
    fn = getattr(module, attr, None)
    if not callable(fn):
        raise ConfigError(f"handler {path!r} is not a callable")
    return fn


__all__ = ["StateHandler", "GuestResult", "ReferenceGuest", "load_handler"]
