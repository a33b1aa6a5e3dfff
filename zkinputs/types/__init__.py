"""
zkinputs.types — plain data records shared across stages.

    from zkinputs.types import RawReceipt, DecodedReceipt, LogEntry, BlockHeader
    from zkinputs.types import EventMatchSpec, MatchedEvent, EventOffsetRecord
"""

from .events import (OFFSET_RECORD_ARITY, EventMatcher, EventMatchSpec,
                     EventOffsetRecord, MatchedEvent, flatten_offsets,
                     offset_records, slice_event)
from .receipt import (ADDRESS_SIZE, BLOOM_SIZE, HASH_SIZE, MAX_LOG_TOPICS,
                      TOPIC_SIZE,
                      BlockHeader, DecodedReceipt, LogEntry, LogSpan,
                      RawReceipt)

__all__ = [
    "ADDRESS_SIZE",
    "BLOOM_SIZE",
    "HASH_SIZE",
    "MAX_LOG_TOPICS",
    "TOPIC_SIZE",
    "OFFSET_RECORD_ARITY",
    "RawReceipt",
    "LogSpan",
    "LogEntry",
    "DecodedReceipt",
    "BlockHeader",
    "EventMatcher",
    "EventMatchSpec",
    "MatchedEvent",
    "EventOffsetRecord",
    "flatten_offsets",
    "offset_records",
    "slice_event",
]
