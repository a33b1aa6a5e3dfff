"""
zkinputs.host.mock
==================

In-process stand-in for the zkVM host's input interface:

    read_public()  -> int      next word of the public buffer
    read_private() -> int      next word of the private buffer
    wasm_input(is_public: int) -> int   the same, keyed the zkWASM way

Rules
-----
* Each buffer has its own cursor; words are served strictly in write order.
* Reading past the end of a buffer raises `InputUnderflowError`. That is
  always an encoder/guest layout mismatch and is never swallowed.
* Unread trailing words are not an error; `remaining()` reports them.
* One host per run. State lives on the instance only, so concurrent or
  repeated runs (tests) never see each other's cursors.

Field readers
-------------
`read_u64` / `read_blob` decode one wire field from any object implementing
`InputSource`, mirroring `zkinputs.inputs.encoding` exactly. The reference
guest uses them; so can any Python guest under test.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Protocol, runtime_checkable

from zkinputs.errors import InputUnderflowError
from zkinputs.inputs.encoding import InputBuffer, unpack_blob, words_for

log = logging.getLogger(__name__)

PUBLIC = "public"
PRIVATE = "private"


@runtime_checkable
class InputSource(Protocol):
    def read_public(self) -> int:
        ...

    def read_private(self) -> int:
        ...


class _Cursor:
    __slots__ = ("name", "words", "pos")

    def __init__(self, name: str, words: Iterable[int]) -> None:
        self.name = name
        self.words = tuple(words)
        self.pos = 0

    def next(self) -> int:
        if self.pos >= len(self.words):
            raise InputUnderflowError(
                f"{self.name} input exhausted after {len(self.words)} words",
                buffer=self.name,
                available=len(self.words),
            )
        w = self.words[self.pos]
        self.pos += 1
        return w


class MockHost:
    """Host input interface backed by a public and a private InputBuffer."""

    def __init__(self, public: InputBuffer, private: InputBuffer) -> None:
        self._public = _Cursor(PUBLIC, public.words)
        self._private = _Cursor(PRIVATE, private.words)
        self._reads: List[str] = []

    def read_public(self) -> int:
        w = self._public.next()
        self._reads.append(PUBLIC)
        return w

    def read_private(self) -> int:
        w = self._private.next()
        self._reads.append(PRIVATE)
        return w

    def wasm_input(self, is_public: int) -> int:
        return self.read_public() if is_public else self.read_private()

    def remaining(self) -> Dict[str, int]:
        return {
            PUBLIC: len(self._public.words) - self._public.pos,
            PRIVATE: len(self._private.words) - self._private.pos,
        }

    @property
    def reads(self) -> List[str]:
        """Buffer name of every successful read, in order."""
        return list(self._reads)

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        r = self.remaining()
        return f"MockHost(public_left={r[PUBLIC]}, private_left={r[PRIVATE]})"


def _reader(host: InputSource, public: bool):
    return host.read_public if public else host.read_private


def read_u64(host: InputSource, public: bool) -> int:
    return _reader(host, public)()


def read_blob(host: InputSource, public: bool) -> bytes:
    """Read a length word and the packed data words that follow it."""
    read = _reader(host, public)
    length = read()
    words = [read() for _ in range(words_for(length))]
    return unpack_blob(length, words)


__all__ = ["PUBLIC", "PRIVATE", "InputSource", "MockHost", "read_u64", "read_blob"]
