"""
zkinputs.inputs.encoding — public/private input buffers for the guest program.

Wire format (version 1)
-----------------------
A buffer is a flat sequence of unsigned 64-bit *words*. Two field kinds exist:

  u64 field   one word holding the value
  blob field  one word holding the byte length n, then ceil(n/8) words, each
              packing 8 consecutive bytes little-endian; the last chunk is
              zero-padded

Field order is fixed:

  public   [u64 block_number] [blob block_hash(32)] [blob expected_state]
  private  [blob receipt_stream] [blob receipts_root(32)]

For submission a buffer renders as its words in decimal, separated by single
spaces. Any change to the layout above is a new WIRE_FORMAT_VERSION, never a
silent edit: the guest program decodes these words positionally.

Public API
----------
- InputBuffer (append-only; frozen once returned by an encoder)
- encode_public(block_number, block_hash, expected_state) -> InputBuffer
- encode_private(stream, receipts_root) -> InputBuffer
- normalize_state(expected_state) -> str
- pack_blob(data) -> list[int] / unpack_blob(length, words) -> bytes
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from zkinputs.types.receipt import HASH_SIZE
from zkinputs.utils.hexutil import HexLike, strip_0x, to_bytes

WIRE_FORMAT_VERSION = 1
WORD_BYTES = 8
MAX_WORD = (1 << 64) - 1


# ------------------------------ word packing --------------------------------


def words_for(length: int) -> int:
    """Number of data words a blob of `length` bytes occupies (length word excluded)."""
    return (length + WORD_BYTES - 1) // WORD_BYTES


def pack_blob(data: bytes) -> List[int]:
    """[len(data), w0, w1, ...] with 8 bytes per word, little-endian, zero-padded."""
    out = [len(data)]
    for i in range(0, len(data), WORD_BYTES):
        chunk = data[i : i + WORD_BYTES].ljust(WORD_BYTES, b"\x00")
        out.append(int.from_bytes(chunk, "little"))
    return out


def unpack_blob(length: int, words: Sequence[int]) -> bytes:
    """Inverse of pack_blob's data words; `words` must hold exactly words_for(length) items."""
    if len(words) != words_for(length):
        raise ValueError(f"blob of {length} bytes needs {words_for(length)} words, got {len(words)}")
    raw = b"".join(int(w).to_bytes(WORD_BYTES, "little") for w in words)
    return raw[:length]


def _check_word(v: int) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise TypeError(f"word must be int, got {type(v).__name__}")
    if not 0 <= v <= MAX_WORD:
        raise ValueError(f"word out of u64 range: {v}")
    return v


# ------------------------------ buffer --------------------------------------


class InputBuffer:
    """
    Append-only sequence of u64 words.

    Encoders freeze the buffer before returning it; writing to a frozen buffer
    raises RuntimeError.
    """

    def __init__(self, words: Iterable[int] = ()) -> None:
        self._words: List[int] = [_check_word(w) for w in words]
        self._frozen = False

    # --- writing

    def _writable(self) -> None:
        if self._frozen:
            raise RuntimeError("input buffer is frozen")

    def write_u64(self, value: int) -> "InputBuffer":
        self._writable()
        self._words.append(_check_word(value))
        return self

    def write_blob(self, data: Union[bytes, bytearray, memoryview]) -> "InputBuffer":
        self._writable()
        self._words.extend(pack_blob(bytes(data)))
        return self

    def freeze(self) -> "InputBuffer":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- reading

    @property
    def words(self) -> Tuple[int, ...]:
        return tuple(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._words))

    def __getitem__(self, idx: int) -> int:
        return self._words[idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InputBuffer):
            return NotImplemented
        return self._words == other._words

    def __hash__(self) -> int:
        return hash(tuple(self._words))

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"InputBuffer(words={len(self._words)}, frozen={self._frozen})"

    # --- text form

    def render(self) -> str:
        """Decimal words separated by single spaces."""
        return " ".join(str(w) for w in self._words)

    def as_strings(self) -> List[str]:
        """Words as decimal strings, the array form the prover API takes."""
        return [str(w) for w in self._words]

    @classmethod
    def parse(cls, text: str) -> "InputBuffer":
        """Parse rendered text back into a frozen buffer."""
        try:
            words = [int(tok, 10) for tok in text.split()]
        except ValueError as e:
            raise ValueError(f"invalid input word: {e}") from None
        return cls(words).freeze()


# ------------------------------ encoders ------------------------------------


def normalize_state(expected_state: str) -> str:
    """
    Expected state as stored on the wire: no 0x prefix, lower-case, even length.

    Re-adding "0x" to the decoded bytes' hex reproduces a lower-case argument.
    """
    if not isinstance(expected_state, str):
        raise TypeError("expected state must be a hex string")
    body = strip_0x(expected_state.strip()).lower()
    if len(body) % 2:
        raise ValueError(f"expected state has odd hex length: {expected_state!r}")
    try:
        bytes.fromhex(body)
    except ValueError as e:
        raise ValueError(f"expected state is not hex: {expected_state!r}") from e
    return body


def encode_public(block_number: int, block_hash: HexLike, expected_state: str) -> InputBuffer:
    """Public input: block number, block hash, expected state."""
    hash_b = to_bytes(block_hash, size=HASH_SIZE, what="block hash")
    state_b = bytes.fromhex(normalize_state(expected_state))
    _check_word(block_number)

    buf = InputBuffer()
    buf.write_u64(block_number)
    buf.write_blob(hash_b)
    buf.write_blob(state_b)
    return buf.freeze()


def encode_private(stream: bytes, receipts_root: HexLike) -> InputBuffer:
    """Private input: receipt stream, receipts root."""
    if not isinstance(stream, (bytes, bytearray, memoryview)):
        raise TypeError("stream must be bytes-like")
    root_b = to_bytes(receipts_root, size=HASH_SIZE, what="receipts root")

    buf = InputBuffer()
    buf.write_blob(bytes(stream))
    buf.write_blob(root_b)
    return buf.freeze()


__all__ = [
    "WIRE_FORMAT_VERSION",
    "WORD_BYTES",
    "MAX_WORD",
    "InputBuffer",
    "words_for",
    "pack_blob",
    "unpack_blob",
    "normalize_state",
    "encode_public",
    "encode_private",
]
