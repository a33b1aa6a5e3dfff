"""
zkinputs.inputs.bundle — persist generated inputs for later submission.

A bundle holds a public/private buffer pair together with the block context it
was generated for, so a rejected proving job can be resubmitted without
re-fetching or re-encoding anything.

On disk a bundle is a canonical CBOR map:

  {
    "version":       uint,          ; WIRE_FORMAT_VERSION of the buffers
    "block":         {"number": uint, "hash": bstr, "receiptsRoot": bstr},
    "expectedState": tstr,          ; hex, no 0x
    "offsets":       [uint],        ; 7 per matched event
    "public":        [uint],
    "private":       [uint]
  }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

import cbor2

from zkinputs.errors import ConfigError
from zkinputs.inputs.encoding import WIRE_FORMAT_VERSION, InputBuffer
from zkinputs.types.receipt import BlockHeader

log = logging.getLogger(__name__)

_REQUIRED = ("version", "block", "expectedState", "offsets", "public", "private")


@dataclass(frozen=True)
class InputBundle:
    header: BlockHeader
    expected_state: str
    offsets: Tuple[int, ...]
    public: InputBuffer
    private: InputBuffer
    version: int = WIRE_FORMAT_VERSION

    def to_obj(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "block": {
                "number": self.header.number,
                "hash": self.header.hash,
                "receiptsRoot": self.header.receipts_root,
            },
            "expectedState": self.expected_state,
            "offsets": list(self.offsets),
            "public": list(self.public.words),
            "private": list(self.private.words),
        }

    @classmethod
    def from_obj(cls, obj: Mapping[str, Any]) -> "InputBundle":
        missing = [k for k in _REQUIRED if k not in obj]
        if missing:
            raise ValueError(f"bundle missing required fields: {missing}")
        version = int(obj["version"])
        if version != WIRE_FORMAT_VERSION:
            raise ValueError(
                f"bundle wire format v{version} is not supported (expected v{WIRE_FORMAT_VERSION})"
            )
        block = obj["block"]
        header = BlockHeader(
            number=int(block["number"]),
            hash=bytes(block["hash"]),
            receipts_root=bytes(block["receiptsRoot"]),
        )
        return cls(
            header=header,
            expected_state=str(obj["expectedState"]),
            offsets=tuple(int(x) for x in obj["offsets"]),
            public=InputBuffer(obj["public"]).freeze(),
            private=InputBuffer(obj["private"]).freeze(),
            version=version,
        )


def dumps(bundle: InputBundle) -> bytes:
    return cbor2.dumps(bundle.to_obj(), canonical=True)


def loads(data: bytes) -> InputBundle:
    obj = cbor2.loads(bytes(data))
    if not isinstance(obj, Mapping):
        raise ValueError("bundle CBOR must decode to a map")
    return InputBundle.from_obj(obj)


def save_bundle(path: Union[str, Path], bundle: InputBundle) -> Path:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(dumps(bundle))
    log.info("wrote input bundle %s (public=%d private=%d words)", p, len(bundle.public), len(bundle.private))
    return p


def load_bundle(path: Union[str, Path]) -> InputBundle:
    p = Path(path).expanduser()
    try:
        data = p.read_bytes()
    except OSError as e:
        raise ConfigError(f"cannot read bundle: {e}", path=str(p)) from e
    try:
        return loads(data)
    except (ValueError, KeyError, TypeError, cbor2.CBORDecodeError) as e:
        raise ConfigError(f"invalid bundle: {e}", path=str(p)) from e


__all__ = ["InputBundle", "dumps", "loads", "save_bundle", "load_bundle"]
