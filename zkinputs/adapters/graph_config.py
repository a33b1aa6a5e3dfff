"""
Graph configuration loader.

Reads the graph YAML and exposes the one thing input preparation needs from
it: which contract to watch and which event signatures count as a match.

Example minimal graph YAML:

  specVersion: 0.0.2
  dataSources:
    - kind: ethereum
      network: mainnet
      source:
        address: '0xa60ecf32309539dd84f27a9563754dca818b815e'
      mapping:
        kind: ethereum/events
        handler: 'mygraph.mapping:handle_events'   # optional, used by --test
        eventHandlers:
          - event: 'Sync(uint112,uint112)'
          - event: '0x1c411e9a96e071241c2f21f7726b17ae89e3cab4c78be50e062b03a9fffbbad1'

Each `event` is either a Solidity event signature, hashed with Keccak-256, or
an already-hashed 0x-prefixed 32-byte topic. Only the first data source is
read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import yaml

from zkinputs.errors import ConfigError
from zkinputs.types.events import EventMatchSpec
from zkinputs.types.receipt import ADDRESS_SIZE, TOPIC_SIZE
from zkinputs.utils.hash import event_signature_hash
from zkinputs.utils.hexutil import is_hash_hex, to_bytes

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphConfig:
    address: bytes
    signatures: Tuple[bytes, ...]
    events: Tuple[str, ...]
    handler: Optional[str] = None

    def match_spec(self) -> EventMatchSpec:
        return EventMatchSpec(self.address, self.signatures)


def _int_bytes(v: int, size: int, what: str) -> bytes:
    try:
        return v.to_bytes(size, "big")
    except OverflowError:
        raise ConfigError(f"{what}: value does not fit in {size} bytes") from None


def _event_hash(event: Any, idx: int) -> bytes:
    if isinstance(event, int) and not isinstance(event, bool):
        # unquoted 0x... scalars load as YAML ints
        return _int_bytes(event, TOPIC_SIZE, f"eventHandlers[{idx}].event")
    if not isinstance(event, str) or not event.strip():
        raise ConfigError(f"eventHandlers[{idx}].event must be a non-empty string")
    ev = event.strip()
    if ev.startswith(("0x", "0X")):
        if not is_hash_hex(ev, TOPIC_SIZE):
            raise ConfigError(f"eventHandlers[{idx}].event is not a 32-byte hash: {ev!r}")
        return to_bytes(ev, size=TOPIC_SIZE)
    try:
        return event_signature_hash(ev)
    except (ValueError, UnicodeEncodeError) as e:
        raise ConfigError(f"eventHandlers[{idx}].event: {e}") from e


def graph_config_from_dict(cfg: Mapping[str, Any]) -> GraphConfig:
    """Validate an already-parsed graph config mapping."""
    if not isinstance(cfg, Mapping):
        raise ConfigError("graph config must be a mapping at the top level")
    sources = cfg.get("dataSources")
    if not isinstance(sources, list) or not sources:
        raise ConfigError("graph config needs a non-empty 'dataSources' list")
    if len(sources) > 1:
        log.warning("graph config has %d data sources; only the first is used", len(sources))
    ds = sources[0]
    if not isinstance(ds, Mapping):
        raise ConfigError("dataSources[0] must be a map")

    source = ds.get("source")
    if not isinstance(source, Mapping) or "address" not in source:
        raise ConfigError("dataSources[0].source.address is required")
    raw_addr = source["address"]
    if isinstance(raw_addr, int) and not isinstance(raw_addr, bool):
        address = _int_bytes(raw_addr, ADDRESS_SIZE, "source address")
    else:
        try:
            address = to_bytes(str(raw_addr), size=ADDRESS_SIZE, what="source address")
        except ValueError as e:
            raise ConfigError(str(e)) from e

    mapping = ds.get("mapping")
    if not isinstance(mapping, Mapping):
        raise ConfigError("dataSources[0].mapping is required")
    handlers = mapping.get("eventHandlers")
    if not isinstance(handlers, list) or not handlers:
        raise ConfigError("dataSources[0].mapping.eventHandlers must be a non-empty list")

    events: List[str] = []
    sigs: List[bytes] = []
    for i, h in enumerate(handlers):
        if not isinstance(h, Mapping) or "event" not in h:
            raise ConfigError(f"eventHandlers[{i}] must be a map with an 'event' key")
        sig = _event_hash(h["event"], i)
        events.append(h["event"].strip() if isinstance(h["event"], str) else "0x" + sig.hex())
        if sig not in sigs:
            sigs.append(sig)

    handler = mapping.get("handler")
    if handler is not None and not isinstance(handler, str):
        raise ConfigError("dataSources[0].mapping.handler must be a string")

    return GraphConfig(address=address, signatures=tuple(sigs), events=tuple(events), handler=handler or None)


def load_graph_config(path: Union[str, Path]) -> GraphConfig:
    """
    Load and validate a graph YAML file.

    Raises:
        ConfigError: file missing or unreadable, invalid YAML, or a required
                     key is missing or malformed.
    """
    p = Path(path).expanduser()
    try:
        with p.open("rb") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read graph config: {e}", path=str(p)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path=str(p)) from e

    try:
        cfg = graph_config_from_dict(data)
    except ConfigError as e:
        raise ConfigError(e.message, path=str(p)) from e
    log.debug("graph config %s: address=0x%s events=%s", p, cfg.address.hex(), list(cfg.events))
    return cfg


__all__ = ["GraphConfig", "graph_config_from_dict", "load_graph_config"]
