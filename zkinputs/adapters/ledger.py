"""
zkinputs.adapters.ledger — JSON-RPC client for the ledger node.

Calls
-----
- debug_getRawReceipts(blockId)                -> ["0x<rlp>", ...]  (tx index order)
- eth_getBlockByNumber("0x<n>", false)         -> {"number", "hash", "receiptsRoot", ...}
- eth_getBlockByHash("0x<32 bytes>", false)    -> same

A block id given on the command line is a hash when it has 64 or more hex
characters (0x optional), otherwise a block number in decimal or 0x-hex.

Usage
-----
    with LedgerClient("http://127.0.0.1:8545") as ledger:
        bid = parse_block_id("17000000")
        header = ledger.get_block(bid)
        raws = ledger.get_raw_receipts(bid)

JSON-RPC errors and malformed replies raise `LedgerError`. Transport failures
(timeouts, refused connections) are retried with backoff and, once the
attempts are spent, also surface as `LedgerError`.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, List, Optional, Sequence, Union

import httpx

from zkinputs.adapters.http import error_detail, retry_request
from zkinputs.errors import LedgerError
from zkinputs.types.receipt import HASH_SIZE, BlockHeader, RawReceipt
from zkinputs.utils.hexutil import strip_0x, to_bytes, to_hex

log = logging.getLogger(__name__)

BlockId = Union[int, bytes]

_HASH_HEX_CHARS = HASH_SIZE * 2


def parse_block_id(value: Union[str, int]) -> BlockId:
    """
    "0x<64 hex>" / "<64 hex>" -> 32-byte hash; "17000000" / "0x1036640" -> int.

    Raises:
        ValueError: not a number and not a 32-byte hash.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise ValueError("block number must be >= 0")
        return value
    s = str(value).strip()
    if len(strip_0x(s)) >= _HASH_HEX_CHARS:
        return to_bytes(s, size=HASH_SIZE, what="block hash")
    try:
        n = int(s, 16) if s.startswith(("0x", "0X")) else int(s, 10)
    except ValueError:
        raise ValueError(f"invalid block id {value!r}: expected a number or a 32-byte hash") from None
    if n < 0:
        raise ValueError("block number must be >= 0")
    return n


def _block_param(block_id: BlockId) -> str:
    if isinstance(block_id, int):
        return hex(block_id)
    return to_hex(block_id)


def _quantity(v: Any, what: str) -> int:
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    if isinstance(v, str) and v.startswith(("0x", "0X")):
        try:
            return int(v, 16)
        except ValueError:
            pass
    raise LedgerError(f"{what}: expected hex quantity, got {v!r}")


class LedgerClient:
    """Synchronous JSON-RPC client with retries for idempotent reads."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 30.0,
        retries: int = 3,
        backoff_base: float = 0.25,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout = float(timeout)
        self.retries = int(retries)
        self.backoff_base = float(backoff_base)
        self._ids = itertools.count(1)

        self._own_client = client is None
        self._client = client or httpx.Client(
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=self.timeout,
        )

    # --- context management

    def close(self) -> None:
        if self._own_client:
            self._client.close()

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- JSON-RPC

    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        """Perform one JSON-RPC call and return its `result`."""
        req_id = next(self._ids)
        body = {"jsonrpc": "2.0", "id": req_id, "method": method, "params": list(params)}

        def _op() -> httpx.Response:
            return self._client.post(self.rpc_url, json=body)

        try:
            resp = retry_request(_op, retries=self.retries, backoff_base=self.backoff_base, what=method)
        except httpx.HTTPError as e:
            raise LedgerError(f"{method}: {e}", method=method) from e

        if resp.status_code // 100 != 2:
            detail = error_detail(resp) or resp.reason_phrase
            raise LedgerError(f"{method}: HTTP {resp.status_code}: {detail}", method=method)
        try:
            payload = resp.json()
        except ValueError as e:
            raise LedgerError(f"{method}: reply is not JSON", method=method) from e
        if not isinstance(payload, dict):
            raise LedgerError(f"{method}: reply is not a JSON-RPC object", method=method)

        err = payload.get("error")
        if err is not None:
            code = err.get("code") if isinstance(err, dict) else None
            msg = err.get("message", str(err)) if isinstance(err, dict) else str(err)
            raise LedgerError(f"{method}: {msg}", method=method, rpc_code=code)
        if "result" not in payload:
            raise LedgerError(f"{method}: reply has neither result nor error", method=method)
        log.debug("rpc %s -> ok", method)
        return payload["result"]

    # --- high-level API

    def get_raw_receipts(self, block_id: BlockId) -> List[RawReceipt]:
        """Every receipt of the block as raw bytes, tx index ascending."""
        method = "debug_getRawReceipts"
        result = self.call(method, [_block_param(block_id)])
        if not isinstance(result, list):
            raise LedgerError(f"{method}: expected a list, got {type(result).__name__}", method=method)
        out: List[RawReceipt] = []
        for i, item in enumerate(result):
            if not isinstance(item, str):
                raise LedgerError(f"{method}: receipt {i} is not a hex string", method=method)
            try:
                out.append(RawReceipt(tx_index=i, data=to_bytes(item, what=f"receipt {i}")))
            except ValueError as e:
                raise LedgerError(f"{method}: {e}", method=method) from e
        log.info("fetched %d raw receipts for block %s", len(out), _block_param(block_id))
        return out

    def get_block(self, block_id: BlockId) -> BlockHeader:
        """Number, hash and receipts root of a block."""
        if isinstance(block_id, int):
            method = "eth_getBlockByNumber"
        else:
            method = "eth_getBlockByHash"
        result = self.call(method, [_block_param(block_id), False])
        if result is None:
            raise LedgerError(f"{method}: block {_block_param(block_id)} not found", method=method)
        if not isinstance(result, dict):
            raise LedgerError(f"{method}: expected an object, got {type(result).__name__}", method=method)
        try:
            return BlockHeader(
                number=_quantity(result.get("number"), "number"),
                hash=result.get("hash") or "",
                receipts_root=result.get("receiptsRoot") or "",
            )
        except (TypeError, ValueError) as e:
            raise LedgerError(f"{method}: {e}", method=method) from e


__all__ = ["BlockId", "LedgerClient", "parse_block_id"]
