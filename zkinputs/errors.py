"""
zkinputs.errors — typed exceptions for input preparation.

Every stage reports failures through a small hierarchy so the CLI (and any
embedding caller) can tell a malformed ledger payload from a guest mismatch or
a rejected proving job, and render each as a structured payload.

Hierarchy
---------
ZkInputsError (base)
 ├─ MalformedReceiptError : raw receipt bytes are not a well-formed receipt
 ├─ NoMatchError          : no log in the block matched the configured events
 ├─ InputUnderflowError   : the guest read past the end of an input buffer
 ├─ GuestAssertionError   : the guest program rejected its inputs
 ├─ SubmissionError       : the proving backend rejected the job
 ├─ LedgerError           : the ledger node returned an error or a bad reply
 └─ ConfigError           : graph or runtime configuration is invalid

Notes
-----
* `MalformedReceiptError` and `NoMatchError` are never worth retrying: they mean
  bad ledger data or a configuration mismatch.
* `NoMatchError` is only raised on request (`FilterResult.require_matches`); an
  empty match is otherwise a valid, reportable result.
* `SubmissionError` leaves the input buffers untouched so callers can resubmit.

These classes import nothing from the rest of the package so low-level modules
(decoder, host) can use them without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ZkInputsError(Exception):
    """
    Base error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'MALFORMED_RECEIPT').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "zkinputs error"
    code: str = "ZKINPUTS_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for CLI output and logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **extra: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in extra.items():
        if v is not None:
            d.setdefault(k, v)
    return d or None


class MalformedReceiptError(ZkInputsError):
    """
    Raw receipt bytes failed to decode.

    Typical triggers:
      - not canonical RLP, truncated, or trailing bytes
      - top-level list is not [status, cumulativeGas, bloom, logs]
      - a log is not [address, [topics...], data] or has wrong field sizes
    """
    def __init__(
        self,
        message: str = "malformed receipt",
        *,
        tx_index: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.tx_index = tx_index
        super().__init__(
            message=message, code="MALFORMED_RECEIPT", data=_merge(data, tx_index=tx_index)
        )


class NoMatchError(ZkInputsError):
    """No receipt in the block carries a log matching the configured events."""
    def __init__(
        self,
        message: str = "no event matched",
        *,
        receipts_scanned: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="NO_MATCH",
            data=_merge(data, receipts_scanned=receipts_scanned),
        )


class InputUnderflowError(ZkInputsError):
    """
    The guest asked for a word past the end of an input buffer.

    This always means the encoder and the guest disagree on the wire layout.
    """
    def __init__(
        self,
        message: str = "input buffer exhausted",
        *,
        buffer: Optional[str] = None,
        available: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.buffer = buffer
        super().__init__(
            message=message,
            code="INPUT_UNDERFLOW",
            data=_merge(data, buffer=buffer, available=available),
        )


class GuestAssertionError(ZkInputsError):
    """The guest program's own checks failed on the inputs it read."""
    def __init__(self, message: str = "guest assertion failed", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="GUEST_ASSERTION", data=data)


class SubmissionError(ZkInputsError):
    """
    The proving backend rejected a job.

    `message` carries the backend's own message when it sent one.
    """
    def __init__(
        self,
        message: str = "proof submission failed",
        *,
        status_code: Optional[int] = None,
        image_md5: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(
            message=message,
            code="SUBMISSION_FAILED",
            data=_merge(data, status_code=status_code, image_md5=image_md5),
        )


class LedgerError(ZkInputsError):
    """JSON-RPC error or malformed reply from the ledger node."""
    def __init__(
        self,
        message: str = "ledger request failed",
        *,
        method: Optional[str] = None,
        rpc_code: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="LEDGER_ERROR",
            data=_merge(data, method=method, rpc_code=rpc_code),
        )


class ConfigError(ZkInputsError):
    """Invalid graph or runtime configuration."""
    def __init__(
        self,
        message: str = "invalid configuration",
        *,
        path: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="CONFIG_ERROR", data=_merge(data, path=path))


__all__ = [
    "ZkInputsError",
    "MalformedReceiptError",
    "NoMatchError",
    "InputUnderflowError",
    "GuestAssertionError",
    "SubmissionError",
    "LedgerError",
    "ConfigError",
]
