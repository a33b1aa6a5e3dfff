"""
zkinputs.adapters.http — retry/backoff and error-detail helpers shared by the
HTTP adapters.

Only transport-level failures (timeouts, connection errors) are retried, and
only for requests the caller marks as safe to repeat. HTTP status errors are
returned to the caller untouched.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Optional

import httpx

log = logging.getLogger(__name__)


def backoff(attempt: int, base: float) -> float:
    # attempt: 0,1,2,… -> base * 2^attempt with jitter
    jitter = 0.1 * base
    return base * (2 ** attempt) + (jitter * (os.getpid() % 7) / 7.0)


def retry_request(
    op: Callable[[], httpx.Response],
    *,
    retries: int,
    backoff_base: float,
    what: str,
) -> httpx.Response:
    """Run `op` up to `retries` times, sleeping between transport failures."""
    attempts = max(1, retries)
    for attempt in range(attempts):
        try:
            return op()
        except (httpx.TimeoutException, httpx.TransportError) as e:
            if attempt + 1 >= attempts:
                raise
            delay = backoff(attempt, backoff_base)
            log.warning("%s: %s; retrying in %.2fs (%d/%d)", what, e, delay, attempt + 1, attempts)
            time.sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover


def error_detail(resp: httpx.Response) -> Optional[str]:
    """Best-effort error message from a JSON or text error body."""
    try:
        j = resp.json()
    except ValueError:
        text = resp.text.strip()
        return text or None
    if isinstance(j, dict):
        for key in ("error", "message", "detail"):
            v = j.get(key)
            if isinstance(v, dict):
                v = v.get("message") or v
            if v:
                return str(v)
    return str(j) if j else None


__all__ = ["backoff", "retry_request", "error_detail"]
