"""
zkinputs.adapters.prover — submit proving jobs to the proving service.

Endpoint
--------
- POST {base}/task
    Body JSON:
      {
        "md5":            "<IMAGE MD5, upper-case hex>",
        "public_inputs":  ["<u64 decimal>", ...],
        "private_inputs": ["<u64 decimal>", ...]
      }
    Returns JSON:
      {"success": true, "result": {"id": "<task id>", "md5": "<image md5>"}}
    or, on rejection, a non-2xx status and/or {"error": "<message>"}.

Submission is not idempotent (a repeated POST queues a second job), so it is
never retried here. Any rejection raises `SubmissionError` carrying the
service's own message; the caller's buffers are not touched, so the same job
can be resubmitted as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

import httpx

from zkinputs.adapters.http import error_detail
from zkinputs.errors import SubmissionError
from zkinputs.inputs.encoding import InputBuffer

log = logging.getLogger(__name__)

Words = Union[InputBuffer, Iterable[Union[int, str]]]


@dataclass(frozen=True)
class ProveTask:
    task_id: str
    image_md5: str


def _word_strings(words: Words) -> List[str]:
    if isinstance(words, InputBuffer):
        return words.as_strings()
    return [str(int(w)) for w in words]


class ProverClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)

        hdrs = {"Accept": "application/json"}
        if api_key:
            hdrs["Authorization"] = f"Bearer {api_key}"

        self._own_client = client is None
        self._client = client or httpx.Client(base_url=self.base_url, headers=hdrs, timeout=self.timeout)

    def close(self) -> None:
        if self._own_client:
            self._client.close()

    def __enter__(self) -> "ProverClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def submit(self, image_md5: str, public_words: Words, private_words: Words) -> ProveTask:
        """Queue a proving job for `image_md5` over the given input words."""
        body: Dict[str, Any] = {
            "md5": image_md5,
            "public_inputs": _word_strings(public_words),
            "private_inputs": _word_strings(private_words),
        }
        url = f"{self.base_url}/task"
        try:
            resp = self._client.post(url, json=body)
        except httpx.HTTPError as e:
            raise SubmissionError(f"prover unreachable: {e}", image_md5=image_md5) from e

        if resp.status_code // 100 != 2:
            detail = error_detail(resp) or resp.reason_phrase
            raise SubmissionError(
                f"prover rejected task: {detail}", status_code=resp.status_code, image_md5=image_md5
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise SubmissionError(
                "prover reply is not JSON", status_code=resp.status_code, image_md5=image_md5
            ) from e

        if not isinstance(payload, dict) or payload.get("error") or payload.get("success") is False:
            detail = error_detail(resp) or "unsuccessful reply"
            raise SubmissionError(
                f"prover rejected task: {detail}", status_code=resp.status_code, image_md5=image_md5
            )
        result = payload.get("result")
        task_id = result.get("id") if isinstance(result, dict) else None
        if not task_id:
            raise SubmissionError(
                "prover reply carries no task id", status_code=resp.status_code, image_md5=image_md5
            )
        md5 = str(result.get("md5") or image_md5)
        log.info("submitted task %s for image %s", task_id, md5)
        return ProveTask(task_id=str(task_id), image_md5=md5)


__all__ = ["ProveTask", "ProverClient"]
