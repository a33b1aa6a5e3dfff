"""
zkinputs.config — runtime configuration.

This module centralizes knobs for:
  • Endpoints (ledger JSON-RPC node, proving service)
  • HTTP behaviour (timeout, retries, backoff)
  • Default file locations (graph YAML, compiled guest image)
  • Log level

Configuration may be provided via environment variables. Safe defaults are chosen so a
local developer run works out of the box.

Environment variables (all optional):
  ZKINPUTS_RPC_URL          -> ledger JSON-RPC endpoint (default: http://127.0.0.1:8545)
  ZKINPUTS_PROVER_URL       -> proving service base URL (default: http://127.0.0.1:8090)
  ZKINPUTS_PROVER_API_KEY   -> bearer token for the proving service (default: unset)
  ZKINPUTS_HTTP_TIMEOUT     -> seconds, float (default: 30)
  ZKINPUTS_HTTP_RETRIES     -> attempts for idempotent requests (default: 3)
  ZKINPUTS_HTTP_BACKOFF     -> base backoff seconds, float (default: 0.25)
  ZKINPUTS_GRAPH_CONFIG     -> graph YAML (default: src/zkgraph.yaml)
  ZKINPUTS_WASM_PATH        -> compiled guest image (default: build/zkgraph_full.wasm)
  ZKINPUTS_LOG_LEVEL        -> DEBUG|INFO|WARNING|ERROR (default: WARNING)

Programmatic usage:
    from zkinputs.config import get_config
    cfg = get_config()
    client = LedgerClient(cfg.endpoints.rpc_url, timeout=cfg.http.timeout_s)

Note: This module does not perform any I/O beyond reading env vars.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from zkinputs.errors import ConfigError

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_PROVER_URL = "http://127.0.0.1:8090"
DEFAULT_GRAPH_CONFIG = "src/zkgraph.yaml"
DEFAULT_WASM_PATH = "build/zkgraph_full.wasm"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class Endpoints:
    rpc_url: str = DEFAULT_RPC_URL
    prover_url: str = DEFAULT_PROVER_URL
    prover_api_key: Optional[str] = None


@dataclass(frozen=True)
class HttpSettings:
    timeout_s: float = 30.0
    retries: int = 3
    backoff_base_s: float = 0.25


@dataclass(frozen=True)
class Paths:
    graph_config: Path = Path(DEFAULT_GRAPH_CONFIG)
    wasm_image: Path = Path(DEFAULT_WASM_PATH)


@dataclass(frozen=True)
class RuntimeConfig:
    endpoints: Endpoints
    http: HttpSettings
    paths: Paths
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def log_level_no(self) -> int:
        return getattr(logging, self.log_level)

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["paths"] = {k: str(v) for k, v in d["paths"].items()}
        if self.endpoints.prover_api_key:
            d["endpoints"]["prover_api_key"] = "***"
        return d


# ------------------------------ loader --------------------------------------


def _check_url(name: str, url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"{name} must be an http(s) URL, got {url!r}")
    return url.rstrip("/")


def _validate(cfg: RuntimeConfig) -> RuntimeConfig:
    _check_url("rpc_url", cfg.endpoints.rpc_url)
    _check_url("prover_url", cfg.endpoints.prover_url)
    if cfg.http.timeout_s <= 0:
        raise ConfigError("timeout_s must be > 0")
    if cfg.http.retries < 1:
        raise ConfigError("retries must be >= 1")
    if cfg.http.backoff_base_s < 0:
        raise ConfigError("backoff_base_s must be >= 0")
    if cfg.log_level not in _LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, float, Path, None]]] = None,
) -> RuntimeConfig:
    """
    Build a RuntimeConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides (win over env); keys support:
          'rpc_url', 'prover_url', 'prover_api_key', 'timeout_s', 'retries',
          'backoff_base_s', 'graph_config', 'wasm_image', 'log_level'.
          A value of None means "not overridden".
    """
    env = os.environ if env is None else env
    ov = {k: v for k, v in (overrides or {}).items() if v is not None}

    def pick(key: str, var: str, default: object) -> object:
        if key in ov:
            return ov[key]
        return env.get(var, default)

    try:
        endpoints = Endpoints(
            rpc_url=_check_url("rpc_url", str(pick("rpc_url", "ZKINPUTS_RPC_URL", DEFAULT_RPC_URL))),
            prover_url=_check_url(
                "prover_url", str(pick("prover_url", "ZKINPUTS_PROVER_URL", DEFAULT_PROVER_URL))
            ),
            prover_api_key=(str(pick("prover_api_key", "ZKINPUTS_PROVER_API_KEY", "")) or None),
        )
        http = HttpSettings(
            timeout_s=float(pick("timeout_s", "ZKINPUTS_HTTP_TIMEOUT", 30.0)),
            retries=int(pick("retries", "ZKINPUTS_HTTP_RETRIES", 3)),
            backoff_base_s=float(pick("backoff_base_s", "ZKINPUTS_HTTP_BACKOFF", 0.25)),
        )
    except ValueError as e:
        raise ConfigError(f"invalid numeric setting: {e}") from e

    paths = Paths(
        graph_config=Path(str(pick("graph_config", "ZKINPUTS_GRAPH_CONFIG", DEFAULT_GRAPH_CONFIG))).expanduser(),
        wasm_image=Path(str(pick("wasm_image", "ZKINPUTS_WASM_PATH", DEFAULT_WASM_PATH))).expanduser(),
    )
    log_level = str(pick("log_level", "ZKINPUTS_LOG_LEVEL", DEFAULT_LOG_LEVEL)).strip().upper()

    return _validate(RuntimeConfig(endpoints=endpoints, http=http, paths=paths, log_level=log_level))


@lru_cache(maxsize=1)
def get_config() -> RuntimeConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


# ----------------------------- pretty-print ---------------------------------


def summary(cfg: Optional[RuntimeConfig] = None) -> str:
    """
    Return a human-friendly one-line summary of the most important knobs.
    """
    cfg = cfg or get_config()
    e, h, p = cfg.endpoints, cfg.http, cfg.paths
    return (
        "zkinputs{"
        f"rpc={e.rpc_url}, prover={e.prover_url}, auth={int(bool(e.prover_api_key))}, "
        f"timeout={h.timeout_s:g}s, retries={h.retries}, "
        f"graph={p.graph_config}, wasm={p.wasm_image}, log={cfg.log_level}"
        "}"
    )


__all__ = [
    "Endpoints",
    "HttpSettings",
    "Paths",
    "RuntimeConfig",
    "load_config",
    "get_config",
    "summary",
]
