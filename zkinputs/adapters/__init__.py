"""
zkinputs.adapters — collaborators outside the pure input pipeline.

  • graph_config: graph YAML -> GraphConfig / EventMatchSpec
  • ledger:       JSON-RPC client (raw receipts, block headers)
  • prover:       proving service client
"""

from __future__ import annotations

from .graph_config import GraphConfig, graph_config_from_dict, load_graph_config
from .ledger import LedgerClient, parse_block_id
from .prover import ProverClient, ProveTask

__all__ = [
    "GraphConfig",
    "graph_config_from_dict",
    "load_graph_config",
    "LedgerClient",
    "parse_block_id",
    "ProverClient",
    "ProveTask",
]
