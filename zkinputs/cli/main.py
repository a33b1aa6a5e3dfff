"""
zkinputs - prepare, test and prove zkVM inputs for one block.

Commands:
  prove BLOCK_ID EXPECTED_STATE   run one of the three modes below
  config                          print the resolved runtime configuration
  version                         print version information

Modes of `prove` (exactly one):
  -i, --inputgen   fetch + encode, print both input buffers
                   (--output PATH also writes an input bundle)
  -t, --test       fetch + encode, then run the reference guest on a mock host
  -p, --prove      fetch + encode (or --bundle PATH), then submit a proving task
                   (--output PATH keeps the bundle; a failed submission
                   always leaves one behind, inputs-<number>.cbor by default)

Global options:
  --rpc-url TEXT        Ledger JSON-RPC endpoint      (ZKINPUTS_RPC_URL)
  --prover-url TEXT     Proving service base URL      (ZKINPUTS_PROVER_URL)
  --graph PATH          Graph YAML                    (ZKINPUTS_GRAPH_CONFIG)
  --wasm PATH           Compiled guest image          (ZKINPUTS_WASM_PATH)
  --verbose / -v        DEBUG logging (else ZKINPUTS_LOG_LEVEL)

Examples:
  zkinputs prove 17000000 0x0000000000000000000000000000000000000000000000000000000000000001 -i
  zkinputs prove 0x5c5c...e2a1 0xabcd -t
  zkinputs --graph src/zkgraph.yaml prove 17000000 0xabcd -p
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from zkinputs.adapters.graph_config import GraphConfig, load_graph_config
from zkinputs.adapters.ledger import LedgerClient, parse_block_id
from zkinputs.adapters.prover import ProverClient
from zkinputs.config import RuntimeConfig, load_config, summary
from zkinputs.errors import ConfigError, SubmissionError, ZkInputsError
from zkinputs.host.guest import ReferenceGuest, load_handler
from zkinputs.host.mock import MockHost
from zkinputs.inputs.bundle import InputBundle, load_bundle, save_bundle
from zkinputs.inputs.encoding import normalize_state
from zkinputs.pipeline import PreparedInputs, fetch_and_prepare
from zkinputs.utils.hash import image_md5
from zkinputs.utils.hexutil import to_hex
from zkinputs.version import version_metadata

log = logging.getLogger(__name__)

app = typer.Typer(
    name="zkinputs",
    help="zkVM guest inputs from ledger transaction receipts",
    no_args_is_help=True,
    add_completion=False,
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class GlobalContext:
    def __init__(self):
        self.rpc_url: Optional[str] = None
        self.prover_url: Optional[str] = None
        self.graph: Optional[Path] = None
        self.wasm: Optional[Path] = None
        self.verbose: bool = False


_ctx = GlobalContext()


@app.callback()
def main_callback(
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Ledger JSON-RPC endpoint"),
    prover_url: Optional[str] = typer.Option(None, "--prover-url", help="Proving service base URL"),
    graph: Optional[Path] = typer.Option(None, "--graph", "-g", help="Graph YAML"),
    wasm: Optional[Path] = typer.Option(None, "--wasm", help="Compiled guest image"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="DEBUG logging"),
) -> None:
    """
    Options given here win over ZKINPUTS_* environment variables, which win
    over built-in defaults.
    """
    _ctx.rpc_url = rpc_url
    _ctx.prover_url = prover_url
    _ctx.graph = graph
    _ctx.wasm = wasm
    _ctx.verbose = verbose


# ------------------------------ helpers -------------------------------------


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _configure_logging(level: int) -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger("zkinputs").setLevel(level)


def _runtime_config() -> RuntimeConfig:
    cfg = load_config(
        overrides={
            "rpc_url": _ctx.rpc_url,
            "prover_url": _ctx.prover_url,
            "graph_config": _ctx.graph,
            "wasm_image": _ctx.wasm,
        }
    )
    _configure_logging(logging.DEBUG if _ctx.verbose else cfg.log_level_no)
    return cfg


def _print_matches(prepared: PreparedInputs) -> None:
    matched = prepared.matched
    typer.echo(f"[*] {matched.scanned} receipts fetched from block {prepared.header.number}")
    typer.echo(f"[*] {matched.event_count} events matched")
    for evs in matched.events:
        for ev in evs:
            typer.echo(ev.pretty("[+] "))


def _print_inputs(public_text: str, private_text: str) -> None:
    typer.echo("[+] PUBLIC INPUT FOR ZKWASM:")
    typer.echo(public_text)
    typer.echo("[+] PRIVATE INPUT FOR ZKWASM:")
    typer.echo(private_text)


def _check_bundle(bundle: InputBundle, block_id: str, expected_state: str) -> None:
    bid = parse_block_id(block_id)
    if isinstance(bid, int):
        if bid != bundle.header.number:
            raise ConfigError(f"bundle is for block {bundle.header.number}, not {bid}")
    elif bid != bundle.header.hash:
        raise ConfigError(f"bundle is for block {to_hex(bundle.header.hash)}, not {to_hex(bid)}")
    if normalize_state(expected_state) != bundle.expected_state:
        raise ConfigError(f"bundle expects state 0x{bundle.expected_state}")


def _prepare(cfg: RuntimeConfig, graph: GraphConfig, block_id: str, expected_state: str) -> PreparedInputs:
    bid = parse_block_id(block_id)
    with LedgerClient(
        cfg.endpoints.rpc_url,
        timeout=cfg.http.timeout_s,
        retries=cfg.http.retries,
        backoff_base=cfg.http.backoff_base_s,
    ) as ledger:
        return fetch_and_prepare(ledger, bid, expected_state, graph.match_spec())


def _write_bundle(path: Path, bundle: InputBundle) -> None:
    try:
        p = save_bundle(path, bundle)
    except OSError as e:
        raise ConfigError(f"cannot write bundle: {e}", path=str(path)) from e
    typer.echo(f"[+] input bundle written to {p}")


def _submit(cfg: RuntimeConfig, bundle: InputBundle) -> None:
    try:
        md5 = image_md5(cfg.paths.wasm_image)
    except OSError as e:
        raise ConfigError(f"cannot read guest image: {e}", path=str(cfg.paths.wasm_image)) from e
    typer.echo(f"[*] IMAGE MD5: {md5}")
    with ProverClient(
        cfg.endpoints.prover_url,
        api_key=cfg.endpoints.prover_api_key,
        timeout=cfg.http.timeout_s,
    ) as prover:
        task = prover.submit(md5, bundle.public, bundle.private)
    typer.echo(f"[+] PROVE TASK STARTED. TASK ID: {task.task_id}")


# ------------------------------ commands ------------------------------------


@app.command()
def prove(
    block_id: str = typer.Argument(..., help="Block number (decimal or 0x) or 32-byte block hash"),
    expected_state: str = typer.Argument(..., help="Expected graph state output, hex (lower-cased on the wire)"),
    inputgen: bool = typer.Option(False, "--inputgen", "-i", help="Generate and print the inputs"),
    test: bool = typer.Option(False, "--test", "-t", help="Run the reference guest on a mock host"),
    prove_: bool = typer.Option(False, "--prove", "-p", help="Submit a proving task"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write an input bundle (inputgen, prove)"),
    bundle_path: Optional[Path] = typer.Option(None, "--bundle", help="Submit a saved input bundle (prove)"),
    require_match: bool = typer.Option(False, "--require-match", help="Fail when no event matches"),
) -> None:
    """Generate inputs for BLOCK_ID, then test or prove them."""
    if sum((inputgen, test, prove_)) != 1:
        typer.echo("Error: exactly one of --inputgen, --test, --prove is required", err=True)
        raise typer.Exit(2)
    if output is not None and test:
        typer.echo("Error: --output does not apply to --test", err=True)
        raise typer.Exit(2)
    if bundle_path is not None and not prove_:
        typer.echo("Error: --bundle only applies to --prove", err=True)
        raise typer.Exit(2)

    try:
        normalize_state(expected_state)
        parse_block_id(block_id)
    except ValueError as e:
        _fail(str(e))

    try:
        cfg = _runtime_config()

        if bundle_path is not None:
            bundle = load_bundle(bundle_path)
            _check_bundle(bundle, block_id, expected_state)
            typer.echo(f"[*] loaded input bundle for block {bundle.header.number}")
            _submit(cfg, bundle)
            return

        graph = load_graph_config(cfg.paths.graph_config)
        prepared = _prepare(cfg, graph, block_id, expected_state)
        _print_matches(prepared)
        if require_match:
            prepared.matched.require_matches()

        if inputgen:
            typer.echo(f"[+] ZKGRAPH STATE OUTPUT: {expected_state}")
            _print_inputs(prepared.public.render(), prepared.private.render())
            if output is not None:
                _write_bundle(output, prepared.to_bundle())
        elif test:
            handler = load_handler(graph.handler) if graph.handler else None
            host = MockHost(prepared.public, prepared.private)
            result = ReferenceGuest(graph.match_spec(), handler).run(host)
            if result.state is not None:
                typer.echo(f"[+] STATE OUTPUT: 0x{result.state}")
            typer.echo("[+] ZKWASM MOCK EXECUTION SUCCESS!")
        else:
            bundle = prepared.to_bundle()
            if output is not None:
                _write_bundle(output, bundle)
            try:
                _submit(cfg, bundle)
            except SubmissionError:
                if output is None:
                    _write_bundle(Path(f"inputs-{bundle.header.number}.cbor"), bundle)
                typer.echo("[*] resubmit later with --bundle", err=True)
                raise
    except ZkInputsError as e:
        log.debug("prove failed", exc_info=True)
        _fail(f"{e.code}: {e.message}")


@app.command("config")
def show_config(
    as_json: bool = typer.Option(False, "--json", help="Print the full configuration as JSON"),
) -> None:
    """Print the resolved runtime configuration."""
    try:
        cfg = _runtime_config()
    except ZkInputsError as e:
        _fail(f"{e.code}: {e.message}")
    if as_json:
        typer.echo(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    else:
        typer.echo(summary(cfg))


@app.command()
def version() -> None:
    """Print version information."""
    for k, v in version_metadata().items():
        typer.echo(f"{k}: {v}")


def main() -> None:
    """Entry point for the zkinputs CLI."""
    app()


if __name__ == "__main__":
    main()
