from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import httpx
import pytest
import respx
from typer.testing import CliRunner

from zkinputs.cli.main import app
from zkinputs.inputs.bundle import load_bundle
from zkinputs.tests import (BLOCK_HASH, RECEIPTS_ROOT, SOURCE, SYNC, build_log,
                            build_receipt)
from zkinputs.types.receipt import RawReceipt

runner = CliRunner()

RPC = "http://ledger.cli.test:8545"
PROVER = "http://prover.cli.test:8090"
STATE = "0x" + "05" * 32


def _graph(tmp_path: Path, handler: bool = True) -> Path:
    p = tmp_path / "zkgraph.yaml"
    lines = [
        "dataSources:",
        "  - source:",
        f"      address: '0x{SOURCE.hex()}'",
        "    mapping:",
    ]
    if handler:
        lines.append("      handler: 'zkinputs.tests.test_guest:first_reserve'")
    lines += ["      eventHandlers:", "        - event: 'Sync(uint112,uint112)'"]
    p.write_text("\n".join(lines) + "\n")
    return p


def _mock_ledger(receipts) -> respx.Route:
    block = {
        "number": hex(17_000_000),
        "hash": "0x" + BLOCK_HASH.hex(),
        "receiptsRoot": "0x" + RECEIPTS_ROOT.hex(),
    }

    def _reply(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["method"] == "debug_getRawReceipts":
            result: Any = ["0x" + r.data.hex() for r in receipts]
        else:
            result = block
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return respx.post(RPC).mock(side_effect=_reply)


def _invoke(tmp_path: Path, *args: str, handler: bool = True):
    base: List[str] = ["--rpc-url", RPC, "--prover-url", PROVER, "--graph", str(_graph(tmp_path, handler))]
    return runner.invoke(app, base + list(args))


@respx.mock
def test_inputgen_prints_buffers_and_writes_bundle(tmp_path, block_receipts):
    route = _mock_ledger(block_receipts)
    out = tmp_path / "inputs.cbor"

    result = _invoke(tmp_path, "prove", "17000000", STATE, "-i", "--output", str(out))

    assert result.exit_code == 0, result.output
    assert "[*] 3 receipts fetched from block 17000000" in result.output
    assert "[*] 1 events matched" in result.output
    assert "[+] Tx[1]Event[1]" in result.output
    assert "[+] PUBLIC INPUT FOR ZKWASM:" in result.output
    assert "[+] PRIVATE INPUT FOR ZKWASM:" in result.output
    assert route.call_count == 2

    bundle = load_bundle(out)
    assert bundle.header.number == 17_000_000
    assert bundle.public.render() in result.output
    assert bundle.private.render() in result.output


@respx.mock
def test_test_mode_runs_reference_guest(tmp_path, block_receipts):
    _mock_ledger(block_receipts)
    result = _invoke(tmp_path, "prove", "17000000", STATE, "--test")
    assert result.exit_code == 0, result.output
    assert f"[+] STATE OUTPUT: {STATE}" in result.output
    assert "[+] ZKWASM MOCK EXECUTION SUCCESS!" in result.output


@respx.mock
def test_test_mode_state_mismatch_fails(tmp_path, block_receipts):
    _mock_ledger(block_receipts)
    result = _invoke(tmp_path, "prove", "17000000", "0xbeef", "-t")
    assert result.exit_code == 1
    assert "GUEST_ASSERTION" in result.output


@respx.mock
def test_prove_submits_task(tmp_path, block_receipts, monkeypatch):
    _mock_ledger(block_receipts)
    wasm = tmp_path / "zkgraph_full.wasm"
    wasm.write_bytes(b"")
    monkeypatch.setenv("ZKINPUTS_WASM_PATH", str(wasm))
    route = respx.post(f"{PROVER}/task").mock(
        return_value=httpx.Response(200, json={"result": {"id": "t-1", "md5": "D41D8CD98F00B204E9800998ECF8427E"}})
    )

    result = _invoke(tmp_path, "prove", "17000000", STATE, "-p")

    assert result.exit_code == 0, result.output
    assert "[*] IMAGE MD5: D41D8CD98F00B204E9800998ECF8427E" in result.output
    assert "[+] PROVE TASK STARTED. TASK ID: t-1" in result.output
    assert json.loads(route.calls.last.request.content)["md5"] == "D41D8CD98F00B204E9800998ECF8427E"


@respx.mock
def test_prove_keeps_bundle_when_submission_fails(tmp_path, block_receipts):
    ledger = _mock_ledger(block_receipts)
    wasm = tmp_path / "guest.wasm"
    wasm.write_bytes(b"\x00asm")
    route = respx.post(f"{PROVER}/task").mock(return_value=httpx.Response(500, json={"error": "busy"}))
    out = tmp_path / "kept.cbor"

    result = _invoke(tmp_path, "--wasm", str(wasm), "prove", "17000000", STATE, "-p", "-o", str(out))

    assert result.exit_code == 1
    assert "SUBMISSION_FAILED" in result.output
    assert f"[+] input bundle written to {out}" in result.output
    sent = json.loads(route.calls.last.request.content)
    assert sent["public_inputs"] == load_bundle(out).public.as_strings()
    assert sent["private_inputs"] == load_bundle(out).private.as_strings()

    # resubmitting the kept bundle needs no ledger access
    fetched = ledger.call_count
    route.return_value = httpx.Response(200, json={"result": {"id": "t-3"}})
    retry = _invoke(tmp_path, "--wasm", str(wasm), "prove", "17000000", STATE, "-p", "--bundle", str(out))
    assert retry.exit_code == 0, retry.output
    assert ledger.call_count == fetched
    assert "TASK ID: t-3" in retry.output


@respx.mock
def test_failed_submission_writes_default_bundle(tmp_path, block_receipts, monkeypatch):
    _mock_ledger(block_receipts)
    wasm = tmp_path / "guest.wasm"
    wasm.write_bytes(b"")
    monkeypatch.chdir(tmp_path)
    respx.post(f"{PROVER}/task").mock(side_effect=httpx.ConnectError)

    result = _invoke(tmp_path, "--wasm", str(wasm), "prove", "17000000", STATE, "-p")

    assert result.exit_code == 1
    assert "SUBMISSION_FAILED" in result.output
    bundle = load_bundle(tmp_path / "inputs-17000000.cbor")
    assert bundle.header.number == 17_000_000
    assert bundle.expected_state == "05" * 32


@respx.mock
def test_prove_with_output_writes_bundle_before_submitting(tmp_path, block_receipts):
    _mock_ledger(block_receipts)
    wasm = tmp_path / "guest.wasm"
    wasm.write_bytes(b"")
    respx.post(f"{PROVER}/task").mock(return_value=httpx.Response(200, json={"result": {"id": "t-4"}}))
    out = tmp_path / "inputs.cbor"

    result = _invoke(tmp_path, "--wasm", str(wasm), "prove", "17000000", STATE, "-p", "-o", str(out))

    assert result.exit_code == 0, result.output
    assert "TASK ID: t-4" in result.output
    assert load_bundle(out).header.number == 17_000_000


@respx.mock
def test_prove_from_saved_bundle(tmp_path, block_receipts, monkeypatch):
    _mock_ledger(block_receipts)
    out = tmp_path / "inputs.cbor"
    assert _invoke(tmp_path, "prove", "17000000", STATE, "-i", "-o", str(out)).exit_code == 0

    wasm = tmp_path / "guest.wasm"
    wasm.write_bytes(b"\x00asm")
    route = respx.post(f"{PROVER}/task").mock(
        return_value=httpx.Response(200, json={"result": {"id": "t-2"}})
    )
    result = _invoke(tmp_path, "--wasm", str(wasm), "prove", "17000000", STATE, "-p", "--bundle", str(out))

    assert result.exit_code == 0, result.output
    assert "TASK ID: t-2" in result.output
    sent = json.loads(route.calls.last.request.content)
    assert sent["public_inputs"] == load_bundle(out).public.as_strings()


def test_bundle_for_other_block_rejected(tmp_path, block_receipts):
    with respx.mock:
        _mock_ledger(block_receipts)
        out = tmp_path / "inputs.cbor"
        assert _invoke(tmp_path, "prove", "17000000", STATE, "-i", "-o", str(out)).exit_code == 0

    result = _invoke(tmp_path, "prove", "17000001", STATE, "-p", "--bundle", str(out))
    assert result.exit_code == 1
    assert "CONFIG_ERROR" in result.output


@respx.mock
def test_inputgen_echoes_state_as_given(tmp_path, block_receipts):
    _mock_ledger(block_receipts)
    result = _invoke(tmp_path, "prove", "17000000", "0xDeadBeef", "-i")
    assert result.exit_code == 0, result.output
    assert "[+] ZKGRAPH STATE OUTPUT: 0xDeadBeef" in result.output


@respx.mock
def test_log_with_five_topics_is_malformed(tmp_path):
    raw = build_receipt([build_log(SOURCE, [SYNC] + [b"\x01" * 32] * 4, b"")])
    _mock_ledger([RawReceipt(0, raw)])
    result = _invoke(tmp_path, "prove", "17000000", STATE, "-i")
    assert result.exit_code == 1
    assert "MALFORMED_RECEIPT" in result.output
    assert isinstance(result.exception, SystemExit)


@respx.mock
def test_require_match(tmp_path):
    _mock_ledger([])
    ok = _invoke(tmp_path, "prove", "17000000", STATE, "-i")
    assert ok.exit_code == 0
    assert "[*] 0 events matched" in ok.output

    failed = _invoke(tmp_path, "prove", "17000000", STATE, "-i", "--require-match")
    assert failed.exit_code == 1
    assert "NO_MATCH" in failed.output


@pytest.mark.parametrize(
    "flags",
    [[], ["-i", "-t"], ["-i", "-p"], ["-t", "-p"], ["-t", "--output", "x.cbor"], ["-i", "--bundle", "x.cbor"]],
)
def test_modes_are_mutually_exclusive(tmp_path, flags):
    result = _invoke(tmp_path, "prove", "17000000", STATE, *flags)
    assert result.exit_code == 2


@pytest.mark.parametrize("block_id, state", [("latest", STATE), ("17000000", "0xabc")])
def test_bad_arguments(tmp_path, block_id, state):
    result = _invoke(tmp_path, "prove", block_id, state, "-i")
    assert result.exit_code == 1
    assert "Error:" in result.output


@respx.mock
def test_ledger_error_exits_1(tmp_path):
    respx.post(RPC).mock(
        return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})
    )
    result = _invoke(tmp_path, "prove", "17000000", STATE, "-i")
    assert result.exit_code == 1
    assert "LEDGER_ERROR" in result.output


def test_config_and_version(monkeypatch):
    monkeypatch.setenv("ZKINPUTS_PROVER_API_KEY", "secret")
    result = runner.invoke(app, ["--rpc-url", RPC, "config", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["endpoints"]["rpc_url"] == RPC
    assert data["endpoints"]["prover_api_key"] == "***"

    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "wire_format: 1" in result.output
