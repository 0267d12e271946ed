"""
Tests for CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import libnacl
import pytest
from typer.testing import CliRunner

from adawallet import cli
from adawallet.backends.explorer import HttpBlockchainExplorer
from adawallet.cli import app, load_transaction
from adawallet.fees import estimate_fee, estimate_signed_fee
from adawallet.transaction import TransactionError, tx_signature_message

runner = CliRunner()


@pytest.fixture
def tx_document(sample_inputs, sample_outputs) -> dict:
    return {
        "inputs": [{"txid": i.txid, "index": i.output_index} for i in sample_inputs],
        "outputs": [{"address": o.address, "amount": o.amount} for o in sample_outputs],
        "attributes": {},
    }


@pytest.fixture
def signed_document(tx_document, key_provider) -> dict:
    unsigned = load_transaction(tx_document).transaction
    message = tx_signature_message(unsigned.get_id())
    witnesses = []
    for i in range(len(unsigned.inputs)):
        path = (0x80000000, 0x80000000 + i)
        _, secret_key = key_provider.keypair(path)
        witnesses.append(
            {
                "public_key": key_provider.xpub(path).hex(),
                "signature": libnacl.crypto_sign_detached(message, secret_key).hex(),
            }
        )
    return {**tx_document, "witnesses": witnesses}


def write_document(tmp_path: Path, document: dict) -> Path:
    path = tmp_path / "tx.json"
    path.write_text(json.dumps(document))
    return path


class TestLoadTransaction:
    def test_unsigned_document(self, tx_document):
        signed = load_transaction(tx_document)
        assert len(signed.transaction.inputs) == 3
        assert len(signed.transaction.outputs) == 2
        assert signed.witnesses == ()

    def test_missing_field(self, tx_document):
        del tx_document["inputs"][0]["index"]
        with pytest.raises(TransactionError, match="Missing field"):
            load_transaction(tx_document)


class TestInspect:
    def test_signed(self, tmp_path, signed_document):
        result = runner.invoke(app, ["inspect", str(write_document(tmp_path, signed_document))])

        signed = load_transaction(signed_document)
        assert result.exit_code == 0
        assert f"Tx id: {signed.get_id()}" in result.stdout
        assert f"Tx fee: {estimate_fee(signed)}" in result.stdout
        assert "Witnesses: 3" in result.stdout
        assert "Verified: True" in result.stdout
        assert f"CBOR: {signed.to_hex()}" in result.stdout

    def test_bad_witness_exit_code(self, tmp_path, signed_document):
        signature = bytearray(bytes.fromhex(signed_document["witnesses"][0]["signature"]))
        signature[0] ^= 0xFF
        signed_document["witnesses"][0]["signature"] = signature.hex()

        result = runner.invoke(app, ["inspect", str(write_document(tmp_path, signed_document))])

        assert result.exit_code == 2
        assert "Verified: False" in result.stdout

    def test_wrong_network(self, tmp_path, signed_document):
        path = write_document(tmp_path, signed_document)
        result = runner.invoke(app, ["inspect", str(path), "--network", "testnet"])
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["inspect", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "tx.json"
        path.write_text("{not json")
        result = runner.invoke(app, ["inspect", str(path)])
        assert result.exit_code == 1

    def test_invalid_output_address(self, tmp_path, tx_document):
        tx_document["outputs"][0]["address"] = "not-an-address"
        result = runner.invoke(app, ["inspect", str(write_document(tmp_path, tx_document))])
        assert result.exit_code == 1


class TestFee:
    def test_unsigned_priced_with_witnesses(self, tmp_path, tx_document):
        result = runner.invoke(app, ["fee", str(write_document(tmp_path, tx_document))])

        expected = estimate_signed_fee(load_transaction(tx_document).transaction)
        assert result.exit_code == 0
        assert result.stdout.strip() == str(expected)

    def test_signed(self, tmp_path, signed_document):
        result = runner.invoke(app, ["fee", str(write_document(tmp_path, signed_document))])

        assert result.exit_code == 0
        assert result.stdout.strip() == str(estimate_fee(load_transaction(signed_document)))


class TestUsed:
    @pytest.fixture
    def explorer_requests(self, monkeypatch, sample_addresses) -> list[httpx.Request]:
        requests: list[httpx.Request] = []

        def responder(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            tx = {
                "ctbId": "00" * 32,
                "ctbInputs": [],
                "ctbOutputs": [[sample_addresses[1], {"getCoin": "1000000"}]],
            }
            return httpx.Response(200, json={"Right": {"caTxNum": 1, "caTxList": [tx]}})

        def create_explorer(settings):
            return HttpBlockchainExplorer(
                explorer_url=settings.explorer_url, transport=httpx.MockTransport(responder)
            )

        monkeypatch.setenv("ADAWALLET_EXPLORER_URL", "http://explorer.test")
        monkeypatch.setattr(cli, "create_explorer", create_explorer)
        return requests

    def test_reports_usage(self, explorer_requests, sample_addresses):
        result = runner.invoke(app, ["used", *sample_addresses])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            f"{sample_addresses[0]} unused",
            f"{sample_addresses[1]} used",
        ]
        assert len(explorer_requests) == 1
        assert explorer_requests[0].url.host == "explorer.test"

    def test_invalid_address(self, explorer_requests, sample_addresses):
        result = runner.invoke(app, ["used", sample_addresses[0], "not-an-address"])

        assert result.exit_code == 1
        assert explorer_requests == []

    def test_explorer_failure(self, monkeypatch, sample_addresses):
        def create_explorer(settings):
            return HttpBlockchainExplorer(
                transport=httpx.MockTransport(lambda request: httpx.Response(503))
            )

        monkeypatch.setattr(cli, "create_explorer", create_explorer)
        result = runner.invoke(app, ["used", sample_addresses[0]])

        assert result.exit_code == 1
