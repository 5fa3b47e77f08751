"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from multisend.core.abi import encode_address, encode_uint
from multisend.core.cli import multisend_cli
from multisend.core.constants import NULL_ADDRESS
from multisend.core.errors import TransactionServiceError
from multisend.core.models import DecodedTransaction, SafeTransactionParams
from multisend.core.multisend import encode_multisend_call

runner = CliRunner()

SAFE = "0x1234567890123456789012345678901234567890"
SPENDER = "0xf368f535e329c6d08dff0d4b2da961c4e7f3fcaf"
APPROVE_DATA = "0x095ea7b3" + encode_address(SPENDER) + encode_uint(5)
SAFE_TX_HASH_1_3_0 = "0x4ab5d2bc0ea050d1a3180cd143211f578b13ac46e74ed9bcf9d8ee4ae29ca1b2"


@pytest.fixture(autouse=True)
def no_log_file():
    with patch("multisend.core.cli.configure_logger"):
        yield


def test_decode_multisend():
    data = encode_multisend_call(
        [
            DecodedTransaction(operation=0, to=SAFE, value="1000000000000000000", data=APPROVE_DATA),
            DecodedTransaction(operation=1, to=SPENDER, value="0", data="0x"),
        ]
    )
    result = runner.invoke(multisend_cli, ["decode", data])

    assert result.exit_code == 0
    assert "2 transaction(s)" in result.stdout
    assert "approve(address,uint256)" in result.stdout
    assert f"spender: {SPENDER}" in result.stdout
    assert "1.0 ETH" in result.stdout
    assert "DelegateCall" in result.stdout


def test_decode_malformed_multisend():
    result = runner.invoke(multisend_cli, ["decode", "0x8d80ff0a"])

    assert result.exit_code == 1
    assert "Error: Failed to decode presumed multiSend(bytes) data" in result.stdout


def test_decode_empty():
    result = runner.invoke(multisend_cli, ["decode", "0x"])

    assert result.exit_code == 0
    assert "No transactions found" in result.stdout


def test_hash():
    result = runner.invoke(
        multisend_cli,
        ["hash", "--chain-id", "1", "--safe", SAFE, "--to", NULL_ADDRESS, "--nonce", "0"],
    )

    assert result.exit_code == 0
    assert SAFE_TX_HASH_1_3_0 in result.stdout


def test_hash_invalid_version():
    result = runner.invoke(
        multisend_cli,
        ["hash", "--chain-id", "1", "--safe", SAFE, "--to", NULL_ADDRESS, "--nonce", "0", "--version", "x"],
    )

    assert result.exit_code == 1
    assert "Error: Invalid Safe version" in result.stdout


def test_parse_address():
    result = runner.invoke(multisend_cli, ["parse-address", f"https://app.safe.global/home?safe=oeth:{SAFE}"])

    assert result.exit_code == 0
    assert f"Address: {SAFE}" in result.stdout
    assert "Network: optimism (chain id 10)" in result.stdout


def test_parse_address_invalid():
    result = runner.invoke(multisend_cli, ["parse-address", "nothing here"])

    assert result.exit_code == 1
    assert "Error:" in result.stdout


def test_fetch():
    params = SafeTransactionParams(to=NULL_ADDRESS, nonce="0", version="1.3.0")
    with patch("multisend.core.cli.SafeTransactionServiceClient") as mock_client:
        mock_client.return_value.fetch_transaction.return_value = params
        result = runner.invoke(multisend_cli, ["fetch", f"eth:{SAFE}", "--nonce", "0"])

    assert result.exit_code == 0
    mock_client.return_value.fetch_transaction.assert_called_once_with("ethereum", SAFE, 0)
    assert f"eth:{SAFE}" in result.stdout
    assert SAFE_TX_HASH_1_3_0 in result.stdout


def test_fetch_service_error():
    with patch("multisend.core.cli.SafeTransactionServiceClient") as mock_client:
        mock_client.return_value.fetch_transaction.side_effect = TransactionServiceError("boom")
        result = runner.invoke(multisend_cli, ["fetch", SAFE, "--nonce", "3"])

    assert result.exit_code == 1
    assert "Error: boom" in result.stdout


def test_typed_data(tmp_path):
    path = tmp_path / "message.json"
    path.write_text(json.dumps({"to": SAFE, "data": APPROVE_DATA, "nonce": 4}))

    result = runner.invoke(multisend_cli, ["typed-data", str(path)])

    assert result.exit_code == 0
    assert "Function: approve(address,uint256)" in result.stdout
    assert "Nonce: 4" in result.stdout


def test_typed_data_invalid(tmp_path):
    path = tmp_path / "message.json"
    path.write_text("{")

    result = runner.invoke(multisend_cli, ["typed-data", str(path)])

    assert result.exit_code == 1
    assert "Error: invalid Sign Typed Data JSON" in result.stdout


def test_decode_not_hex():
    result = runner.invoke(multisend_cli, ["decode", "0xzz"])

    assert result.exit_code == 1
    assert "Error: data is not a hex string" in result.stdout


def test_validate(tmp_path):
    path = tmp_path / "extracted.json"
    path.write_text(json.dumps({"to": SPENDER.upper().replace("0X", "0x"), "value": "0", "nonce": "7"}))

    result = runner.invoke(multisend_cli, ["validate", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"to": SPENDER, "value": "0", "nonce": "7"}


def test_validate_invalid(tmp_path):
    path = tmp_path / "extracted.json"
    path.write_text(json.dumps({"to": "0x123", "operation": 2}))

    result = runner.invoke(multisend_cli, ["validate", str(path)])

    assert result.exit_code == 1
    assert 'Error: Invalid Ethereum address in "to" field' in result.stdout
    assert "Error: Invalid operation: must be 0 (Call) or 1 (DelegateCall)" in result.stdout


def test_validate_bad_json(tmp_path):
    path = tmp_path / "extracted.json"
    path.write_text("not json")

    result = runner.invoke(multisend_cli, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Error:" in result.stdout


@pytest.mark.parametrize(
    "option, value",
    [("--operation", "300"), ("--value", str(2**256))],
)
def test_hash_out_of_range(option, value):
    result = runner.invoke(
        multisend_cli,
        ["hash", "--chain-id", "1", "--safe", SAFE, "--to", NULL_ADDRESS, "--nonce", "0", option, value],
    )

    assert result.exit_code == 1
    assert "Error: Invalid" in result.stdout
    assert "does not fit in uint" in result.stdout


def test_typed_data_hex_operation(tmp_path):
    path = tmp_path / "message.json"
    path.write_text(json.dumps({"to": SAFE, "data": APPROVE_DATA, "operation": "0x1"}))

    result = runner.invoke(multisend_cli, ["typed-data", str(path)])

    assert result.exit_code == 0
    assert "Operation: DelegateCall" in result.stdout


def test_typed_data_invalid_operation(tmp_path):
    path = tmp_path / "message.json"
    path.write_text(json.dumps({"to": SAFE, "data": APPROVE_DATA, "operation": "call"}))

    result = runner.invoke(multisend_cli, ["typed-data", str(path)])

    assert result.exit_code == 1
    assert "Error: Invalid operation" in result.stdout
