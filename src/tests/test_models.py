"""Tests for core models."""

import pytest
from pydantic import ValidationError

from multisend.core.constants import NULL_ADDRESS
from multisend.core.models import DecodedFunctionCall, DecodedTransaction, HashResult, SafeTransactionParams


def test_decoded_transaction_normalizes_fields():
    tx = DecodedTransaction(operation=0, to="0xABCDEF0123456789ABCDEF0123456789ABCDEF01", value="0", data="0x123")

    assert tx.to == "0xabcdef0123456789abcdef0123456789abcdef01"
    assert tx.data == "0x0123"
    assert tx.data_length == 2
    assert tx.model_dump(by_alias=True)["dataLength"] == 2


def test_decoded_transaction_is_frozen():
    tx = DecodedTransaction(operation=0, to=NULL_ADDRESS, value="0")
    with pytest.raises(ValidationError):
        tx.value = "1"


def test_decoded_function_call_defaults():
    call = DecodedFunctionCall(name="foo()")

    assert call.params == {}
    assert call.source is None
    assert call.candidates is None
    assert call.error is None


def test_decoded_function_call_rejects_unknown_source():
    with pytest.raises(ValidationError):
        DecodedFunctionCall(name="foo()", source="etherscan")


def test_safe_transaction_params_from_service_payload():
    params = SafeTransactionParams.model_validate(
        {
            "to": NULL_ADDRESS,
            "value": 10,
            "safeTxGas": None,
            "gasToken": "",
            "nonce": 3,
            "dataDecoded": {"method": "transfer"},
        }
    )

    assert params.value == "10"
    assert params.safe_tx_gas == "0"
    assert params.gas_token == NULL_ADDRESS
    assert params.refund_receiver == NULL_ADDRESS
    assert params.nonce == "3"
    assert params.version == "1.3.0"
    assert params.data_decoded == {"method": "transfer"}


def test_hash_result_serializes_camel_case():
    result = HashResult(domain_hash="0x1", message_hash="0x2", safe_tx_hash="0x3", encoded_message="0x4")

    assert result.model_dump(by_alias=True) == {
        "domainHash": "0x1",
        "messageHash": "0x2",
        "safeTxHash": "0x3",
        "encodedMessage": "0x4",
    }
