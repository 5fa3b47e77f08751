"""Tests for the Safe Transaction Service client."""

from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr
from requests.exceptions import HTTPError, Timeout

from multisend.core.constants import NULL_ADDRESS
from multisend.core.errors import TransactionServiceError
from multisend.core.transaction_service import SafeTransactionServiceClient, get_service_url

SAFE = "0xC71605Ab3ea0E614a1e2E11B77e353ee964A44Ef"
TX = {
    "safe": SAFE,
    "to": "0xef4461891dfb3ac8572ccf7c794664a8dd927945",
    "value": "0",
    "data": "0xa9059cbb",
    "operation": 1,
    "safeTxGas": 0,
    "baseGas": 0,
    "gasPrice": "0",
    "gasToken": NULL_ADDRESS,
    "refundReceiver": NULL_ADDRESS,
    "nonce": 12,
    "safeTxHash": "0xabc",
    "dataDecoded": {"method": "transfer"},
    "confirmations": [{"signature": "0xaaaa"}, {"signature": "0xbbbb"}],
}


def _response(body):
    response = MagicMock()
    response.json.return_value = body
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return SafeTransactionServiceClient(session=session, timeout=5)


def test_get_service_url():
    assert get_service_url("ethereum") == "https://safe-transaction-mainnet.safe.global"
    assert get_service_url("gnosis") == "https://safe-transaction-gnosis-chain.safe.global"
    with pytest.raises(TransactionServiceError):
        get_service_url("mumbai")


class TestFetchTransaction:
    """Multisig transaction lookup."""

    def test_success(self, client, session):
        session.get.side_effect = [
            _response({"count": 1, "results": [TX]}),
            _response({"address": SAFE, "version": "1.3.0+L2"}),
        ]

        params = client.fetch_transaction("ethereum", SAFE, 12)

        assert params.to == TX["to"]
        assert params.operation == 1
        assert params.nonce == "12"
        assert params.safe_tx_gas == "0"
        assert params.version == "1.3.0+L2"
        assert params.data_decoded == {"method": "transfer"}
        assert params.signatures == "0xaaaabbbb"

        first_call = session.get.call_args_list[0]
        assert first_call.args[0] == (
            f"https://safe-transaction-mainnet.safe.global/api/v1/safes/{SAFE}/multisig-transactions/"
        )
        assert first_call.kwargs == {"params": {"nonce": 12}, "timeout": 5}

    def test_missing_version_uses_default(self, client, session):
        session.get.side_effect = [
            _response({"results": [dict(TX, confirmations=[])]}),
            _response({"address": SAFE}),
        ]

        params = client.fetch_transaction("optimism", SAFE, 12)

        assert params.version == "1.3.0"
        assert params.signatures == "0x"

    def test_null_data(self, client, session):
        session.get.side_effect = [
            _response({"results": [dict(TX, data=None)]}),
            _response({"version": "1.4.1"}),
        ]
        assert client.fetch_transaction("base", SAFE, 12).data == "0x"

    def test_no_results(self, client, session):
        session.get.return_value = _response({"count": 0, "results": []})

        with pytest.raises(TransactionServiceError, match="No transaction found with nonce 3"):
            client.fetch_transaction("ethereum", SAFE, 3)

    def test_http_error(self, client, session):
        response = _response({})
        response.raise_for_status.side_effect = HTTPError("404 Not Found")
        session.get.return_value = response

        with pytest.raises(TransactionServiceError, match="404"):
            client.fetch_transaction("ethereum", SAFE, 3)

    def test_timeout(self, client, session):
        session.get.side_effect = Timeout("read timed out")

        with pytest.raises(TransactionServiceError, match="timed out"):
            client.fetch_transaction("ethereum", SAFE, 3)


def test_api_key_sent_as_bearer_token(monkeypatch):
    monkeypatch.setattr(
        "multisend.core.settings.settings.safe_api_key", SecretStr("secret-key")
    )
    client = SafeTransactionServiceClient()
    assert client.session.headers["Authorization"] == "Bearer secret-key"
