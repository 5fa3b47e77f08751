"""Tests for network lookup and Safe address parsing."""

import pytest

from multisend.core.networks import (
    NETWORKS,
    format_safe_address,
    get_network_by_chain_id,
    get_network_by_prefix,
    get_network_by_value,
    parse_safe_address_input,
)

ETH_SAFE = "0xC71605Ab3ea0E614a1e2E11B77e353ee964A44Ef"
OP_SAFE = "0xC58303c5816333EF695D8BCBFA2136Cd79415B1a"
TX_HASH = "0xc9704276655e94b56cfaf6285f37cf1c5e0dbab4d890298903960b33e941bed4"


class TestParseSafeAddressInput:
    """Accepted input formats."""

    def test_plain_address(self):
        result = parse_safe_address_input(ETH_SAFE)

        assert result.address == ETH_SAFE
        assert result.network == "ethereum"
        assert result.chain_id == 1
        assert result.tx_hash is None

    def test_prefixed_address(self):
        result = parse_safe_address_input(f"oeth:{OP_SAFE}")

        assert result.address == OP_SAFE
        assert result.network == "optimism"
        assert result.chain_id == 10

    def test_safe_url(self):
        result = parse_safe_address_input(f"https://app.safe.global/home?safe=oeth:{OP_SAFE}")

        assert result.network == "optimism"
        assert result.address == OP_SAFE

    def test_transaction_url(self):
        url = (
            "https://app.safe.global/transactions/tx"
            f"?id=multisig_{ETH_SAFE}_{TX_HASH}&safe=eth:{ETH_SAFE}"
        )
        result = parse_safe_address_input(url)

        assert result.address == ETH_SAFE
        assert result.network == "ethereum"
        assert result.chain_id == 1
        assert result.tx_hash == TX_HASH

    def test_transaction_url_without_hash_prefix(self):
        url = f"https://app.safe.global/transactions/tx?id=multisig_{ETH_SAFE}_{TX_HASH[2:]}&safe=gno:{ETH_SAFE}"
        result = parse_safe_address_input(url)

        assert result.network == "gnosis"
        assert result.tx_hash == TX_HASH

    def test_safe_parameter_wins_over_earlier_prefix(self):
        result = parse_safe_address_input(f"arb1:{ETH_SAFE} https://app.safe.global/home?safe=base:{ETH_SAFE}")
        assert result.network == "base"

    def test_whitespace(self):
        result = parse_safe_address_input(f"  eth:{ETH_SAFE}  ")
        assert result.address == ETH_SAFE
        assert result.network == "ethereum"

    def test_unknown_prefix(self):
        assert parse_safe_address_input(f"foo:{ETH_SAFE}") is None

    @pytest.mark.parametrize("text", ["", "not a valid address", "0x1234"])
    def test_invalid_input(self, text):
        assert parse_safe_address_input(text) is None


def test_network_lookups():
    assert get_network_by_value("Optimism").chain_id == 10
    assert get_network_by_prefix("GNO").value == "gnosis"
    assert get_network_by_chain_id(8453).gnosis_prefix == "base"
    assert get_network_by_value("unknown") is None
    assert get_network_by_chain_id(999999) is None


def test_networks_are_unique():
    assert len({n.value for n in NETWORKS}) == len(NETWORKS)
    assert len({n.gnosis_prefix for n in NETWORKS}) == len(NETWORKS)
    assert len({n.chain_id for n in NETWORKS}) == len(NETWORKS)


def test_format_safe_address():
    assert format_safe_address(ETH_SAFE, "ethereum") == f"eth:{ETH_SAFE}"
    assert format_safe_address(ETH_SAFE, "unknown-network") == ETH_SAFE
    assert format_safe_address("", "ethereum") == ""
