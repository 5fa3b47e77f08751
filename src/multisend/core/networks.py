"""Supported networks and Safe address input parsing."""

import re
from typing import List, Optional

from multisend.core.models import Network, ParsedSafeAddress

DEFAULT_NETWORK = "ethereum"

NETWORKS: List[Network] = [
    Network(value="ethereum", label="Ethereum Mainnet", chain_id=1, gnosis_prefix="eth"),
    Network(value="goerli", label="Goerli Testnet", chain_id=5, gnosis_prefix="gor"),
    Network(value="sepolia", label="Sepolia Testnet", chain_id=11155111, gnosis_prefix="sep"),
    Network(value="polygon", label="Polygon", chain_id=137, gnosis_prefix="matic"),
    Network(value="mumbai", label="Mumbai Testnet", chain_id=80001, gnosis_prefix="mum"),
    Network(value="bsc", label="Binance Smart Chain", chain_id=56, gnosis_prefix="bnb"),
    Network(value="bsc-testnet", label="BSC Testnet", chain_id=97, gnosis_prefix="bnbt"),
    Network(value="arbitrum", label="Arbitrum One", chain_id=42161, gnosis_prefix="arb1"),
    Network(
        value="arbitrum-goerli", label="Arbitrum Goerli", chain_id=421613, gnosis_prefix="arb-goerli"
    ),
    Network(value="optimism", label="Optimism", chain_id=10, gnosis_prefix="oeth"),
    Network(value="optimism-goerli", label="Optimism Goerli", chain_id=420, gnosis_prefix="ogor"),
    Network(value="avalanche", label="Avalanche", chain_id=43114, gnosis_prefix="avax"),
    Network(value="avalanche-fuji", label="Avalanche Fuji", chain_id=43113, gnosis_prefix="fuji"),
    Network(value="gnosis", label="Gnosis Chain", chain_id=100, gnosis_prefix="gno"),
    Network(value="base", label="Base", chain_id=8453, gnosis_prefix="base"),
    Network(value="base-goerli", label="Base Goerli", chain_id=84531, gnosis_prefix="base-gor"),
    Network(value="zksync", label="zkSync Era", chain_id=324, gnosis_prefix="zksync"),
    Network(value="zksync-goerli", label="zkSync Era Testnet", chain_id=280, gnosis_prefix="zksync-gor"),
]

ADDRESS_REGEX = re.compile(r"0x[a-fA-F0-9]{40}", re.IGNORECASE)
PREFIXED_ADDRESS_REGEX = re.compile(r"([a-z0-9-]+):0x[a-fA-F0-9]{40}", re.IGNORECASE)
SAFE_PARAM_REGEX = re.compile(r"[?&]safe=([a-z0-9-]+):0x[a-fA-F0-9]{40}", re.IGNORECASE)
TX_HASH_REGEX = re.compile(r"multisig_0x[a-fA-F0-9]{40}_(0x)?([a-fA-F0-9]{64})", re.IGNORECASE)


def get_network_by_value(value: str) -> Optional[Network]:
    """Find a network by its identifier (e.g. ``optimism``)."""
    return next((n for n in NETWORKS if n.value == value.lower()), None)


def get_network_by_prefix(prefix: str) -> Optional[Network]:
    """Find a network by its Safe web app prefix (e.g. ``oeth``)."""
    return next((n for n in NETWORKS if n.gnosis_prefix == prefix.lower()), None)


def get_network_by_chain_id(chain_id: int) -> Optional[Network]:
    """Find a network by chain id."""
    return next((n for n in NETWORKS if n.chain_id == int(chain_id)), None)


def parse_safe_address_input(text: str) -> Optional[ParsedSafeAddress]:
    """Parse a Safe address given as a plain address, ``prefix:address`` or Safe web app URL.

    Supported formats:
        https://app.safe.global/transactions/tx?id=multisig_0x..._0x...&safe=eth:0x...
        https://app.safe.global/home?safe=oeth:0x...
        eth:0x...
        0x...

    Returns ``None`` when no address is found or the prefix is unknown.
    Input without a prefix resolves to Ethereum mainnet.
    """
    if not text:
        return None

    trimmed = text.strip()
    address_match = ADDRESS_REGEX.search(trimmed)
    if not address_match:
        return None
    address = address_match.group(0)

    prefix = ""
    prefix_match = PREFIXED_ADDRESS_REGEX.search(trimmed)
    if prefix_match:
        prefix = prefix_match.group(1).lower()

    safe_param_match = SAFE_PARAM_REGEX.search(trimmed)
    if safe_param_match:
        prefix = safe_param_match.group(1).lower()

    tx_hash = None
    tx_hash_match = TX_HASH_REGEX.search(trimmed)
    if tx_hash_match:
        tx_hash = "0x" + tx_hash_match.group(2).lower()

    network = get_network_by_prefix(prefix) if prefix else get_network_by_value(DEFAULT_NETWORK)
    if network is None:
        return None

    return ParsedSafeAddress(
        address=address,
        network=network.value,
        chain_id=network.chain_id,
        tx_hash=tx_hash,
    )


def format_safe_address(address: str, network_value: str) -> str:
    """Prefix an address with its Safe web app network short name (``eth:0x...``)."""
    network = get_network_by_value(network_value)
    if network is None or not address:
        return address
    return f"{network.gnosis_prefix}:{address}"
