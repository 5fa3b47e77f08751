"""Safe transaction hash calculator.

Reproduces the EIP-712 hashing done by the Safe contracts. The domain
separator and the SafeTx type hash both depend on the Safe version, and a
wrong variant produces a hash that never verifies on-chain, so any input
that cannot be interpreted unambiguously raises instead of guessing.
"""

import re
from typing import Tuple, Union

from eth_abi import encode as abi_encode
from loguru import logger
from web3 import Web3

from multisend.core.constants import (
    DEFAULT_SAFE_VERSION,
    DOMAIN_SEPARATOR_TYPEHASH,
    DOMAIN_SEPARATOR_TYPEHASH_OLD,
    SAFE_TX_TYPEHASH,
    SAFE_TX_TYPEHASH_OLD,
)
from multisend.core.errors import InvalidVersionError
from multisend.core.hexutils import hex_to_bytes, normalize_hex_string
from multisend.core.models import HashResult, SafeTransactionParams

ADDRESS_REGEX = re.compile(r"^0x[0-9a-fA-F]{40}$")

SAFE_TX_TYPES = [
    "bytes32",  # typehash
    "address",  # to
    "uint256",  # value
    "bytes32",  # keccak(data)
    "uint8",  # operation
    "uint256",  # safeTxGas
    "uint256",  # baseGas
    "uint256",  # gasPrice
    "address",  # gasToken
    "address",  # refundReceiver
    "uint256",  # nonce
]

IntLike = Union[int, str]


def parse_version(version: str) -> Tuple[int, ...]:
    """Parse a dot-separated Safe version into numeric components.

    Build metadata (``1.3.0+L2``) does not change the hashing scheme and is
    dropped. Anything else that is not numeric raises ``InvalidVersionError``.
    """
    if not isinstance(version, str) or not version.strip():
        raise InvalidVersionError(f"Invalid Safe version: {version!r}")

    core = version.strip().split("+", 1)[0]
    try:
        parts = tuple(int(part) for part in core.split("."))
    except ValueError as e:
        raise InvalidVersionError(f"Invalid Safe version: {version!r}") from e
    if any(part < 0 for part in parts):
        raise InvalidVersionError(f"Invalid Safe version: {version!r}")
    return parts


def compare_versions(a: str, b: str) -> int:
    """Compare two versions numerically; returns <0, 0 or >0."""
    a_parts, b_parts = parse_version(a), parse_version(b)
    length = max(len(a_parts), len(b_parts))
    a_parts += (0,) * (length - len(a_parts))
    b_parts += (0,) * (length - len(b_parts))
    return (a_parts > b_parts) - (a_parts < b_parts)


def parse_int(value: IntLike, field: str, bits: int = 256) -> int:
    """Parse a decimal or 0x-prefixed hex unsigned integer that fits in ``bits`` bits.

    Raises:
        ValueError: If the value is not a number, is negative or is out of range.

    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        result = value
    else:
        text = str(value).strip()
        try:
            result = int(text, 16) if text[:2].lower() == "0x" else int(text, 10)
        except ValueError as e:
            raise ValueError(f"Invalid {field}: {value!r}") from e
    if result < 0:
        raise ValueError(f"Invalid {field}: {value!r} is negative")
    if result >= 1 << bits:
        raise ValueError(f"Invalid {field}: {value!r} does not fit in uint{bits}")
    return result


def _to_address(value: str, field: str) -> str:
    address = normalize_hex_string(value).lower()
    if not ADDRESS_REGEX.match(address):
        raise ValueError(f"Invalid {field} address: {value!r}")
    return address


def keccak_hex(data: bytes) -> str:
    """keccak256 of raw bytes as a 0x-prefixed hex string."""
    return Web3.to_hex(Web3.keccak(data))


def get_safe_tx_typehash(version: str) -> str:
    """SafeTx type hash for a Safe version (legacy before 1.0.0)."""
    if compare_versions(version, "1.0.0") < 0:
        return SAFE_TX_TYPEHASH_OLD
    return SAFE_TX_TYPEHASH


def calculate_domain_hash(version: str, safe_address: str, chain_id: IntLike) -> str:
    """EIP-712 domain separator of a Safe.

    Safes up to 1.2.0 do not include the chain id in their domain.
    """
    address = _to_address(safe_address, "Safe")
    if compare_versions(version, "1.2.0") <= 0:
        encoded = abi_encode(
            ["bytes32", "address"],
            [hex_to_bytes(DOMAIN_SEPARATOR_TYPEHASH_OLD), address],
        )
    else:
        encoded = abi_encode(
            ["bytes32", "uint256", "address"],
            [hex_to_bytes(DOMAIN_SEPARATOR_TYPEHASH), parse_int(chain_id, "chain id"), address],
        )
    return keccak_hex(encoded)


def calculate_safe_tx_hash(domain_hash: str, message_hash: str) -> str:
    """keccak256(0x19 || 0x01 || domainHash || messageHash)."""
    return keccak_hex(b"\x19\x01" + hex_to_bytes(domain_hash) + hex_to_bytes(message_hash))


def calculate_hashes(
    chain_id: IntLike,
    safe_address: str,
    to: str,
    value: IntLike,
    data: str,
    operation: IntLike,
    safe_tx_gas: IntLike,
    base_gas: IntLike,
    gas_price: IntLike,
    gas_token: str,
    refund_receiver: str,
    nonce: IntLike,
    version: str = DEFAULT_SAFE_VERSION,
) -> HashResult:
    """Compute the domain, message and Safe transaction hashes.

    Raises:
        InvalidVersionError: If the version cannot be parsed.
        ValueError: If an address or numeric field is invalid.

    """
    domain_hash = calculate_domain_hash(version, safe_address, chain_id)

    data_hash = bytes(Web3.keccak(hex_to_bytes(data)))
    typehash = get_safe_tx_typehash(version)

    encoded_message = abi_encode(
        SAFE_TX_TYPES,
        [
            hex_to_bytes(typehash),
            _to_address(to, "to"),
            parse_int(value, "value"),
            data_hash,
            parse_int(operation, "operation", bits=8),
            parse_int(safe_tx_gas, "safeTxGas"),
            parse_int(base_gas, "baseGas"),
            parse_int(gas_price, "gasPrice"),
            _to_address(gas_token, "gasToken"),
            _to_address(refund_receiver, "refundReceiver"),
            parse_int(nonce, "nonce"),
        ],
    )

    message_hash = keccak_hex(encoded_message)
    safe_tx_hash = calculate_safe_tx_hash(domain_hash, message_hash)
    logger.debug(f"Safe {safe_address} v{version} nonce {nonce}: safeTxHash {safe_tx_hash}")

    return HashResult(
        domain_hash=domain_hash,
        message_hash=message_hash,
        safe_tx_hash=safe_tx_hash,
        encoded_message="0x" + encoded_message.hex(),
    )


def calculate_hashes_for(
    params: SafeTransactionParams, chain_id: IntLike, safe_address: str
) -> HashResult:
    """Compute hashes from a ``SafeTransactionParams`` (e.g. fetched from the transaction service)."""
    return calculate_hashes(
        chain_id,
        safe_address,
        params.to,
        params.value,
        params.data,
        params.operation,
        params.safe_tx_gas,
        params.base_gas,
        params.gas_price,
        params.gas_token,
        params.refund_receiver,
        params.nonce,
        params.version,
    )
