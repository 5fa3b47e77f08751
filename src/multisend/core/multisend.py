"""Packed multiSend bundle codec.

A bundle is a plain concatenation of entries, each encoded as::

    operation (1 byte) | to (20 bytes) | value (32 bytes) | data length (32 bytes) | data

with no ABI padding between entries.
"""

from typing import Iterable, List

from multisend.core.abi import decode_address, decode_uint, encode_dynamic_bytes, encode_uint
from multisend.core.constants import MULTISEND_SELECTOR
from multisend.core.errors import MalformedBundleError
from multisend.core.hexutils import is_hex_body, normalize_hex_string, strip_hex_prefix
from multisend.core.models import DecodedTransaction

OPERATION_HEX_LENGTH = 2
ADDRESS_HEX_LENGTH = 40
WORD_HEX_LENGTH = 64


def _take(body: str, cursor: int, length: int, field: str, entry: int) -> str:
    end = cursor + length
    if end > len(body):
        raise MalformedBundleError(
            f"Bundle entry {entry} truncated while reading {field}: "
            f"need {length // 2} bytes at offset {cursor // 2}, "
            f"{max(len(body) - cursor, 0) // 2} available"
        )
    chunk = body[cursor:end]
    if not is_hex_body(chunk):
        raise MalformedBundleError(f"Bundle entry {entry} has non-hex {field}: {chunk!r}")
    return chunk


def decode_multisend_transactions(data: str) -> List[DecodedTransaction]:
    """Split a packed multiSend bundle into its transactions.

    Raises:
        MalformedBundleError: If the data ends in the middle of an entry.

    """
    body = strip_hex_prefix(normalize_hex_string(data))

    transactions: List[DecodedTransaction] = []
    cursor = 0
    while cursor < len(body):
        entry = len(transactions)

        operation = int(_take(body, cursor, OPERATION_HEX_LENGTH, "operation", entry), 16)
        cursor += OPERATION_HEX_LENGTH

        to = decode_address(_take(body, cursor, ADDRESS_HEX_LENGTH, "to", entry))
        cursor += ADDRESS_HEX_LENGTH

        value = decode_uint(_take(body, cursor, WORD_HEX_LENGTH, "value", entry))
        cursor += WORD_HEX_LENGTH

        data_length = decode_uint(_take(body, cursor, WORD_HEX_LENGTH, "data length", entry))
        cursor += WORD_HEX_LENGTH

        tx_data = _take(body, cursor, data_length * 2, "data", entry)
        cursor += data_length * 2

        transactions.append(
            DecodedTransaction(
                operation=operation,
                to=to,
                value=str(value),
                data="0x" + tx_data,
            )
        )

    return transactions


def encode_multisend_transactions(transactions: Iterable[DecodedTransaction]) -> str:
    """Pack transactions into a multiSend bundle (inverse of the decoder)."""
    parts = ["0x"]
    for tx in transactions:
        if not 0 <= tx.operation <= 0xFF:
            raise ValueError(f"Operation {tx.operation} does not fit in one byte")
        body = strip_hex_prefix(tx.data)
        parts.append(format(tx.operation, "02x"))
        parts.append(strip_hex_prefix(tx.to).lower())
        parts.append(encode_uint(int(tx.value)))
        parts.append(encode_uint(len(body) // 2))
        parts.append(body)
    return "".join(parts)


def encode_multisend_call(transactions: Iterable[DecodedTransaction]) -> str:
    """Build ``multiSend(bytes)`` call data for the given transactions."""
    return MULTISEND_SELECTOR + encode_dynamic_bytes(encode_multisend_transactions(transactions))
