"""Validation and parsing of externally extracted transaction data.

Transaction fields arrive either as a Sign Typed Data JSON message copied
from a wallet, or as a best-effort JSON object extracted from a screenshot.
Hex fields from either source may have odd length and are normalized
before use.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from multisend.core.constants import NULL_ADDRESS
from multisend.core.decoder import TransactionDecoder, decoder as default_decoder, is_multisend_call
from multisend.core.errors import DecoderError
from multisend.core.hexutils import normalize_hex_string
from multisend.core.models import DecodedFunctionCall, DecodedTransaction
from multisend.core.multisend import decode_multisend_transactions

ADDRESS_REGEX = re.compile(r"^0x[a-fA-F0-9]{40}$")
HEX_NUMBER_REGEX = re.compile(r"^0x[a-fA-F0-9]+$")

GAS_FIELDS = ("safeTxGas", "baseGas", "gasPrice")
ADDRESS_FIELDS = ("to", "gasToken", "refundReceiver")
HEX_FIELDS = ("to", "data", "gasToken", "refundReceiver")


def is_valid_address(address: Any) -> bool:
    """Check for a 0x-prefixed 20-byte hex address."""
    return isinstance(address, str) and ADDRESS_REGEX.match(address) is not None


def is_valid_number(value: Any) -> bool:
    """Check for an int, a decimal string or a 0x hex string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == value
    if isinstance(value, str):
        if value.startswith("0x"):
            return HEX_NUMBER_REGEX.match(value) is not None
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def validate_extracted_data(data: Any) -> Tuple[bool, List[str]]:
    """Validate extracted transaction fields.

    Returns:
        Whether the data is valid, and the list of problems found.

    """
    if not isinstance(data, dict):
        return False, ["Extracted data is not a valid object"]

    errors: List[str] = []

    if not data.get("to"):
        errors.append('Missing required field: "to"')
    elif not is_valid_address(data["to"]):
        errors.append('Invalid Ethereum address in "to" field')

    if "value" in data and not is_valid_number(data["value"]):
        errors.append("Invalid value: must be a valid number")

    if "operation" in data:
        try:
            operation = int(data["operation"])
        except (TypeError, ValueError):
            operation = None
        if operation not in (0, 1):
            errors.append("Invalid operation: must be 0 (Call) or 1 (DelegateCall)")

    for field in GAS_FIELDS:
        if field in data and not is_valid_number(data[field]):
            errors.append(f"Invalid {field}: must be a valid number")

    for field in ("gasToken", "refundReceiver"):
        value = data.get(field)
        if field in data and value != NULL_ADDRESS and not is_valid_address(value):
            errors.append(f"Invalid {field}: must be a valid Ethereum address")

    if "nonce" in data and not is_valid_number(data["nonce"]):
        errors.append("Invalid nonce: must be a valid number")

    return not errors, errors


def format_extracted_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize hex fields and lowercase addresses."""
    formatted = dict(data)
    for field in HEX_FIELDS:
        if formatted.get(field):
            formatted[field] = normalize_hex_string(formatted[field])
    for field in ADDRESS_FIELDS:
        if formatted.get(field):
            formatted[field] = formatted[field].lower()
    return formatted


class TypedDataParseResult(BaseModel):
    """Safe transaction fields from a Sign Typed Data message, with the decoded data."""

    to: str
    value: str = "0"
    data: str = "0x"
    operation: str = "0"
    safe_tx_gas: str = "0"
    base_gas: str = "0"
    gas_price: str = "0"
    gas_token: str = NULL_ADDRESS
    refund_receiver: str = NULL_ADDRESS
    nonce: str = "0"
    decoded_data: Optional[DecodedFunctionCall] = None
    decoded_transactions: Optional[List[DecodedTransaction]] = None


def _field(message: Dict[str, Any], key: str, default: str) -> str:
    value = message.get(key)
    if value is None or value == "":
        return default
    return str(value)


def parse_sign_typed_data_json(
    json_string: str, decoder: Optional[TransactionDecoder] = None
) -> Optional[TypedDataParseResult]:
    """Parse a Sign Typed Data JSON message and decode its call data.

    Accepts either the bare SafeTx message or a full EIP-712 payload with a
    ``message`` object. Returns ``None`` if the JSON is invalid or lacks
    ``to``/``data``.
    """
    decoder = decoder or default_decoder
    try:
        parsed = json.loads(json_string)
    except (TypeError, ValueError) as e:
        logger.error(f"Error parsing JSON: {e}")
        return None

    message = parsed.get("message", parsed) if isinstance(parsed, dict) else None
    if not isinstance(message, dict) or not message.get("to") or not message.get("data"):
        logger.error("Invalid JSON format: missing required fields")
        return None

    result = TypedDataParseResult(
        to=str(message["to"]),
        value=_field(message, "value", "0"),
        data=normalize_hex_string(str(message["data"])),
        operation=_field(message, "operation", "0"),
        safe_tx_gas=_field(message, "safeTxGas", "0"),
        base_gas=_field(message, "baseGas", "0"),
        gas_price=_field(message, "gasPrice", "0"),
        gas_token=_field(message, "gasToken", NULL_ADDRESS).lower(),
        refund_receiver=_field(message, "refundReceiver", NULL_ADDRESS).lower(),
        nonce=_field(message, "nonce", "0"),
    )

    if result.data == "0x":
        return result

    decoded_data = None
    decoded_transactions = None
    if is_multisend_call(result.data):
        decoded_data = decoder.registry.try_decode_function_data(result.data)
        if decoded_data is not None and "transactions" in decoded_data.params:
            try:
                decoded_transactions = decode_multisend_transactions(
                    "0x" + decoded_data.params["transactions"]
                )
            except DecoderError as e:
                logger.error(f"Failed to decode multiSend transactions: {e}")
    else:
        try:
            transactions = decoder.decode_transaction_data(result.data)
        except DecoderError as e:
            logger.error(f"Error decoding data: {e}")
            transactions = []
        if len(transactions) > 1:
            decoded_transactions = transactions
        else:
            decoded_data = decoder.registry.try_decode_function_data(result.data)

    return result.model_copy(
        update={"decoded_data": decoded_data, "decoded_transactions": decoded_transactions}
    )
