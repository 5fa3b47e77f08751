"""Ethereum ABI primitive codec.

Decoding helpers operate on hex bodies (no ``0x`` prefix) and address the
data by hex-character position, so every byte offset read from the payload is
multiplied by two before slicing. Any read past the end of the available data
raises ``TooShortError``.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, ParseError
from loguru import logger
from web3 import Web3

from multisend.core.errors import InvalidHexError, TooShortError
from multisend.core.hexutils import is_hex_body, normalize_hex_string, strip_hex_prefix

WORD_HEX_LENGTH = 64
ADDRESS_HEX_LENGTH = 40
LARGE_NUMBER_DIGITS = 10

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
SIGNATURE_PATTERN = re.compile(r"^([A-Za-z_$][A-Za-z0-9_$]*)\((.*)\)$")


def read_slice(body: str, start: int, length: int) -> str:
    """Read ``length`` hex characters from ``body`` starting at ``start``."""
    end = start + length
    if start < 0 or length < 0 or end > len(body):
        raise TooShortError(
            f"Cannot read {length} hex chars at position {start}: only {len(body)} available"
        )
    return body[start:end]


def read_word(body: str, index: int) -> str:
    """Read the 32-byte word at word ``index``."""
    return read_slice(body, index * WORD_HEX_LENGTH, WORD_HEX_LENGTH)


def decode_uint(word: str) -> int:
    """Decode a big-endian unsigned integer."""
    if not word:
        raise TooShortError("Cannot decode an integer from empty data")
    if not is_hex_body(word):
        raise InvalidHexError(f"Not a hex word: {word!r}")
    return int(word, 16)


def decode_address(word: str) -> str:
    """Decode an address from the low 20 bytes of a word."""
    if len(word) < ADDRESS_HEX_LENGTH:
        raise TooShortError(f"Word too short for an address: {word!r}")
    return "0x" + word[-ADDRESS_HEX_LENGTH:].lower()


def decode_bool(word: str) -> bool:
    """Decode a bool: any nonzero word is true."""
    return decode_uint(word) != 0


def decode_dynamic_bytes(params: str, index: int = 0) -> str:
    """Decode a dynamic ``bytes`` parameter from an ABI parameter block.

    The word at ``index`` holds the byte offset (relative to the start of
    ``params``) of a length word, which is followed by the payload itself.
    Returns the payload as a hex body without prefix.
    """
    offset = decode_uint(read_word(params, index)) * 2
    length = decode_uint(read_slice(params, offset, WORD_HEX_LENGTH)) * 2
    return read_slice(params, offset + WORD_HEX_LENGTH, length)


def encode_uint(value: int) -> str:
    """Encode an unsigned integer as a 32-byte word."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value} as uint256")
    if value >= 1 << 256:
        raise ValueError(f"Cannot encode {value} as uint256: too large")
    return format(value, "064x")


def encode_address(address: str) -> str:
    """Encode an address as a left-padded 32-byte word."""
    body = strip_hex_prefix(address).lower()
    if len(body) != ADDRESS_HEX_LENGTH:
        raise ValueError(f"Invalid address: {address}")
    return body.rjust(WORD_HEX_LENGTH, "0")


def encode_bool(value: bool) -> str:
    """Encode a bool as a 32-byte word."""
    return encode_uint(1 if value else 0)


def encode_dynamic_bytes(payload: str) -> str:
    """Encode a single dynamic ``bytes`` parameter block (offset, length, padded data)."""
    body = strip_hex_prefix(normalize_hex_string(payload))
    padding = (-len(body)) % WORD_HEX_LENGTH
    return encode_uint(32) + encode_uint(len(body) // 2) + body + "0" * padding


def format_large_number(value) -> str:
    """Decorate long decimal values with a scientific-notation hint.

    ``26436651029164848837793`` becomes ``26436651029164848837793 [2.64e+22]``.
    """
    text = str(value)
    if len(text) <= LARGE_NUMBER_DIGITS:
        return text

    mantissa, exponent = f"{float(text):.2e}".split("e")
    exponent_value = int(exponent)
    sign = "+" if exponent_value >= 0 else "-"
    return f"{text} [{mantissa}e{sign}{abs(exponent_value)}]"


def split_signature(signature: str) -> Tuple[str, List[str]]:
    """Split ``name(type1,(type2,type3))`` into its name and top-level types."""
    match = SIGNATURE_PATTERN.match(signature.replace(" ", ""))
    if not match:
        raise ValueError(f"Invalid function signature: {signature}")

    name, args = match.groups()
    types: List[str] = []
    depth = 0
    current = ""
    for char in args:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ValueError(f"Unbalanced parentheses in signature: {signature}")
        if char == "," and depth == 0:
            types.append(current)
            current = ""
        else:
            current += char
    if depth != 0:
        raise ValueError(f"Unbalanced parentheses in signature: {signature}")
    if current:
        types.append(current)
    return name, types


def function_selector(signature: str) -> str:
    """Compute the 4-byte selector for a canonical signature."""
    return "0x" + Web3.keccak(text=signature.replace(" ", ""))[:4].hex().removeprefix("0x")


def format_decoded_value(value: Any) -> str:
    """Render a value decoded by eth_abi as a display string."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_decoded_value(item) for item in value) + "]"
    if isinstance(value, str) and ADDRESS_PATTERN.match(value):
        return value.lower()
    return str(value)


def decode_with_signature(signature: str, data: str) -> Optional[Dict[str, str]]:
    """Decode call data against a text signature discovered at runtime.

    Returns a mapping of positional ``argN`` names to display strings, or
    ``None`` when the data does not match the signature.
    """
    try:
        _, types = split_signature(signature)
        body = strip_hex_prefix(normalize_hex_string(data))
        selector = "0x" + body[:8].lower()
        if selector != function_selector(signature):
            raise ValueError(f"Selector {selector} does not match {signature}")
        decoded = abi_decode(types, bytes.fromhex(body[8:]))
    except (DecodingError, ParseError, ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Failed to decode using signature {signature}: {e}")
        return None

    return {f"arg{index}": format_decoded_value(item) for index, item in enumerate(decoded)}


def encode_abi(types: List[str], values: List[Any]) -> str:
    """ABI-encode values and return a 0x-prefixed hex string."""
    return "0x" + abi_encode(types, values).hex()
