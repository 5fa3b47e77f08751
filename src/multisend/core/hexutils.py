"""Hex string helpers."""

import re

HEX_REGEX = re.compile(r"^(0x)?[0-9a-fA-F]*$")
HEX_BODY_REGEX = re.compile(r"^[0-9a-fA-F]*$")


def strip_hex_prefix(value: str) -> str:
    """Remove a leading 0x/0X if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def normalize_hex_string(value) -> str:
    """Return ``value`` as a 0x-prefixed hex string of even length.

    Odd-length input is left-padded with a single zero. Empty or non-string
    input yields ``"0x"``. Applying this twice is the same as applying it once.
    """
    if not value or not isinstance(value, str):
        return "0x"

    body = strip_hex_prefix(value)
    if len(body) % 2:
        body = "0" + body
    return "0x" + body


def is_hex(value: str) -> bool:
    """Check whether ``value`` only contains hex digits (optionally 0x-prefixed)."""
    return isinstance(value, str) and HEX_REGEX.fullmatch(value) is not None


def is_hex_body(value: str) -> bool:
    """Check whether ``value`` only contains hex digits, without a prefix."""
    return HEX_BODY_REGEX.fullmatch(value) is not None


def hex_to_bytes(value: str) -> bytes:
    """Convert a hex string into bytes after normalizing it."""
    return bytes.fromhex(normalize_hex_string(value)[2:])
