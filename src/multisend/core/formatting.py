"""Display helpers for decoded transactions."""

from decimal import Decimal

from web3 import Web3

from multisend.core.models import Operation


def get_operation_name(operation: int) -> str:
    """Human readable operation name."""
    return "Call" if operation == Operation.CALL else "DelegateCall"


def format_value(value: str) -> str:
    """Format a wei amount as ether (``1000000000000000000`` -> ``1.0 ETH``).

    Values that are not integers are returned unchanged.
    """
    try:
        amount = Decimal(Web3.from_wei(int(value), "ether"))
    except (TypeError, ValueError):
        return value

    text = format(amount.normalize(), "f")
    if "." not in text:
        text += ".0"
    return f"{text} ETH"
