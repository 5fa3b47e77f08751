"""Recursive transaction decoder.

Input data is tried against an ordered list of interpreters and the first
one that succeeds wins:

1. ``multiSend(bytes)`` call data wrapping a packed bundle,
2. a packed bundle without the wrapper,
3. a single function call.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from multisend.core.constants import MULTISEND_SELECTOR, NULL_ADDRESS, SELECTOR_HEX_LENGTH
from multisend.core.errors import DecoderError, MaxDepthExceededError, MultiSendDecodeError
from multisend.core.hexutils import normalize_hex_string
from multisend.core.models import DecodedNode, DecodedTransaction, Operation
from multisend.core.multisend import decode_multisend_transactions
from multisend.core.registry import FunctionSelectorRegistry, registry as default_registry
from multisend.core.settings import settings


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of one interpreter."""

    interpreter: str
    transactions: List[DecodedTransaction] = field(default_factory=list)
    error: Optional[str] = None
    fatal: bool = False

    @property
    def ok(self) -> bool:
        """Whether the interpreter produced a result."""
        return self.error is None


Interpreter = Callable[[str], DecodeAttempt]


def is_multisend_call(data: str) -> bool:
    """Check whether call data starts with the multiSend(bytes) selector."""
    return normalize_hex_string(data)[: SELECTOR_HEX_LENGTH + 2].lower() == MULTISEND_SELECTOR


def decode_regular_function_call(data: str) -> List[DecodedTransaction]:
    """Wrap call data as a single plain call.

    The target is not part of call data, so it is left as the zero address.
    """
    normalized = normalize_hex_string(data)
    if len(normalized) < SELECTOR_HEX_LENGTH + 2:
        logger.warning(f"Data too short for function call decoding: {normalized}")
        return []

    return [
        DecodedTransaction(
            operation=Operation.CALL.value,
            to=NULL_ADDRESS,
            value="0",
            data=normalized,
        )
    ]


class TransactionDecoder:
    """Decode Safe transaction data into transactions and nested call trees."""

    def __init__(
        self,
        registry: Optional[FunctionSelectorRegistry] = None,
        max_depth: Optional[int] = None,
    ):
        """Initialize with the selector registry and the nesting limit."""
        self.registry = registry or default_registry
        self.max_depth = settings.max_decode_depth if max_depth is None else max_depth
        self.interpreters: List[Interpreter] = [
            self._interpret_multisend_call,
            self._interpret_bundle,
            self._interpret_single_call,
        ]

    def decode_transaction_data(self, data: str) -> List[DecodedTransaction]:
        """Decode data into the list of transactions it carries.

        Raises:
            MultiSendDecodeError: If the data announces multiSend(bytes) but cannot be parsed.

        """
        normalized = normalize_hex_string(data)
        if normalized == "0x":
            return []

        for interpreter in self.interpreters:
            attempt = interpreter(normalized)
            if attempt.ok:
                return attempt.transactions
            if attempt.fatal:
                logger.error(f"Failed to decode presumed multiSend(bytes) data: {attempt.error}")
                raise MultiSendDecodeError(
                    f"Failed to decode presumed multiSend(bytes) data: {attempt.error}"
                )
            logger.debug(f"{attempt.interpreter} did not match: {attempt.error}")

        raise DecoderError(f"Failed to decode transaction data: {normalized}")

    def decode_tree(self, data: str, depth: int = 0) -> List[DecodedNode]:
        """Decode data and expand every nested multiSend(bytes) call.

        Raises:
            MultiSendDecodeError: If the top-level data is a malformed multiSend(bytes) call.
            MaxDepthExceededError: If nesting goes deeper than ``max_depth``.

        """
        if depth > self.max_depth:
            raise MaxDepthExceededError(
                f"Nested multiSend depth {depth} exceeds the limit of {self.max_depth}"
            )

        nodes: List[DecodedNode] = []
        for tx in self.decode_transaction_data(data):
            function = self.registry.try_decode_function_data(tx.data)
            children: List[DecodedNode] = []
            if is_multisend_call(tx.data):
                try:
                    children = self.decode_tree(tx.data, depth + 1)
                except MultiSendDecodeError as e:
                    # The function call already carries the error for display
                    logger.warning(f"Nested multiSend could not be expanded: {e}")
            nodes.append(DecodedNode(transaction=tx, function=function, children=children))
        return nodes

    def _interpret_multisend_call(self, data: str) -> DecodeAttempt:
        name = "multiSend(bytes) wrapper"
        if not is_multisend_call(data):
            return DecodeAttempt(name, error="selector does not match")

        decoded = self.registry.try_decode_function_data(data)
        if decoded is None or decoded.error or "transactions" not in decoded.params:
            error = decoded.error if decoded is not None else "no parameters"
            return DecodeAttempt(name, error=error, fatal=True)

        try:
            transactions = decode_multisend_transactions("0x" + decoded.params["transactions"])
        except DecoderError as e:
            return DecodeAttempt(name, error=str(e), fatal=True)
        return DecodeAttempt(name, transactions=transactions)

    def _interpret_bundle(self, data: str) -> DecodeAttempt:
        name = "packed bundle"
        try:
            return DecodeAttempt(name, transactions=decode_multisend_transactions(data))
        except DecoderError as e:
            return DecodeAttempt(name, error=str(e))

    def _interpret_single_call(self, data: str) -> DecodeAttempt:
        return DecodeAttempt("single call", transactions=decode_regular_function_call(data))


decoder = TransactionDecoder()


def decode_transaction_data(data: str) -> List[DecodedTransaction]:
    """Decode data with the default decoder."""
    return decoder.decode_transaction_data(data)


def decode_tree(data: str) -> List[DecodedNode]:
    """Decode data and its nested multiSend calls with the default decoder."""
    return decoder.decode_tree(data)
