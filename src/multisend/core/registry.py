"""Function selector registry.

Call data is identified by its 4-byte selector. Known selectors are decoded
by hand-written rules into typed parameter structs; anything else is looked
up in the remote signature database and decoded against each candidate.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from loguru import logger

from multisend.core.abi import (
    decode_address,
    decode_bool,
    decode_dynamic_bytes,
    decode_uint,
    decode_with_signature,
    format_large_number,
    read_word,
)
from multisend.core.constants import MULTISEND_SELECTOR, SELECTOR_HEX_LENGTH
from multisend.core.errors import DecoderError
from multisend.core.hexutils import normalize_hex_string
from multisend.core.models import DecodedFunctionCall
from multisend.core.multisend import decode_multisend_transactions
from multisend.core.signatures import fetch_function_signatures


class FunctionParams(Protocol):
    """Typed parameters of a manually decoded function."""

    def to_params(self) -> Dict[str, str]:
        """Project the parameters to display strings."""


@dataclass(frozen=True)
class MultiSendParams:
    """multiSend(bytes)"""

    transactions: str
    decoded_transactions_count: int

    def to_params(self) -> Dict[str, str]:
        """Raw inner bundle (no 0x prefix) and its transaction count."""
        return {
            "transactions": self.transactions,
            "decodedTransactionsCount": str(self.decoded_transactions_count),
        }


@dataclass(frozen=True)
class ApproveParams:
    """approve(address,uint256)"""

    spender: str
    amount: int

    def to_params(self) -> Dict[str, str]:
        """Spender and raw amount."""
        return {"spender": self.spender, "amount": str(self.amount)}


@dataclass(frozen=True)
class TransferParams:
    """transfer(address,uint256)"""

    recipient: str
    amount: int

    def to_params(self) -> Dict[str, str]:
        """Recipient and raw amount."""
        return {"recipient": self.recipient, "amount": str(self.amount)}


@dataclass(frozen=True)
class SwapOwnerParams:
    """swapOwner(address,address,address)"""

    prev_owner: str
    old_owner: str
    new_owner: str

    def to_params(self) -> Dict[str, str]:
        """Owner list pointers."""
        return {
            "prevOwner": self.prev_owner,
            "oldOwner": self.old_owner,
            "newOwner": self.new_owner,
        }


@dataclass(frozen=True)
class ClaimParams:
    """claim(address)"""

    account: str

    def to_params(self) -> Dict[str, str]:
        """Claiming account."""
        return {"account": self.account}


@dataclass(frozen=True)
class InjectRewardParams:
    """injectReward(uint256,uint256)"""

    timestamp: int
    amount: int

    def to_params(self) -> Dict[str, str]:
        """Both values with a scientific-notation hint when long."""
        return {
            "timestamp": format_large_number(self.timestamp),
            "amount": format_large_number(self.amount),
        }


@dataclass(frozen=True)
class SetAllowedFromParams:
    """setAllowedFrom(address,bool)"""

    from_address: str
    allowed: bool

    def to_params(self) -> Dict[str, str]:
        """Sender and its allowed flag."""
        return {"from": self.from_address, "allowed": str(self.allowed).lower()}


@dataclass(frozen=True)
class SetPeerParams:
    """setPeer(uint16,bytes32,uint8,uint256)"""

    peer_chain_id: int
    peer_contract: str
    decimals: int
    inbound_limit: int

    def to_params(self) -> Dict[str, str]:
        """Peer configuration."""
        return {
            "peerChainId": str(self.peer_chain_id),
            "peerContract": self.peer_contract,
            "decimals": str(self.decimals),
            "inboundLimit": format_large_number(self.inbound_limit),
        }


@dataclass(frozen=True)
class SetWormholePeerParams:
    """setWormholePeer(uint16,bytes32)"""

    peer_chain_id: int
    peer_contract: str

    def to_params(self) -> Dict[str, str]:
        """Peer chain and contract."""
        return {"peerChainId": str(self.peer_chain_id), "peerContract": self.peer_contract}


@dataclass(frozen=True)
class ChainFlagParams:
    """(uint16 chainId, bool flag) setters."""

    chain_id: int
    flag: bool
    flag_name: str

    def to_params(self) -> Dict[str, str]:
        """Chain id and the named flag."""
        return {"chainId": str(self.chain_id), self.flag_name: str(self.flag).lower()}


def _decode_multisend(params: str) -> MultiSendParams:
    transactions = decode_dynamic_bytes(params, 0)
    try:
        count = len(decode_multisend_transactions("0x" + transactions))
    except DecoderError as e:
        logger.warning(f"Could not decode inner transactions within multiSend for count: {e}")
        count = 0
    return MultiSendParams(transactions=transactions, decoded_transactions_count=count)


def _decode_approve(params: str) -> ApproveParams:
    return ApproveParams(
        spender=decode_address(read_word(params, 0)),
        amount=decode_uint(read_word(params, 1)),
    )


def _decode_transfer(params: str) -> TransferParams:
    return TransferParams(
        recipient=decode_address(read_word(params, 0)),
        amount=decode_uint(read_word(params, 1)),
    )


def _decode_swap_owner(params: str) -> SwapOwnerParams:
    return SwapOwnerParams(
        prev_owner=decode_address(read_word(params, 0)),
        old_owner=decode_address(read_word(params, 1)),
        new_owner=decode_address(read_word(params, 2)),
    )


def _decode_claim(params: str) -> ClaimParams:
    return ClaimParams(account=decode_address(read_word(params, 0)))


def _decode_inject_reward(params: str) -> InjectRewardParams:
    return InjectRewardParams(
        timestamp=decode_uint(read_word(params, 0)),
        amount=decode_uint(read_word(params, 1)),
    )


def _decode_set_allowed_from(params: str) -> SetAllowedFromParams:
    return SetAllowedFromParams(
        from_address=decode_address(read_word(params, 0)),
        allowed=decode_bool(read_word(params, 1)),
    )


def _decode_set_peer(params: str) -> SetPeerParams:
    # peerContract is a bytes32 holding an EVM address in its low 20 bytes
    return SetPeerParams(
        peer_chain_id=decode_uint(read_word(params, 0)),
        peer_contract=decode_address(read_word(params, 1)),
        decimals=decode_uint(read_word(params, 2)),
        inbound_limit=decode_uint(read_word(params, 3)),
    )


def _decode_set_wormhole_peer(params: str) -> SetWormholePeerParams:
    return SetWormholePeerParams(
        peer_chain_id=decode_uint(read_word(params, 0)),
        peer_contract=decode_address(read_word(params, 1)),
    )


def _chain_flag_decoder(flag_name: str) -> Callable[[str], ChainFlagParams]:
    def decode(params: str) -> ChainFlagParams:
        return ChainFlagParams(
            chain_id=decode_uint(read_word(params, 0)),
            flag=decode_bool(read_word(params, 1)),
            flag_name=flag_name,
        )

    return decode


@dataclass(frozen=True)
class ManualRule:
    """A hardcoded selector -> signature and parameter decoder."""

    signature: str
    decode: Callable[[str], FunctionParams]

    @property
    def function_name(self) -> str:
        """Function name without the argument list."""
        return self.signature.split("(", 1)[0]


MANUAL_RULES: Dict[str, ManualRule] = {
    MULTISEND_SELECTOR: ManualRule("multiSend(bytes)", _decode_multisend),
    "0x095ea7b3": ManualRule("approve(address,uint256)", _decode_approve),
    "0xa9059cbb": ManualRule("transfer(address,uint256)", _decode_transfer),
    "0xe318b52b": ManualRule("swapOwner(address,address,address)", _decode_swap_owner),
    "0x1e83409a": ManualRule("claim(address)", _decode_claim),
    "0x097cd232": ManualRule("injectReward(uint256,uint256)", _decode_inject_reward),
    "0x1ffacdef": ManualRule("setAllowedFrom(address,bool)", _decode_set_allowed_from),
    "0x7c918634": ManualRule("setPeer(uint16,bytes32,uint8,uint256)", _decode_set_peer),
    "0x7ab56403": ManualRule("setWormholePeer(uint16,bytes32)", _decode_set_wormhole_peer),
    "0x96dddc63": ManualRule(
        "setIsWormholeEvmChain(uint16,bool)", _chain_flag_decoder("isEvm")
    ),
    "0x657b3b2f": ManualRule(
        "setIsWormholeRelayingEnabled(uint16,bool)", _chain_flag_decoder("isEnabled")
    ),
}


def unknown_function(selector: str, data: str, error: Optional[str] = None) -> DecodedFunctionCall:
    """Terminal result for call data that could not be identified."""
    return DecodedFunctionCall(
        name=f"Unknown Function ({selector})",
        params={"rawData": data},
        error=error,
    )


class FunctionSelectorRegistry:
    """Identify and decode call data by its function selector."""

    def __init__(
        self,
        rules: Optional[Dict[str, ManualRule]] = None,
        signature_lookup: Optional[Callable[[str], List[str]]] = None,
    ):
        """Initialize with manual rules and the remote signature lookup to fall back on."""
        self.rules = dict(MANUAL_RULES if rules is None else rules)
        self._signature_lookup = signature_lookup

    def lookup_signatures(self, selector: str) -> List[str]:
        """Query the remote signature database (through the shared cache by default)."""
        lookup = self._signature_lookup or fetch_function_signatures
        return lookup(selector)

    def try_decode_function_data(self, data: str) -> Optional[DecodedFunctionCall]:
        """Decode call data into a function call.

        Returns ``None`` for empty data. Never raises for malformed or
        unknown input: failures are reported through ``error``.
        """
        normalized = normalize_hex_string(data)
        if normalized == "0x":
            return None

        raw_selector = normalized[: SELECTOR_HEX_LENGTH + 2]
        if len(normalized) < SELECTOR_HEX_LENGTH + 2:
            logger.debug(f"Call data too short for a selector: {normalized}")
            return unknown_function(raw_selector, data)

        selector = raw_selector.lower()
        rule = self.rules.get(selector)
        if rule is not None:
            return self._decode_manual(rule, normalized[SELECTOR_HEX_LENGTH + 2 :])

        return self._decode_remote(selector, raw_selector, data, normalized)

    def _decode_manual(self, rule: ManualRule, params: str) -> DecodedFunctionCall:
        try:
            decoded = rule.decode(params)
        except (DecoderError, ValueError) as e:
            logger.warning(f"Error decoding {rule.signature} parameters: {e}")
            return DecodedFunctionCall(
                name=rule.signature,
                source="manual",
                error=f"Failed to decode {rule.function_name} function parameters: {e}",
            )
        return DecodedFunctionCall(name=rule.signature, params=decoded.to_params(), source="manual")

    def _decode_remote(
        self, selector: str, raw_selector: str, data: str, normalized: str
    ) -> DecodedFunctionCall:
        try:
            candidates = self.lookup_signatures(selector)
        except Exception as e:
            logger.error(f"OpenChain selector lookup failed for {selector}: {e}")
            return unknown_function(raw_selector, data, error=f"OpenChain lookup failed: {e}")

        if not candidates:
            return unknown_function(raw_selector, data)

        for signature in candidates:
            params = decode_with_signature(signature, normalized)
            if params is not None:
                return DecodedFunctionCall(
                    name=signature,
                    params=params,
                    source="openchain",
                    candidates=list(candidates),
                )

        return DecodedFunctionCall(
            name=candidates[0],
            source="openchain",
            candidates=list(candidates),
            error="Failed to decode using OpenChain signature candidates",
        )


registry = FunctionSelectorRegistry()


def try_decode_function_data(data: str) -> Optional[DecodedFunctionCall]:
    """Decode call data with the default registry."""
    return registry.try_decode_function_data(data)
