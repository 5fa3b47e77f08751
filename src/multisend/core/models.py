"""Core models"""

from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from multisend.core.constants import DEFAULT_SAFE_VERSION, NULL_ADDRESS
from multisend.core.hexutils import normalize_hex_string


class Operation(IntEnum):
    """Safe transaction operation."""

    CALL = 0
    DELEGATE_CALL = 1


class DecodedTransaction(BaseModel):
    """One entry of a multiSend bundle, or a single top-level call."""

    model_config = ConfigDict(frozen=True)

    operation: int
    to: str
    value: str
    data: str = "0x"

    @field_validator("to")
    @classmethod
    def lowercase_address(cls, value: str) -> str:
        """Addresses are always shown lowercase."""
        return value.lower()

    @field_validator("data")
    @classmethod
    def normalize_data(cls, value: str) -> str:
        """Keep data 0x-prefixed and of even length."""
        return normalize_hex_string(value)

    @computed_field(alias="dataLength")
    @property
    def data_length(self) -> int:
        """Byte length of ``data``."""
        return (len(self.data) - 2) // 2


class DecodedFunctionCall(BaseModel):
    """Result of interpreting call data against a known or discovered signature."""

    model_config = ConfigDict(frozen=True)

    name: str
    params: Dict[str, str] = Field(default_factory=dict)
    source: Optional[Literal["manual", "openchain"]] = None
    candidates: Optional[List[str]] = None
    error: Optional[str] = None


class DecodedNode(BaseModel):
    """A decoded transaction with its function call and nested multiSend entries."""

    model_config = ConfigDict(frozen=True)

    transaction: DecodedTransaction
    function: Optional[DecodedFunctionCall] = None
    children: List["DecodedNode"] = Field(default_factory=list)


class SafeTransactionParams(BaseModel):
    """Parameters signed by Safe owners, plus the Safe version that picks the hashing variant."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    to: str
    value: str = "0"
    data: str = "0x"
    operation: int = Operation.CALL.value
    safe_tx_gas: str = "0"
    base_gas: str = "0"
    gas_price: str = "0"
    gas_token: str = NULL_ADDRESS
    refund_receiver: str = NULL_ADDRESS
    nonce: str = "0"
    version: str = DEFAULT_SAFE_VERSION
    data_decoded: Optional[Dict[str, Any]] = None
    signatures: Optional[str] = None

    @field_validator("value", "safe_tx_gas", "base_gas", "gas_price", "nonce", mode="before")
    @classmethod
    def stringify_numbers(cls, value: Any) -> str:
        """The transaction service returns numbers as strings or ints."""
        if value is None:
            return "0"
        return str(value)

    @field_validator("gas_token", "refund_receiver", mode="before")
    @classmethod
    def default_null_address(cls, value: Any) -> str:
        """Missing addresses default to the zero address."""
        return value or NULL_ADDRESS


class HashResult(BaseModel):
    """Hashes that authorize a Safe transaction."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    domain_hash: str
    message_hash: str
    safe_tx_hash: str
    encoded_message: str


class Network(BaseModel):
    """Chain metadata and the prefix used by the Safe web app."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    chain_id: int
    gnosis_prefix: str


class ParsedSafeAddress(BaseModel):
    """Safe address extracted from free-form input."""

    model_config = ConfigDict(frozen=True)

    address: str
    network: str
    chain_id: int
    tx_hash: Optional[str] = None
