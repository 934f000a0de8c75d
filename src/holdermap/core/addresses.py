"""Contract address value object with validation and classification."""

from __future__ import annotations

import re
from typing import ClassVar, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from .types import AddressKind

EVM_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
# Base58 alphabet, no 0/O/I/l
SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_evm_address(value: str) -> bool:
    return bool(value) and EVM_ADDRESS_PATTERN.match(value) is not None


def is_solana_address(value: str) -> bool:
    return (
        bool(value)
        and not value.startswith("0x")
        and SOLANA_ADDRESS_PATTERN.match(value) is not None
    )


def is_valid_contract_address(value: str) -> bool:
    """Check whether a string is an EVM or Solana contract address."""
    if not value or not isinstance(value, str):
        return False
    return is_evm_address(value) or is_solana_address(value)


def classify_address(value: str) -> AddressKind:
    if is_evm_address(value):
        return AddressKind.EVM
    if is_solana_address(value):
        return AddressKind.SOLANA
    return AddressKind.UNKNOWN


class ContractAddress(BaseModel):
    """Normalized contract address (EVM hex or Solana base58)."""

    value: str = Field(..., description="Address as supplied, whitespace stripped")
    kind: AddressKind = AddressKind.UNKNOWN

    EVM_PATTERN: ClassVar[re.Pattern[str]] = EVM_ADDRESS_PATTERN
    SOLANA_PATTERN: ClassVar[re.Pattern[str]] = SOLANA_ADDRESS_PATTERN

    @field_validator("value", mode="before")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return str(v).strip()

    @model_validator(mode="after")
    def validate_address(self) -> Self:
        kind = classify_address(self.value)
        if kind == AddressKind.UNKNOWN:
            raise ValueError(f"Invalid contract address: {self.value!r}")
        self.kind = kind
        return self

    @classmethod
    def parse(cls, value: str) -> ContractAddress:
        return cls(value=value)

    @property
    def is_evm(self) -> bool:
        return self.kind == AddressKind.EVM

    @property
    def normalized(self) -> str:
        """Lower-cased for EVM (case-insensitive hex), unchanged for base58."""
        return self.value.lower() if self.is_evm else self.value

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.normalized)
