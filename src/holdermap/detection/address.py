"""Contract address extraction and chain hinting for free-form input."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from holdermap.core.addresses import ContractAddress
from holdermap.core.types import AddressKind, Chain


@dataclass
class DetectionResult:
    """Result of address detection."""

    kind: AddressKind
    confidence: float  # 0.0 to 1.0
    address: ContractAddress | None = None

    @property
    def chain_hint(self) -> Chain | None:
        """The chain implied by the address encoding alone.

        Returns:
            Chain.SOLANA for base58 addresses
            None for EVM addresses (the network has to be probed)
        """
        match self.kind:
            case AddressKind.SOLANA:
                return Chain.SOLANA
            case _:
                return None

    @property
    def needs_probe(self) -> bool:
        return self.kind == AddressKind.EVM

    def __repr__(self) -> str:
        value = self.address.value if self.address else None
        return (
            f"DetectionResult(kind={self.kind.value}, "
            f"confidence={self.confidence:.2f}, address={value!r})"
        )


class AddressDetector:
    """Finds contract addresses inside messages."""

    # Unanchored, so addresses surrounded by other text are found
    EVM_SEARCH_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"0x[a-fA-F0-9]{40}")
    SOLANA_SEARCH_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"[1-9A-HJ-NP-Za-km-z]{32,44}"
    )

    def extract(self, text: str) -> str | None:
        """Return the first contract address in `text`, EVM preferred."""
        if not text or not isinstance(text, str):
            return None

        if match := self.EVM_SEARCH_PATTERN.search(text):
            return match.group()

        for match in self.SOLANA_SEARCH_PATTERN.finditer(text):
            candidate = match.group()
            if not candidate.startswith("0x"):
                return candidate

        return None

    def detect(self, text: str) -> DetectionResult:
        """Detect the address kind in a message.

        An exact address scores 1.0; an address found inside other text
        scores lower since it may be a false positive (e.g. a long word in
        base58 alphabet).
        """
        text = (text or "").strip()
        if not text:
            return DetectionResult(kind=AddressKind.UNKNOWN, confidence=0.0)

        candidate = self.extract(text)
        if candidate is None:
            return DetectionResult(kind=AddressKind.UNKNOWN, confidence=0.0)

        try:
            address = ContractAddress.parse(candidate)
        except ValueError:
            return DetectionResult(kind=AddressKind.UNKNOWN, confidence=0.0)

        confidence = 1.0 if candidate == text else 0.8
        if address.kind == AddressKind.SOLANA and candidate != text:
            confidence = 0.6

        return DetectionResult(kind=address.kind, confidence=confidence, address=address)
