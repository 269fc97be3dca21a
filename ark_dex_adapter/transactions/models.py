"""
Canonical records consumed by the DEX orchestrator.

Chain-agnostic shapes: the orchestrator never sees raw Ark payloads, only
these dataclasses serialized with to_dict() (camelCase keys).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SignaturePacket:
    """One co-signer's contribution to a (multisig) transaction."""

    signer_address: str
    public_key: str
    signature: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "signerAddress": self.signer_address,
            "publicKey": self.public_key,
            "signature": self.signature,
        }


@dataclass(frozen=True)
class CanonicalTransaction:
    """
    Normalized transaction.

    ``id`` depends only on (sender_address, nonce): two transactions from the
    same sender with the same nonce share an id whatever their payload, which
    the orchestrator uses to detect replays.
    """

    id: str
    message: str
    amount: str
    """Amount in the chain's smallest unit, as a decimal string."""
    timestamp: int
    """Unix timestamp (seconds)."""
    sender_address: str
    recipient_address: str | None
    signatures: tuple[SignaturePacket, ...] = field(default_factory=tuple)
    """Ordered like the wallet's co-signer key list."""
    nonce: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "amount": self.amount,
            "timestamp": self.timestamp,
            "senderAddress": self.sender_address,
            "recipientAddress": self.recipient_address,
            "signatures": [s.to_dict() for s in self.signatures],
            "nonce": self.nonce,
        }


@dataclass(frozen=True)
class CanonicalBlock:
    id: str
    height: int
    timestamp: int
    number_of_transactions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "height": self.height,
            "timestamp": self.timestamp,
            "numberOfTransactions": self.number_of_transactions,
        }
