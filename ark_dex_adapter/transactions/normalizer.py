"""
Ark transaction and block normalizer — raw API payloads to canonical records.

Pure functions: given the same raw payload and co-signer key list they return
identical records. No I/O; waiting for the multisig wallet to be resolved is
the caller's job (see MultisigResolver.wait_ready).
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ark_dex_adapter.transactions.identity import compute_dex_transaction_id
from ark_dex_adapter.transactions.models import (
    CanonicalBlock,
    CanonicalTransaction,
    SignaturePacket,
)

AddressDeriver = Callable[[str], str]

# 64-byte Schnorr signature; multisig entries prepend a one-byte key index
SCHNORR_SIGNATURE_HEX_LENGTH = 128


def _unix_timestamp(value: Any) -> int:
    """Ark v2/v3 returns {epoch, unix, human}; older payloads a plain int."""
    if isinstance(value, Mapping):
        value = value.get("unix")
    if value is None:
        return 0
    return int(value)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def build_signature_packets(
    raw: Mapping[str, Any],
    co_signer_public_keys: Sequence[str],
    address_from_public_key: AddressDeriver,
) -> tuple[SignaturePacket, ...]:
    """
    Pair co-signer keys with the raw positional signatures.

    Position i of the result candidate list is co-signer i; its signature is
    ``signatures[i]`` or, failing that, the single ``signature`` field (a plain
    transfer sent by a participant who is also a co-signer). Candidates without
    a signature are dropped, order is kept.
    """
    positional = raw.get("signatures") or []
    fallback = raw.get("signature")
    packets: list[SignaturePacket] = []
    for index, public_key in enumerate(co_signer_public_keys):
        signature = positional[index] if index < len(positional) else None
        signature = signature or fallback
        if not signature:
            continue
        packets.append(
            SignaturePacket(
                signer_address=address_from_public_key(public_key),
                public_key=public_key,
                signature=signature,
            )
        )
    return tuple(packets)


def normalize_transaction(
    raw: Mapping[str, Any],
    co_signer_public_keys: Sequence[str],
    address_from_public_key: AddressDeriver,
) -> CanonicalTransaction:
    """Convert one raw Ark transaction into a CanonicalTransaction."""
    sender = _first(raw, "sender", "senderId")
    nonce = int(raw.get("nonce") or 0)
    amount = raw.get("amount")
    return CanonicalTransaction(
        id=compute_dex_transaction_id(sender, nonce),
        message=raw.get("vendorField") or "",
        amount=str(amount if amount is not None else 0),
        timestamp=_unix_timestamp(raw.get("timestamp")),
        sender_address=sender,
        recipient_address=_first(raw, "recipient", "recipientId"),
        signatures=build_signature_packets(raw, co_signer_public_keys, address_from_public_key),
        nonce=nonce,
    )


def _packet_field(packet: Any, camel: str, snake: str) -> Any:
    if isinstance(packet, Mapping):
        return _first(packet, camel, snake)
    return getattr(packet, snake, None)


def aggregate_signatures(
    packets: Sequence[Any],
    co_signer_public_keys: Sequence[str],
) -> list[str]:
    """
    Merge co-signer signature packets into Ark's positional multisig list.

    Ark expects each entry as the co-signer's index (one byte, hex) followed
    by the signature, sorted by index. Packets from keys outside the wallet are
    ignored; the first packet per key wins.
    """
    index_of = {key: i for i, key in enumerate(co_signer_public_keys)}
    by_index: dict[int, str] = {}
    for packet in packets:
        public_key = _packet_field(packet, "publicKey", "public_key")
        signature = _packet_field(packet, "signature", "signature")
        index = index_of.get(public_key)
        if index is None or not signature or index in by_index:
            continue
        if len(signature) != SCHNORR_SIGNATURE_HEX_LENGTH + 2:
            signature = f"{index:02x}{signature}"
        by_index[index] = signature
    return [by_index[i] for i in sorted(by_index)]


def map_block(raw: Mapping[str, Any]) -> CanonicalBlock:
    """Convert one raw Ark block into a CanonicalBlock."""
    count = _first(raw, "numberOfTransactions", "transactions")
    if isinstance(count, (list, tuple)):
        count = len(count)
    return CanonicalBlock(
        id=str(raw["id"]),
        height=int(raw["height"]),
        timestamp=_unix_timestamp(raw.get("timestamp")),
        number_of_transactions=int(count or 0),
    )
