"""
Deterministic identifiers: DEX transaction ids and Ark addresses.
"""

from __future__ import annotations

import hashlib

import base58

# Native Ark transaction ids are 64 hex chars; the DEX expects 44
DEX_TRANSACTION_ID_LENGTH = 44


def compute_dex_transaction_id(sender_address: str, nonce: int | str) -> str:
    """
    Return hex(sha256(f"{sender_address}-{nonce}")) truncated to 44 chars.

    Payload fields are deliberately not hashed, so a re-signed or re-broadcast
    transaction with the same sender and nonce maps to the same id.
    """
    digest = hashlib.sha256(f"{sender_address}-{nonce}".encode("utf-8")).hexdigest()
    return digest[:DEX_TRANSACTION_ID_LENGTH]


def ripemd160(data: bytes) -> bytes:
    h = hashlib.new("ripemd160")
    h.update(data)
    return h.digest()


def address_from_public_key(public_key: str, network_version: int) -> str:
    """
    Derive an Ark address: base58check(version byte || ripemd160(pubkey)).

    public_key: compressed secp256k1 public key, hex encoded (66 chars).
    """
    try:
        key_bytes = bytes.fromhex(public_key)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid public key: {public_key!r}") from e
    payload = bytes([network_version]) + ripemd160(key_bytes)
    return base58.b58encode_check(payload).decode("ascii")
