"""
Hashing Utilities
Raw-byte hashing and hex helpers for allowlist commitments.

This module provides:
- Keccak-256 hashing (the hash allowlist trees are built with on-ledger)
- SHA-256 hashing as an alternative campaign hash
- Hash selection by name for campaign configuration
- Canonical hashing for journal entries (via dumps_canonical)
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- No implicit padding or truncation of inputs
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
from typing import Any, Callable

from eth_utils import keccak

from core.schemas.canonical import dumps_canonical


HashFunction = Callable[[bytes], bytes]

# Size of every digest, identifier and proof element handled by the core
DIGEST_SIZE: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    This is the pre-standard Keccak (as used by Solana and Ethereum),
    not NIST SHA3-256.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


HASH_FUNCTIONS: dict[str, HashFunction] = {
    "keccak256": keccak256,
    "sha256": sha256,
}


def get_hash_function(name: str) -> HashFunction:
    """
    Look up a hash function by its configuration name.

    Raises:
        ValueError: If the name is not a supported hash function
    """
    try:
        return HASH_FUNCTIONS[name]
    except KeyError:
        raise ValueError(
            f"Unsupported hash function '{name}'. "
            f"Supported: {sorted(HASH_FUNCTIONS)}"
        ) from None


def hashv(parts: list[bytes], hash_fn: HashFunction = keccak256) -> bytes:
    """Hash the concatenation of several byte strings."""
    return hash_fn(b"".join(parts))


def hash_concat(left: bytes, right: bytes, hash_fn: HashFunction = keccak256) -> bytes:
    """
    Hash the concatenation of two byte sequences: H(left || right).

    Args:
        left: First 32-byte value
        right: Second 32-byte value
        hash_fn: Hash function to apply

    Returns:
        32-byte digest of the concatenation
    """
    return hash_fn(left + right)


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = sha256(dumps_canonical(obj).encode("utf-8"))

    Used for content hashes of journal entries, never for allowlist leaves.

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def from_hex32(hex_string: str) -> bytes:
    """Decode a 0x-prefixed hex string that must hold exactly 32 bytes."""
    data = from_hex(hex_string)
    if len(data) != DIGEST_SIZE:
        raise ValueError(f"Expected {DIGEST_SIZE} bytes, got {len(data)}")
    return data


__all__ = [
    "DIGEST_SIZE",
    "HASH_FUNCTIONS",
    "HashFunction",
    "keccak256",
    "sha256",
    "get_hash_function",
    "hashv",
    "hash_concat",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "from_hex32",
]
