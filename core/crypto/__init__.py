"""
Core cryptographic utilities.

Provides the hash functions allowlist trees are committed with,
plus hex helpers used at the configuration and CLI boundaries.
"""
from .hashing import (
    DIGEST_SIZE,
    HASH_FUNCTIONS,
    HashFunction,
    keccak256,
    sha256,
    get_hash_function,
    hashv,
    hash_concat,
    hash_canonical,
    to_hex,
    from_hex,
    from_hex32,
)

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
