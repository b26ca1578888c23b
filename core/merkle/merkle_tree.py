"""
Merkle Tree Implementation
Sorted-pair Merkle tree construction, proof generation, and verification.

This module provides:
- Order-independent parent hashing (sort-then-concatenate)
- Membership verification of a leaf against a 256-bit root
- Deterministic root and proof construction for offline tree building

Commitment Rules (Hard Contracts):
1. Parent hashing: parent = H(min(a, b) || max(a, b))
   - a and b compared as big-endian byte strings
   - No left/right position is tracked per leaf
2. Leaves are de-duplicated and sorted before the tree is built
3. Odd node at any level is promoted to the next level unchanged
   (no sibling is emitted for it in proofs)
4. Single leaf: root = leaf, proof is empty
5. Empty leaf set has no root

The verifier and the tree builder MUST agree on rule 1. A root built with
positional concatenation rejects every proof checked here, and vice versa.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.crypto.hashing import DIGEST_SIZE, HashFunction, hash_concat, keccak256


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle membership proof for a single leaf.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        siblings: Sibling hashes from the leaf level upwards
        root: The root this proof was generated against
    """
    leaf: bytes
    siblings: tuple[bytes, ...]
    root: bytes

    def verify(self, hash_fn: HashFunction = keccak256) -> bool:
        """Verify this proof against the root it carries."""
        return verify(self.siblings, self.root, self.leaf, hash_fn)


def merkle_parent(a: bytes, b: bytes, hash_fn: HashFunction = keccak256) -> bytes:
    """
    Compute the parent hash of two child nodes.

    The smaller value (big-endian byte comparison) is always hashed first,
    so merkle_parent(a, b) == merkle_parent(b, a).

    Args:
        a: One child hash
        b: The other child hash
        hash_fn: Hash function to apply

    Returns:
        Parent hash (32 bytes)
    """
    if a <= b:
        return hash_concat(a, b, hash_fn)
    return hash_concat(b, a, hash_fn)


def verify(
    proof: Sequence[bytes],
    root: bytes,
    leaf: bytes,
    hash_fn: HashFunction = keccak256,
) -> bool:
    """
    Check whether `leaf` is a member of the set committed to by `root`.

    Algorithm:
    1. computed = leaf
    2. For each sibling in order: computed = merkle_parent(computed, sibling)
    3. Return computed == root

    Never raises. Malformed input (a proof that is not a sequence, wrong
    element size, non-bytes) verifies as False, as does an empty proof
    against a root that is not the leaf.

    Args:
        proof: Ordered sibling hashes, leaf level first
        root: 32-byte commitment
        leaf: 32-byte leaf hash
        hash_fn: Hash function the tree was built with

    Returns:
        True if the proof is valid, False otherwise
    """
    if not _is_digest(root) or not _is_digest(leaf):
        return False
    if proof is None or isinstance(proof, (bytes, bytearray, str)):
        return False
    try:
        siblings = list(proof)
    except TypeError:
        return False

    computed = leaf
    for sibling in siblings:
        if not _is_digest(sibling):
            return False
        computed = merkle_parent(computed, sibling, hash_fn)

    return computed == root


def _is_digest(value: object) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_SIZE


def _prepare_leaves(leaves: Sequence[bytes]) -> list[bytes]:
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")
    for leaf in leaves:
        if not _is_digest(leaf):
            raise ValueError(f"Leaves must be {DIGEST_SIZE}-byte hashes")
    return sorted({bytes(leaf) for leaf in leaves})


def _next_level(level: list[bytes], hash_fn: HashFunction) -> list[bytes]:
    next_level: list[bytes] = []
    for i in range(0, len(level), 2):
        if i + 1 < len(level):
            next_level.append(merkle_parent(level[i], level[i + 1], hash_fn))
        else:
            # Odd node is promoted unchanged
            next_level.append(level[i])
    return next_level


def build_merkle_layers(
    leaves: Sequence[bytes],
    hash_fn: HashFunction = keccak256,
) -> list[list[bytes]]:
    """
    Build every level of the tree, leaf level first, root level last.

    Raises:
        ValueError: If leaves is empty or contains non-32-byte values
    """
    layers = [_prepare_leaves(leaves)]
    while len(layers[-1]) > 1:
        layers.append(_next_level(layers[-1], hash_fn))
    return layers


def build_merkle_root(
    leaves: Sequence[bytes],
    hash_fn: HashFunction = keccak256,
) -> bytes:
    """
    Build a Merkle root from a set of leaf hashes.

    Leaf order and duplicates do not affect the result.

    Example:
        >>> leaves = [keccak256(b"a"), keccak256(b"b"), keccak256(b"c")]
        >>> len(build_merkle_root(leaves))
        32
    """
    return build_merkle_layers(leaves, hash_fn)[-1][0]


def build_merkle_proof(
    leaves: Sequence[bytes],
    leaf: bytes,
    hash_fn: HashFunction = keccak256,
) -> MerkleProof:
    """
    Generate the membership proof for `leaf`.

    At each level the sibling of the current node is recorded; a promoted
    odd node contributes no sibling.

    Raises:
        ValueError: If leaves is empty or leaf is not among them
    """
    layers = build_merkle_layers(leaves, hash_fn)
    target = bytes(leaf)

    try:
        index = layers[0].index(target)
    except ValueError:
        raise ValueError(f"Leaf 0x{target.hex()} is not in the tree") from None

    siblings: list[bytes] = []
    for level in layers[:-1]:
        pair_index = index ^ 1
        if pair_index < len(level):
            siblings.append(level[pair_index])
        index //= 2

    return MerkleProof(leaf=target, siblings=tuple(siblings), root=layers[-1][0])


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels from leaves to root (inclusive).

    A single leaf has depth 1, two leaves depth 2; 0 for an empty tree.
    """
    if num_leaves <= 0:
        return 0
    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "MerkleProof",
    "merkle_parent",
    "verify",
    "build_merkle_layers",
    "build_merkle_root",
    "build_merkle_proof",
    "compute_tree_depth",
]
