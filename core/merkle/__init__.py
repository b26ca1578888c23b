"""
Merkle Tree and Allowlist Commitments
Sorted-pair Merkle membership proofs gating which assets may be staked.

This module provides:
- MerkleProof: Dataclass representing a membership proof
- verify: Check a leaf against a root with an ordered proof path
- build_merkle_root / build_merkle_proof: Offline tree construction
- allowlist_leaf: Domain-separated leaf for an asset identifier
- AllowlistTree / AllowlistVerifier: Campaign-level builder and gate

Commitment Rules:
1. Leaf hashing: H(domain_separator || asset_id)
2. Parent hashing: H(min(a, b) || max(a, b))
3. Odd node promoted unchanged
4. Single leaf: root = leaf

Usage:
    from core.merkle import AllowlistTree, AllowlistVerifier

    tree = AllowlistTree(asset_ids)
    proof = tree.proof_for(asset_ids[0])
    assert AllowlistVerifier(tree.root).verify_asset(asset_ids[0], proof)
"""
from .merkle_tree import (
    MerkleProof,
    merkle_parent,
    verify,
    build_merkle_layers,
    build_merkle_root,
    build_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    DEFAULT_DOMAIN_SEPARATOR,
    allowlist_leaf,
    AllowlistTree,
    AllowlistVerifier,
)


__all__ = [
    # Core types
    "MerkleProof",
    "DEFAULT_DOMAIN_SEPARATOR",
    # Core functions
    "merkle_parent",
    "verify",
    "build_merkle_layers",
    "build_merkle_root",
    "build_merkle_proof",
    "compute_tree_depth",
    "allowlist_leaf",
    # Campaign-level classes
    "AllowlistTree",
    "AllowlistVerifier",
]
