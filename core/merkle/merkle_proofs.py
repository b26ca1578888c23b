"""
Allowlist Proofs
Domain-separated allowlist leaves on top of the sorted-pair Merkle tree.

This module provides:
- allowlist_leaf: leaf = H(domain_separator || asset_id)
- AllowlistTree: offline builder (root + per-asset proofs)
- AllowlistVerifier: membership gate used by stake/unstake

The domain separator keeps leaves of this allowlist from being valid
in any other tree that shares the same hash function.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence

from core.crypto.hashing import (
    HashFunction,
    get_hash_function,
    hashv,
    keccak256,
    to_hex,
)
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_layers,
    build_merkle_proof,
    compute_tree_depth,
    verify,
)


DEFAULT_DOMAIN_SEPARATOR: bytes = b"nft-staking-merkle-tree"


def allowlist_leaf(
    asset_id: bytes,
    domain_separator: bytes = DEFAULT_DOMAIN_SEPARATOR,
    hash_fn: HashFunction = keccak256,
) -> bytes:
    """
    Compute the allowlist leaf for an asset.

    Rule: leaf = H(domain_separator_bytes || asset_identifier_bytes)
    """
    return hashv([bytes(domain_separator), bytes(asset_id)], hash_fn)


def _resolve_hash(hash_function: str | HashFunction) -> HashFunction:
    if isinstance(hash_function, str):
        return get_hash_function(hash_function)
    return hash_function


class AllowlistTree:
    """
    Offline allowlist tree builder.

    Builds the commitment an administrator writes with
    initialize_allowlist, and the proofs holders submit with stake.

    Example:
        >>> tree = AllowlistTree([asset_a, asset_b])
        >>> proof = tree.proof_for(asset_a)
        >>> AllowlistVerifier(tree.root).verify_asset(asset_a, proof)
        True
    """

    def __init__(
        self,
        asset_ids: Iterable[bytes],
        domain_separator: bytes = DEFAULT_DOMAIN_SEPARATOR,
        hash_function: str | HashFunction = keccak256,
    ) -> None:
        self.domain_separator = bytes(domain_separator)
        self.hash_fn = _resolve_hash(hash_function)
        self.asset_ids: list[bytes] = sorted({bytes(a) for a in asset_ids})
        if not self.asset_ids:
            raise ValueError("Cannot build an allowlist tree without assets")

        self._leaves = {
            asset: allowlist_leaf(asset, self.domain_separator, self.hash_fn)
            for asset in self.asset_ids
        }
        self._layers = build_merkle_layers(list(self._leaves.values()), self.hash_fn)

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def depth(self) -> int:
        return compute_tree_depth(len(self.asset_ids))

    def __len__(self) -> int:
        return len(self.asset_ids)

    def contains(self, asset_id: bytes) -> bool:
        return bytes(asset_id) in self._leaves

    def leaf_for(self, asset_id: bytes) -> bytes:
        return allowlist_leaf(asset_id, self.domain_separator, self.hash_fn)

    def merkle_proof_for(self, asset_id: bytes) -> MerkleProof:
        """
        Full proof object for an asset.

        Raises:
            KeyError: If the asset is not in the allowlist
        """
        asset = bytes(asset_id)
        if asset not in self._leaves:
            raise KeyError(f"Asset {to_hex(asset)} is not in the allowlist")
        return build_merkle_proof(list(self._leaves.values()), self._leaves[asset], self.hash_fn)

    def proof_for(self, asset_id: bytes) -> list[bytes]:
        """Ordered sibling hashes to submit alongside the asset."""
        return list(self.merkle_proof_for(asset_id).siblings)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view: hex root plus the proof of every asset."""
        return {
            "root": to_hex(self.root),
            "hash_function": getattr(self.hash_fn, "__name__", "custom"),
            "domain_separator": self.domain_separator.decode("utf-8", errors="replace"),
            "count": len(self.asset_ids),
            "proofs": {
                to_hex(asset): [to_hex(s) for s in self.proof_for(asset)]
                for asset in self.asset_ids
            },
        }


class AllowlistVerifier:
    """
    Membership gate for a campaign's allowlist root.

    verify_asset never raises; callers turn False into InvalidProof.
    """

    def __init__(
        self,
        root: bytes,
        domain_separator: bytes = DEFAULT_DOMAIN_SEPARATOR,
        hash_function: str | HashFunction = keccak256,
    ) -> None:
        self.root = bytes(root)
        self.domain_separator = bytes(domain_separator)
        self.hash_fn = _resolve_hash(hash_function)

    def leaf_for(self, asset_id: bytes) -> bytes:
        return allowlist_leaf(asset_id, self.domain_separator, self.hash_fn)

    def verify_leaf(self, leaf: bytes, proof: Sequence[bytes]) -> bool:
        return verify(proof, self.root, leaf, self.hash_fn)

    def verify_asset(self, asset_id: bytes, proof: Sequence[bytes]) -> bool:
        """Verify that `asset_id` is allowlisted under this root."""
        return self.verify_leaf(self.leaf_for(asset_id), proof)


__all__ = [
    "DEFAULT_DOMAIN_SEPARATOR",
    "allowlist_leaf",
    "AllowlistTree",
    "AllowlistVerifier",
]
