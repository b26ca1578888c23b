"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Covers:
1. Sorted-pair parent hashing
2. verify() never raises and rejects malformed input
3. Root determinism independent of leaf order and duplicates
4. Odd node promotion
5. Proof generation for every leaf
6. Tamper detection
"""
import pytest

from core.crypto.hashing import hash_concat, keccak256, sha256
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_layers,
    build_merkle_proof,
    build_merkle_root,
    compute_tree_depth,
    merkle_parent,
    verify,
)


def _leaves(n: int) -> list[bytes]:
    return [keccak256(f"leaf-{i}".encode()) for i in range(n)]


class TestMerkleParent:
    def test_commutative(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        assert merkle_parent(a, b) == merkle_parent(b, a)

    def test_smaller_value_hashed_first(self):
        low, high = b"\x00" * 32, b"\xff" * 32
        assert merkle_parent(high, low) == keccak256(low + high)

    def test_equal_children(self):
        a = keccak256(b"a")
        assert merkle_parent(a, a) == keccak256(a + a)


class TestVerify:
    def test_empty_proof_leaf_is_root(self):
        leaf = keccak256(b"only")
        assert verify([], leaf, leaf) is True

    def test_empty_proof_leaf_not_root(self):
        assert verify([], keccak256(b"root"), keccak256(b"leaf")) is False

    def test_two_leaf_tree(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        root = merkle_parent(a, b)
        assert verify([b], root, a)
        assert verify([a], root, b)

    def test_short_sibling_returns_false(self):
        leaf = keccak256(b"a")
        assert verify([b"\x01" * 31], leaf, leaf) is False

    def test_long_sibling_returns_false(self):
        leaf = keccak256(b"a")
        assert verify([b"\x01" * 33], leaf, leaf) is False

    def test_non_bytes_sibling_returns_false(self):
        leaf = keccak256(b"a")
        assert verify(["00" * 32], leaf, leaf) is False  # type: ignore[list-item]

    @pytest.mark.parametrize("proof", [None, 7, object(), b"\x01" * 32])
    def test_non_sequence_proof_returns_false(self, proof):
        leaf = keccak256(b"a")
        assert verify(proof, leaf, leaf) is False  # type: ignore[arg-type]

    def test_generator_proof_accepted(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        assert verify((s for s in [b]), merkle_parent(a, b), a) is True

    def test_malformed_root_or_leaf_returns_false(self):
        leaf = keccak256(b"a")
        assert verify([], leaf[:16], leaf) is False
        assert verify([], leaf, leaf + b"\x00") is False

    def test_positional_root_rejected(self):
        """A root built with positional concatenation does not verify."""
        a, b = sorted([keccak256(b"a"), keccak256(b"b")])
        positional_root = hash_concat(b, a)
        assert verify([a], positional_root, b) is False


class TestRootDeterminism:
    def test_same_leaves_same_root(self):
        leaves = _leaves(7)
        assert build_merkle_root(leaves) == build_merkle_root(list(leaves))

    def test_leaf_order_irrelevant(self):
        leaves = _leaves(6)
        assert build_merkle_root(leaves) == build_merkle_root(list(reversed(leaves)))

    def test_duplicates_ignored(self):
        leaves = _leaves(4)
        assert build_merkle_root(leaves + leaves[:2]) == build_merkle_root(leaves)

    def test_different_leaves_different_root(self):
        assert build_merkle_root(_leaves(4)) != build_merkle_root(_leaves(5))

    def test_hash_function_matters(self):
        leaves = _leaves(4)
        assert build_merkle_root(leaves, keccak256) != build_merkle_root(leaves, sha256)


class TestShape:
    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            build_merkle_root([])

    def test_bad_leaf_size_raises(self):
        with pytest.raises(ValueError, match="32-byte"):
            build_merkle_root([b"short"])

    def test_single_leaf_root_is_leaf(self):
        leaf = keccak256(b"single")
        assert build_merkle_root([leaf]) == leaf
        proof = build_merkle_proof([leaf], leaf)
        assert proof.siblings == ()
        assert proof.verify()

    def test_odd_node_promoted(self):
        leaves = sorted(_leaves(3))
        layers = build_merkle_layers(leaves)
        assert layers[1] == [merkle_parent(leaves[0], leaves[1]), leaves[2]]
        assert layers[2] == [merkle_parent(layers[1][0], leaves[2])]

    def test_promoted_leaf_has_short_proof(self):
        leaves = sorted(_leaves(3))
        proof = build_merkle_proof(leaves, leaves[2])
        assert len(proof.siblings) == 1
        assert proof.verify()

    @pytest.mark.parametrize("n,depth", [(0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (8, 4), (9, 5)])
    def test_compute_tree_depth(self, n, depth):
        assert compute_tree_depth(n) == depth

    def test_depth_matches_layers(self):
        for n in (1, 2, 3, 5, 8, 13):
            assert len(build_merkle_layers(_leaves(n))) == compute_tree_depth(n)


class TestProofs:
    @pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 8, 16, 33])
    def test_every_leaf_verifies(self, n):
        leaves = _leaves(n)
        root = build_merkle_root(leaves)
        for leaf in leaves:
            proof = build_merkle_proof(leaves, leaf)
            assert proof.root == root
            assert verify(proof.siblings, root, leaf)

    def test_missing_leaf_raises(self):
        with pytest.raises(ValueError, match="not in the tree"):
            build_merkle_proof(_leaves(4), keccak256(b"stranger"))

    def test_proof_is_frozen(self):
        leaves = _leaves(2)
        proof = build_merkle_proof(leaves, leaves[0])
        assert isinstance(proof, MerkleProof)
        with pytest.raises(Exception):
            proof.root = b"\x00" * 32  # type: ignore[misc]


class TestTamperDetection:
    def setup_method(self):
        self.leaves = _leaves(8)
        self.root = build_merkle_root(self.leaves)
        self.leaf = self.leaves[3]
        self.proof = list(build_merkle_proof(self.leaves, self.leaf).siblings)

    def test_flipped_leaf_bit(self):
        tampered = bytearray(self.leaf)
        tampered[0] ^= 0x01
        assert not verify(self.proof, self.root, bytes(tampered))

    def test_flipped_sibling_bit(self):
        tampered = [bytearray(s) for s in self.proof]
        tampered[1][31] ^= 0x80
        assert not verify([bytes(s) for s in tampered], self.root, self.leaf)

    def test_flipped_root_bit(self):
        tampered = bytearray(self.root)
        tampered[15] ^= 0x10
        assert not verify(self.proof, bytes(tampered), self.leaf)

    def test_reordered_siblings(self):
        assert not verify(list(reversed(self.proof)), self.root, self.leaf)

    def test_truncated_proof(self):
        assert not verify(self.proof[:-1], self.root, self.leaf)

    def test_extra_sibling(self):
        assert not verify(self.proof + [keccak256(b"x")], self.root, self.leaf)
