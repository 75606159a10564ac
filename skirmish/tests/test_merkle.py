"""
Tests for commitment trees.

Tests:
- Root computation and witnesses
- Single-leaf updates through a witness
- Key bounds and witness shapes
"""

import pytest

from ..merkle.tree import MerkleTree, merkle_witness
from ..merkle.trees import (
    ArenaMerkleTree,
    PiecesMerkleTree,
    PiecesMerkleWitness,
    ArenaMerkleWitness,
)


class TestMerkleTree:
    """Tests for the sparse tree."""

    def test_empty_roots_match(self):
        """Two empty trees of the same height commit to the same root."""
        assert PiecesMerkleTree().get_root() == PiecesMerkleTree().get_root()

    def test_set_changes_root(self):
        tree = PiecesMerkleTree()
        before = tree.get_root()
        tree.set_leaf(3, 42)
        assert tree.get_root() != before
        assert tree.get_leaf(3) == 42

    def test_setting_zero_restores_empty_root(self):
        tree = ArenaMerkleTree()
        empty = tree.get_root()
        tree.set_leaf(1000, 1)
        tree.set_leaf(1000, 0)
        assert tree.get_root() == empty

    def test_leaf_count(self):
        assert PiecesMerkleTree().leaf_count == 128
        assert ArenaMerkleTree().leaf_count == 2 ** 19

    def test_key_out_of_range(self):
        tree = PiecesMerkleTree()
        with pytest.raises(ValueError):
            tree.set_leaf(128, 1)
        with pytest.raises(ValueError):
            tree.get_witness(-1)

    def test_clone_is_independent(self):
        tree = PiecesMerkleTree()
        tree.set_leaf(1, 10)
        copy = tree.clone()
        copy.set_leaf(2, 20)
        assert tree.get_leaf(2) == 0
        assert copy.get_root() != tree.get_root()
        assert isinstance(copy, PiecesMerkleTree)

    def test_set_alias(self):
        tree = MerkleTree(4)
        tree.set(5, 9)
        assert tree.get_leaf(5) == 9


class TestWitness:
    """Tests for witnesses."""

    def test_witness_recomputes_root(self):
        tree = PiecesMerkleTree()
        tree.set_leaf(1, 11)
        tree.set_leaf(6, 66)
        witness = tree.get_witness(6)
        assert witness.calculate_root(66) == tree.get_root()
        assert witness.calculate_index() == 6

    def test_witness_class_matches_tree(self):
        assert isinstance(PiecesMerkleTree().get_witness(0), PiecesMerkleWitness)
        assert isinstance(ArenaMerkleTree().get_witness(0), ArenaMerkleWitness)

    def test_update_through_witness(self):
        """A witness plus a new leaf gives the root after setting that leaf."""
        tree = ArenaMerkleTree()
        tree.set_leaf(80100, 1)
        tree.set_leaf(80145, 1)
        witness = tree.get_witness(80100)
        predicted = witness.calculate_root(0)
        tree.set_leaf(80100, 0)
        assert predicted == tree.get_root()

    def test_wrong_value_gives_different_root(self):
        """A witness cannot claim a different value for its key under the same root."""
        tree = PiecesMerkleTree()
        tree.set_leaf(2, 5)
        witness = tree.get_witness(2)
        assert witness.calculate_root(6) != tree.get_root()

    def test_witnesses_for_different_keys_agree(self):
        tree = PiecesMerkleTree()
        tree.set_leaf(1, 100)
        tree.set_leaf(2, 200)
        root = tree.get_root()
        assert tree.get_witness(1).calculate_root(100) == root
        assert tree.get_witness(2).calculate_root(200) == root

    def test_wrong_path_length_rejected(self):
        with pytest.raises(ValueError):
            PiecesMerkleWitness(path=((True, 0),))

    def test_generic_witness_factory(self):
        witness_class = merkle_witness(3)
        witness = witness_class(path=((True, 0), (False, 0)))
        assert witness.calculate_index() == 2
