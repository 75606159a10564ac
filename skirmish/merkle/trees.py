"""
Game trees - the two commitment trees a turn is authenticated against.

PiecesMerkleTree: piece id -> piece hash (the roster).
ArenaMerkleTree: position key -> 1 if the cell is occupied, else 0.
"""

from __future__ import annotations

from .tree import MerkleTree, merkle_witness

# 128 pieces
PIECES_TREE_HEIGHT = 8

# 2**19 cells, enough for keys up to 650 * 800 + 550
ARENA_TREE_HEIGHT = 20

EMPTY_CELL = 0
OCCUPIED_CELL = 1

PiecesMerkleWitness = merkle_witness(PIECES_TREE_HEIGHT)
ArenaMerkleWitness = merkle_witness(ARENA_TREE_HEIGHT)


class PiecesMerkleTree(MerkleTree):
    witness_class = PiecesMerkleWitness

    def __init__(self):
        super().__init__(PIECES_TREE_HEIGHT)


class ArenaMerkleTree(MerkleTree):
    witness_class = ArenaMerkleWitness

    def __init__(self):
        super().__init__(ARENA_TREE_HEIGHT)
