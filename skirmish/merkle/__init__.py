"""
Merkle - Commitment trees and witnesses.
"""

from .tree import MerkleTree, MerkleWitness, merkle_witness, hash_pair
from .trees import (
    PiecesMerkleTree,
    PiecesMerkleWitness,
    ArenaMerkleTree,
    ArenaMerkleWitness,
    PIECES_TREE_HEIGHT,
    ARENA_TREE_HEIGHT,
    EMPTY_CELL,
    OCCUPIED_CELL,
)

__all__ = [
    "MerkleTree",
    "MerkleWitness",
    "merkle_witness",
    "hash_pair",
    "PiecesMerkleTree",
    "PiecesMerkleWitness",
    "ArenaMerkleTree",
    "ArenaMerkleWitness",
    "PIECES_TREE_HEIGHT",
    "ARENA_TREE_HEIGHT",
    "EMPTY_CELL",
    "OCCUPIED_CELL",
]
