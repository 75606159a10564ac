"""
Commitment Tree - Fixed-height sparse binary Merkle tree.

Maps a small integer key to a field element. Only non-empty nodes are
stored; every untouched subtree hashes to a precomputed empty value, so a
tree addressing half a million arena cells costs memory only for the
cells actually set.

Properties:
----------
- Set leaf: O(height)
- Root: O(1)
- Witness: O(height)
- Root recomputation from a witness: O(height), no access to other leaves
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar

from ..crypto.field import hash_fields, to_field

_NODE_DOMAIN = b"skirmish/merkle/node"


def hash_pair(left: int, right: int) -> int:
    """Hash two child nodes together."""
    return hash_fields([left, right], domain=_NODE_DOMAIN)


def _empty_nodes(height: int) -> list[int]:
    zeros = [0]
    for _ in range(1, height):
        zeros.append(hash_pair(zeros[-1], zeros[-1]))
    return zeros


@dataclass(frozen=True)
class MerkleWitness:
    """
    Authentication path for one leaf.

    path[i] = (is_left, sibling) at level i, leaf level first.
    is_left=True means the node on our path is the LEFT child.

    Subclasses fix the tree height; a path of the wrong length is rejected
    at construction so a witness can only ever describe its own tree shape.
    """
    path: tuple[tuple[bool, int], ...]

    height: ClassVar[int] = 0

    def __post_init__(self):
        if self.height and len(self.path) != self.height - 1:
            raise ValueError(
                f"Witness path has {len(self.path)} levels, expected {self.height - 1}"
            )

    def calculate_root(self, leaf: int) -> int:
        """Root of the tree in which this witness's key holds `leaf`."""
        node = to_field(leaf)
        for is_left, sibling in self.path:
            if is_left:
                node = hash_pair(node, sibling)
            else:
                node = hash_pair(sibling, node)
        return node

    def calculate_index(self) -> int:
        """The key this witness authenticates."""
        index = 0
        for level, (is_left, _) in enumerate(self.path):
            if not is_left:
                index |= 1 << level
        return index


def merkle_witness(height: int) -> type[MerkleWitness]:
    """Create a witness class bound to trees of the given height."""
    return type(f"MerkleWitness{height}", (MerkleWitness,), {"height": height})


class MerkleTree:
    """
    Sparse Merkle tree with `2 ** (height - 1)` leaves.

    Levels run from 0 (leaves) to height - 1 (root).
    """

    witness_class: type[MerkleWitness] = MerkleWitness

    def __init__(self, height: int):
        if height < 1:
            raise ValueError("Tree height must be at least 1")
        self.height = height
        self._zeros = _empty_nodes(height)
        self._nodes: dict[tuple[int, int], int] = {}

    @property
    def leaf_count(self) -> int:
        return 2 ** (self.height - 1)

    def validate(self, key: int) -> None:
        if not 0 <= key < self.leaf_count:
            raise ValueError(f"Key {key} out of range for tree of {self.leaf_count} leaves")

    def get_node(self, level: int, index: int) -> int:
        return self._nodes.get((level, index), self._zeros[level])

    def get_root(self) -> int:
        return self.get_node(self.height - 1, 0)

    def get_leaf(self, key: int) -> int:
        self.validate(key)
        return self.get_node(0, key)

    def set_leaf(self, key: int, value: int) -> None:
        """Set a leaf and rehash its path to the root."""
        self.validate(key)
        index = key
        node = to_field(value)
        self._store(0, index, node)
        for level in range(1, self.height):
            if index % 2 == 0:
                node = hash_pair(node, self.get_node(level - 1, index + 1))
            else:
                node = hash_pair(self.get_node(level - 1, index - 1), node)
            index //= 2
            self._store(level, index, node)

    # Mirrors the get/set naming of a plain map
    set = set_leaf

    def get_witness(self, key: int) -> MerkleWitness:
        self.validate(key)
        path = []
        index = key
        for level in range(self.height - 1):
            is_left = index % 2 == 0
            sibling = self.get_node(level, index + 1 if is_left else index - 1)
            path.append((is_left, sibling))
            index //= 2
        return self._make_witness(tuple(path))

    def _make_witness(self, path: tuple[tuple[bool, int], ...]) -> MerkleWitness:
        if self.witness_class.height == self.height:
            return self.witness_class(path)
        return merkle_witness(self.height)(path)

    def _store(self, level: int, index: int, node: int) -> None:
        if node == self._zeros[level]:
            self._nodes.pop((level, index), None)
        else:
            self._nodes[(level, index)] = node

    def clone(self) -> MerkleTree:
        """Independent copy; updates to the clone never touch this tree."""
        copy = self.__class__.__new__(self.__class__)
        copy.height = self.height
        copy._zeros = self._zeros
        copy._nodes = dict(self._nodes)
        return copy
