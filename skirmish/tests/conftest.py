"""
Pytest fixtures for Skirmish tests.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace

import pytest

from .. import settings
from ..crypto.keys import PrivateKey
from ..engine_core.dice import DiceAuthority
from ..engine_core.phase_state import PhaseState
from ..engine_core.piece import Piece
from ..engine_core.position import Position
from ..engine_core.unit import Unit
from ..engine_core.constants import MELEE_ATTACK_RANGE
from ..merkle.trees import ArenaMerkleTree, PiecesMerkleTree, EMPTY_CELL, OCCUPIED_CELL


@dataclass
class Board:
    """Roster and arena trees built directly, without a session."""
    pieces_tree: PiecesMerkleTree = field(default_factory=PiecesMerkleTree)
    arena_tree: ArenaMerkleTree = field(default_factory=ArenaMerkleTree)
    pieces: dict[int, Piece] = field(default_factory=dict)

    def add(self, piece: Piece) -> Piece:
        self.pieces[piece.id] = piece
        self.pieces_tree.set_leaf(piece.id, piece.hash())
        self.arena_tree.set_leaf(piece.position.get_merkle_key(), OCCUPIED_CELL)
        return piece

    def state(self, player) -> PhaseState:
        return PhaseState.init(
            self.pieces_tree.get_root(),
            self.arena_tree.get_root(),
            player.to_public_key(),
        )

    def move_witnesses(self, piece: Piece, destination: Position):
        """(piece witness, old cell witness, new cell witness) for a move."""
        arena = self.arena_tree.clone()
        old_cell = piece.position.get_merkle_key()
        old_witness = arena.get_witness(old_cell)
        arena.set_leaf(old_cell, EMPTY_CELL)
        new_witness = arena.get_witness(destination.get_merkle_key())
        return self.pieces_tree.get_witness(piece.id), old_witness, new_witness

    def roots_after_move(self, piece: Piece, destination: Position) -> tuple[int, int]:
        pieces_tree = self.pieces_tree.clone()
        arena = self.arena_tree.clone()
        pieces_tree.set_leaf(piece.id, piece.with_position(destination).hash())
        arena.set_leaf(piece.position.get_merkle_key(), EMPTY_CELL)
        arena.set_leaf(destination.get_merkle_key(), OCCUPIED_CELL)
        return pieces_tree.get_root(), arena.get_root()

    def pieces_root_with(self, piece: Piece) -> int:
        pieces_tree = self.pieces_tree.clone()
        pieces_tree.set_leaf(piece.id, piece.hash())
        return pieces_tree.get_root()


@pytest.fixture
def player1() -> PrivateKey:
    return PrivateKey.random()


@pytest.fixture
def player2() -> PrivateKey:
    return PrivateKey.random()


@pytest.fixture
def server_private_key() -> PrivateKey:
    """The arbiter's key that opens attack rolls."""
    return PrivateKey.random()


@pytest.fixture
def dice_authority() -> DiceAuthority:
    return DiceAuthority()


@pytest.fixture(autouse=True)
def rng_public_key(monkeypatch, dice_authority):
    """Configure the test randomness authority as the trusted signer."""
    monkeypatch.setattr(settings, "SKIRMISH_RNG_PUBLIC_KEY", dice_authority.public_key.to_text())
    monkeypatch.setattr(settings, "RANGED_SAVE_POLICY", "target_save_roll")
    monkeypatch.setattr(settings, "MELEE_SAVE_POLICY", "target_save_roll")
    return dice_authority.public_key


@pytest.fixture
def attacking_piece(player1) -> Piece:
    # Attacker's own save must never be counted
    unit = replace(Unit.default(), save_roll=0)
    return Piece(1, player1.to_public_key(), Position.from_xy(100, 100), unit)


@pytest.fixture
def target_in_melee(player2) -> Piece:
    position = Position.from_xy(100, 100 + MELEE_ATTACK_RANGE - 5)
    return Piece(2, player2.to_public_key(), position, Unit.default())


@pytest.fixture
def target_out_of_melee(player2) -> Piece:
    position = Position.from_xy(100, 100 + MELEE_ATTACK_RANGE + 5)
    return Piece(3, player2.to_public_key(), position, Unit.default())


@pytest.fixture
def target_out_of_range(player2) -> Piece:
    return Piece(4, player2.to_public_key(), Position.from_xy(100, 350), Unit.default())


@pytest.fixture
def board(attacking_piece, target_in_melee, target_out_of_melee, target_out_of_range) -> Board:
    """Player 1's attacker at (100, 100) and three player 2 targets."""
    b = Board()
    for piece in (attacking_piece, target_in_melee, target_out_of_melee, target_out_of_range):
        b.add(piece)
    return b


@pytest.fixture
def initial_phase_state(board, player1) -> PhaseState:
    return board.state(player1)
