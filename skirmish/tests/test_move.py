"""
Tests for PhaseState.apply_move_action.

Tests:
- Accepted moves and the roots they produce
- Every rejection path of a move
"""

from dataclasses import replace

import pytest

from ..engine_core.action import Action
from ..engine_core.errors import (
    AuthenticationFailure,
    ConsistencyViolation,
    OrderingViolation,
    OwnershipViolation,
    RangeViolation,
)
from ..engine_core.phase_state import PhaseState
from ..engine_core.position import Position
from ..merkle.trees import ArenaMerkleTree


def apply_move(state, board, piece, destination, distance, signer, action=None):
    action = action or Action.move(state.actions_nonce + 1, piece.id, destination)
    piece_witness, old_witness, new_witness = board.move_witnesses(piece, destination)
    return state.apply_move_action(
        action,
        action.sign(signer),
        piece,
        piece_witness,
        old_witness,
        new_witness,
        destination,
        distance,
    )


class TestInit:
    """Tests for turn start."""

    def test_current_roots_equal_starting(self, board, player1):
        state = PhaseState.init(123, 456, player1.to_public_key())
        assert state.current_pieces_root == state.starting_pieces_root == 123
        assert state.current_arena_root == state.starting_arena_root == 456
        assert state.nonce == 0
        assert state.actions_nonce == 0


class TestMoveAccepted:
    """Tests for legal moves."""

    def test_move_updates_current_roots(self, board, initial_phase_state, attacking_piece, player1):
        destination = Position.from_xy(130, 140)
        new_state = apply_move(initial_phase_state, board, attacking_piece, destination, 50, player1)

        pieces_root, arena_root = board.roots_after_move(attacking_piece, destination)
        assert new_state.current_pieces_root == pieces_root
        assert new_state.current_arena_root == arena_root
        assert new_state.actions_nonce == 1

    def test_starting_roots_unchanged(self, board, initial_phase_state, attacking_piece, player1):
        new_state = apply_move(
            initial_phase_state, board, attacking_piece, Position.from_xy(130, 140), 50, player1
        )
        assert new_state.starting_pieces_root == initial_phase_state.starting_pieces_root
        assert new_state.starting_arena_root == initial_phase_state.starting_arena_root
        assert new_state.player_public_key == initial_phase_state.player_public_key
        assert new_state.nonce == initial_phase_state.nonce

    def test_move_exactly_at_movement(self, board, initial_phase_state, attacking_piece, player1):
        """Moving the full movement stat is allowed."""
        destination = Position.from_xy(200, 100)
        new_state = apply_move(initial_phase_state, board, attacking_piece, destination, 100, player1)
        assert new_state.current_arena_root != initial_phase_state.current_arena_root

    def test_two_moves_in_sequence(self, board, initial_phase_state, attacking_piece, player1):
        first = Position.from_xy(130, 140)
        state = apply_move(initial_phase_state, board, attacking_piece, first, 50, player1)
        board.add(attacking_piece.with_position(first))
        board.arena_tree.set_leaf(attacking_piece.position.get_merkle_key(), 0)
        moved = board.pieces[attacking_piece.id]

        second = Position.from_xy(130, 180)
        state = apply_move(state, board, moved, second, 40, player1)
        assert state.actions_nonce == 2
        assert state.starting_pieces_root == initial_phase_state.starting_pieces_root


class TestMoveRejected:
    """Tests for illegal moves."""

    def test_beyond_movement(self, board, initial_phase_state, attacking_piece, player1):
        with pytest.raises(RangeViolation):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(201, 100), 101, player1
            )

    def test_asserted_distance_mismatch(self, board, initial_phase_state, attacking_piece, player1):
        with pytest.raises(RangeViolation):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(130, 140), 49, player1
            )

    def test_fractional_distance(self, board, initial_phase_state, attacking_piece, player1):
        """A move of sqrt(2) cannot be asserted as 1."""
        with pytest.raises(RangeViolation):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(101, 101), 1, player1
            )

    def test_wrong_owner(self, board, attacking_piece, player2):
        """Player 2's turn, moving player 1's piece."""
        state = board.state(player2)
        with pytest.raises(OwnershipViolation):
            apply_move(state, board, attacking_piece, Position.from_xy(130, 140), 50, player2)

    def test_signed_by_other_player(self, board, initial_phase_state, attacking_piece, player2):
        with pytest.raises(AuthenticationFailure):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(130, 140), 50, player2
            )

    def test_replayed_nonce(self, board, initial_phase_state, attacking_piece, player1):
        destination = Position.from_xy(130, 140)
        state = replace(initial_phase_state, actions_nonce=5)
        action = Action.move(5, attacking_piece.id, destination)
        with pytest.raises(OrderingViolation):
            apply_move(state, board, attacking_piece, destination, 50, player1, action=action)

    def test_lower_nonce(self, board, initial_phase_state, attacking_piece, player1):
        destination = Position.from_xy(130, 140)
        state = replace(initial_phase_state, actions_nonce=5)
        action = Action.move(3, attacking_piece.id, destination)
        with pytest.raises(OrderingViolation):
            apply_move(state, board, attacking_piece, destination, 50, player1, action=action)

    def test_action_for_other_destination(self, board, initial_phase_state, attacking_piece, player1):
        action = Action.move(1, attacking_piece.id, Position.from_xy(100, 150))
        with pytest.raises(AuthenticationFailure):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(130, 140), 50,
                player1, action=action,
            )

    def test_attack_action_used_as_move(
        self, board, initial_phase_state, attacking_piece, target_in_melee, player1
    ):
        action = Action.melee_attack(1, attacking_piece.id, target_in_melee)
        action = replace(action, action_params=Position.from_xy(130, 140).hash())
        with pytest.raises(AuthenticationFailure):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(130, 140), 50,
                player1, action=action,
            )

    def test_piece_not_in_roster(self, board, initial_phase_state, attacking_piece, player1):
        """A piece with altered stats does not hash to its roster leaf."""
        boosted = replace(attacking_piece, condition=replace(attacking_piece.condition, movement=500))
        with pytest.raises(AuthenticationFailure):
            apply_move(
                initial_phase_state, board, boosted, Position.from_xy(130, 140), 50, player1
            )

    def test_old_cell_witness_for_other_arena(
        self, board, initial_phase_state, attacking_piece, player1
    ):
        destination = Position.from_xy(130, 140)
        action = Action.move(1, attacking_piece.id, destination)
        piece_witness, _, new_witness = board.move_witnesses(attacking_piece, destination)
        foreign = ArenaMerkleTree().get_witness(attacking_piece.position.get_merkle_key())
        with pytest.raises(AuthenticationFailure):
            initial_phase_state.apply_move_action(
                action, action.sign(player1), attacking_piece, piece_witness,
                foreign, new_witness, destination, 50,
            )

    def test_new_cell_witness_from_uncleared_arena(
        self, board, initial_phase_state, attacking_piece, player1
    ):
        """The new-cell witness must describe the arena with the old cell cleared."""
        destination = Position.from_xy(130, 140)
        action = Action.move(1, attacking_piece.id, destination)
        piece_witness, old_witness, _ = board.move_witnesses(attacking_piece, destination)
        stale = board.arena_tree.get_witness(destination.get_merkle_key())
        with pytest.raises(ConsistencyViolation):
            initial_phase_state.apply_move_action(
                action, action.sign(player1), attacking_piece, piece_witness,
                old_witness, stale, destination, 50,
            )

    def test_new_cell_witness_from_unrelated_arena(
        self, board, initial_phase_state, attacking_piece, player1
    ):
        destination = Position.from_xy(130, 140)
        action = Action.move(1, attacking_piece.id, destination)
        piece_witness, old_witness, _ = board.move_witnesses(attacking_piece, destination)
        unrelated = ArenaMerkleTree().get_witness(destination.get_merkle_key())
        with pytest.raises(ConsistencyViolation):
            initial_phase_state.apply_move_action(
                action, action.sign(player1), attacking_piece, piece_witness,
                old_witness, unrelated, destination, 50,
            )

    def test_onto_occupied_cell(
        self, board, initial_phase_state, attacking_piece, target_in_melee, player1
    ):
        destination = target_in_melee.position
        with pytest.raises(ConsistencyViolation):
            apply_move(initial_phase_state, board, attacking_piece, destination, 45, player1)

    def test_new_cell_witness_for_other_cell(
        self, board, initial_phase_state, attacking_piece, player1
    ):
        destination = Position.from_xy(130, 140)
        action = Action.move(1, attacking_piece.id, destination)
        piece_witness, old_witness, _ = board.move_witnesses(attacking_piece, destination)
        arena = board.arena_tree.clone()
        arena.set_leaf(attacking_piece.position.get_merkle_key(), 0)
        elsewhere = arena.get_witness(Position.from_xy(140, 130).get_merkle_key())
        with pytest.raises(AuthenticationFailure):
            initial_phase_state.apply_move_action(
                action, action.sign(player1), attacking_piece, piece_witness,
                old_witness, elsewhere, destination, 50,
            )

    def test_rejection_leaves_state_untouched(
        self, board, initial_phase_state, attacking_piece, player1
    ):
        snapshot = initial_phase_state.to_json()
        with pytest.raises(RangeViolation):
            apply_move(
                initial_phase_state, board, attacking_piece, Position.from_xy(201, 100), 101, player1
            )
        assert initial_phase_state.to_json() == snapshot
