"""
Turn Session - the client side of a turn.

The session holds everything the proofs are built from:
- piece records keyed by id, and the roster tree over their hashes
- the arena tree of occupied cells
- the current PhaseState and the proof of it

For each action it assigns the next nonce, signs, collects witnesses,
computes the exact asserted distance, runs the transition and extends
the proof. Local trees change only after the transition and its proof
both succeed.

Usage:
    session = TurnSession()
    session.place_piece(piece)
    session.start_turn(player_public_key)

    result = session.move(piece.id, Position.from_xy(120, 100), player_private_key)
    if not result.success:
        print(result.error_code, result.error)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math

from ..crypto.keys import PrivateKey, PublicKey
from ..engine_core.action import Action
from ..engine_core.attack_roll import EncryptedAttackRoll
from ..engine_core.combat import AttackKind, SavePolicy, default_save_policy, resolve_attack
from ..engine_core.errors import TransitionError
from ..engine_core.phase_state import PhaseState
from ..engine_core.piece import Piece
from ..engine_core.position import Position
from ..merkle.trees import ArenaMerkleTree, PiecesMerkleTree, EMPTY_CELL, OCCUPIED_CELL
from ..proof.phase_proof import PhaseProgram, PhaseProof
from ..schemas import TransitionResultSchema

logger = logging.getLogger(__name__)


def exact_distance(a: Position, b: Position) -> int:
    """
    Integer distance between two cells.

    When the true distance is not a whole number this returns its floor,
    which the state machine's distance check then rejects.
    """
    return math.isqrt(a.squared_distance(b))


@dataclass
class TransitionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - New state and proof (if accepted)
    - Error and error code (if rejected)
    """
    success: bool
    new_state: PhaseState | None = None
    proof: PhaseProof | None = None
    error: str | None = None
    error_code: str | None = None
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> TransitionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: PhaseState,
        proof: PhaseProof,
        changes: list[str] | None = None,
    ) -> TransitionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, proof=proof, changes=changes or [])

    def to_schema(self) -> TransitionResultSchema:
        return TransitionResultSchema(
            success=self.success,
            state=self.new_state.to_schema() if self.new_state else None,
            proof=self.proof.to_schema() if self.proof else None,
            error=self.error,
            error_code=self.error_code,
            changes=self.changes,
        )


class TurnSession:
    """Single-owner driver of a chain of turns over one roster and arena."""

    def __init__(self, program: PhaseProgram | None = None):
        self.program = program or PhaseProgram()
        self.pieces: dict[int, Piece] = {}
        self.pieces_tree = PiecesMerkleTree()
        self.arena_tree = ArenaMerkleTree()
        self.state: PhaseState | None = None
        self.proof: PhaseProof | None = None
        self.action_history: list[Action] = []

    # =========================================================================
    # Setup and turn boundaries
    # =========================================================================

    def place_piece(self, piece: Piece) -> None:
        """Add a piece to the roster and the arena before play starts."""
        if self.state is not None:
            raise RuntimeError("Pieces can only be placed before the first turn")
        if piece.id in self.pieces:
            raise ValueError(f"Piece id {piece.id} already placed")
        cell = piece.position.get_merkle_key()
        if self.arena_tree.get_leaf(cell) == OCCUPIED_CELL:
            raise ValueError(f"Cell ({piece.position.x}, {piece.position.y}) is occupied")
        self.pieces_tree.set_leaf(piece.id, piece.hash())
        self.arena_tree.set_leaf(cell, OCCUPIED_CELL)
        self.pieces[piece.id] = piece

    def start_turn(self, player_public_key: PublicKey, nonce: int = 0) -> PhaseState:
        """Begin a turn from the current tree roots and anchor a new proof chain."""
        state = PhaseState.init(
            self.pieces_tree.get_root(),
            self.arena_tree.get_root(),
            player_public_key,
            nonce=nonce,
        )
        self.proof = self.program.init(state, state)
        self.state = state
        self.action_history = []
        logger.info("Turn %d started for %s", nonce, player_public_key.to_text())
        return state

    def end_turn(self, next_player_public_key: PublicKey) -> PhaseState:
        """Close the current turn; the next starts from its final roots."""
        if self.state is None:
            raise RuntimeError("No turn in progress")
        return self.start_turn(next_player_public_key, nonce=self.state.nonce + 1)

    @property
    def next_action_nonce(self) -> int:
        if self.state is None:
            raise RuntimeError("No turn in progress")
        return self.state.actions_nonce + 1

    # =========================================================================
    # Actions
    # =========================================================================

    def move(
        self,
        piece_id: int,
        destination: Position,
        player_private_key: PrivateKey,
        nonce: int | None = None,
    ) -> TransitionResult:
        """Move a piece; nonce defaults to the next one in order."""
        piece = self.pieces.get(piece_id)
        if piece is None:
            return TransitionResult.failure(f"Piece {piece_id} not found", error_code="PIECE_NOT_FOUND")

        action = Action.move(self._nonce(nonce), piece_id, destination)
        signature = action.sign(player_private_key)

        piece_witness = self.pieces_tree.get_witness(piece.id)
        arena = self.arena_tree.clone()
        old_cell = piece.position.get_merkle_key()
        new_cell = destination.get_merkle_key()
        old_witness = arena.get_witness(old_cell)
        arena.set_leaf(old_cell, EMPTY_CELL)
        new_witness = arena.get_witness(new_cell)
        arena.set_leaf(new_cell, OCCUPIED_CELL)
        distance = exact_distance(piece.position, destination)

        try:
            new_state = self.state.apply_move_action(
                action, signature, piece, piece_witness,
                old_witness, new_witness, destination, distance,
            )
            proof = self.program.apply_move(
                new_state, self.proof, action, signature, piece, piece_witness,
                old_witness, new_witness, destination, distance,
            )
        except TransitionError as e:
            return self._rejected(action, e)

        moved = piece.with_position(destination)
        self.pieces[piece.id] = moved
        self.pieces_tree.set_leaf(piece.id, moved.hash())
        self.arena_tree = arena
        return self._accepted(
            action, new_state, proof,
            f"Piece {piece.id} moved from ({piece.position.x}, {piece.position.y}) "
            f"to ({destination.x}, {destination.y})",
        )

    def ranged_attack(
        self,
        attacker_id: int,
        target_id: int,
        attack_roll: EncryptedAttackRoll,
        player_private_key: PrivateKey,
        server_secret_key: PrivateKey,
        *,
        rng_public_key: PublicKey | None = None,
        save_policy: SavePolicy | None = None,
        nonce: int | None = None,
    ) -> TransitionResult:
        return self._attack(
            AttackKind.RANGED, attacker_id, target_id, attack_roll,
            player_private_key, server_secret_key, rng_public_key, save_policy, nonce,
        )

    def melee_attack(
        self,
        attacker_id: int,
        target_id: int,
        attack_roll: EncryptedAttackRoll,
        player_private_key: PrivateKey,
        server_secret_key: PrivateKey,
        *,
        rng_public_key: PublicKey | None = None,
        save_policy: SavePolicy | None = None,
        nonce: int | None = None,
    ) -> TransitionResult:
        return self._attack(
            AttackKind.MELEE, attacker_id, target_id, attack_roll,
            player_private_key, server_secret_key, rng_public_key, save_policy, nonce,
        )

    def _attack(
        self,
        kind: AttackKind,
        attacker_id: int,
        target_id: int,
        attack_roll: EncryptedAttackRoll,
        player_private_key: PrivateKey,
        server_secret_key: PrivateKey,
        rng_public_key: PublicKey | None,
        save_policy: SavePolicy | None,
        nonce: int | None,
    ) -> TransitionResult:
        attacker = self.pieces.get(attacker_id)
        target = self.pieces.get(target_id)
        if attacker is None or target is None:
            missing = attacker_id if attacker is None else target_id
            return TransitionResult.failure(f"Piece {missing} not found", error_code="PIECE_NOT_FOUND")

        policy = save_policy or default_save_policy(kind)
        if kind == AttackKind.RANGED:
            action = Action.ranged_attack(self._nonce(nonce), attacker.id, target)
            apply_state = self.state.apply_ranged_attack_action
            apply_proof = self.program.apply_ranged_attack
            damage = attacker.condition.ranged_damage
        else:
            action = Action.melee_attack(self._nonce(nonce), attacker.id, target)
            apply_state = self.state.apply_melee_attack_action
            apply_proof = self.program.apply_melee_attack
            damage = attacker.condition.melee_damage
        signature = action.sign(player_private_key)

        attacker_witness = self.pieces_tree.get_witness(attacker.id)
        target_witness = self.pieces_tree.get_witness(target.id)
        distance = exact_distance(attacker.position, target.position)
        args = (
            action, signature, attacker, target, attacker_witness, target_witness,
            distance, attack_roll, server_secret_key,
        )
        options = {"rng_public_key": rng_public_key, "save_policy": policy}

        try:
            new_state = apply_state(*args, **options)
            proof = apply_proof(new_state, self.proof, *args, **options)
            # The session plays the arbiter here, so it can open the roll to update its own roster
            roll = attack_roll.decrypt_roll(server_secret_key, rng_public_key)
        except TransitionError as e:
            return self._rejected(action, e)

        outcome = resolve_attack(roll, attacker, target, damage, policy)
        wounded = target.with_health(outcome.new_health)
        self.pieces[target.id] = wounded
        self.pieces_tree.set_leaf(target.id, wounded.hash())
        return self._accepted(
            action, new_state, proof,
            f"Piece {attacker.id} {kind.value} attacked piece {target.id}: "
            f"health {target.condition.health} -> {outcome.new_health}",
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _nonce(self, nonce: int | None) -> int:
        return self.next_action_nonce if nonce is None else nonce

    def _accepted(
        self, action: Action, state: PhaseState, proof: PhaseProof, change: str
    ) -> TransitionResult:
        self.state = state
        self.proof = proof
        self.action_history.append(action)
        logger.info("Accepted action %d: %s", action.nonce, change)
        return TransitionResult.success_with_state(state, proof, changes=[change])

    def _rejected(self, action: Action, error: TransitionError) -> TransitionResult:
        logger.warning("Rejected action %d (%s): %s", action.nonce, error.error_code, error.message)
        return TransitionResult.failure(error.message, error_code=error.error_code)
