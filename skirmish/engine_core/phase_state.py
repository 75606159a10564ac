"""
Phase State - the authenticated state of one player's turn.

The state holds two pairs of commitment roots:
- starting_*: the roster and arena at the start of the turn (never change)
- current_*: the roster and arena after the actions applied so far

Each apply_* method checks one signed action against the current roots
and returns the next state. Any failed check raises a TransitionError;
the current state is immutable, so a rejected action leaves nothing
behind.
"""

from __future__ import annotations
from dataclasses import dataclass, replace

from ..crypto.field import hash_fields, require_field
from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.signature import Signature
from ..merkle.trees import (
    ArenaMerkleWitness,
    PiecesMerkleWitness,
    EMPTY_CELL,
    OCCUPIED_CELL,
)
from ..merkle.tree import MerkleWitness
from ..schemas import PhaseStateSchema
from .action import Action, ActionType
from .attack_roll import EncryptedAttackRoll
from .combat import AttackKind, SavePolicy, default_save_policy, resolve_attack
from .errors import (
    AuthenticationFailure,
    ConsistencyViolation,
    OrderingViolation,
    OwnershipViolation,
    RangeViolation,
)
from .piece import Piece
from .position import Position

_DOMAIN = b"skirmish/phase-state"


@dataclass(frozen=True)
class PhaseState:
    nonce: int
    actions_nonce: int
    starting_pieces_root: int
    current_pieces_root: int
    starting_arena_root: int
    current_arena_root: int
    player_public_key: PublicKey

    def __post_init__(self):
        for name in (
            "nonce",
            "actions_nonce",
            "starting_pieces_root",
            "current_pieces_root",
            "starting_arena_root",
            "current_arena_root",
        ):
            require_field(getattr(self, name), name)

    @classmethod
    def init(
        cls,
        starting_pieces_root: int,
        starting_arena_root: int,
        player_public_key: PublicKey,
        nonce: int = 0,
    ) -> PhaseState:
        """State at the start of a turn: current roots equal starting roots."""
        return cls(
            nonce=nonce,
            actions_nonce=0,
            starting_pieces_root=starting_pieces_root,
            current_pieces_root=starting_pieces_root,
            starting_arena_root=starting_arena_root,
            current_arena_root=starting_arena_root,
            player_public_key=player_public_key,
        )

    # =========================================================================
    # Move
    # =========================================================================

    def apply_move_action(
        self,
        action: Action,
        action_signature: Signature,
        piece: Piece,
        piece_witness: PiecesMerkleWitness,
        old_position_arena_witness: ArenaMerkleWitness,
        new_position_arena_witness: ArenaMerkleWitness,
        new_position: Position,
        asserted_move_distance: int,
    ) -> PhaseState:
        """
        Move one piece to an empty cell.

        The new-position witness must be taken from the arena with the old
        cell already cleared. Its root with the new cell empty has to equal
        the old witness's root with the old cell empty: both witnesses then
        describe the same arena outside the two touched cells.
        """
        self._assert_owner(piece)
        if not piece.position.verify_distance(new_position, asserted_move_distance):
            raise RangeViolation("Asserted move distance does not match the positions")
        if asserted_move_distance > piece.condition.movement:
            raise RangeViolation(
                f"Move of {asserted_move_distance} exceeds movement {piece.condition.movement}"
            )
        self._assert_signed(action, action_signature)
        self._assert_ordered(action)
        self._assert_bound(action, ActionType.MOVE, new_position.hash(), piece)
        self._assert_piece_witness(piece_witness, piece, "piece")

        _require_witness(old_position_arena_witness, ArenaMerkleWitness, "old position")
        _require_witness(new_position_arena_witness, ArenaMerkleWitness, "new position")

        # Old position is occupied in the current arena
        if old_position_arena_witness.calculate_root(OCCUPIED_CELL) != self.current_arena_root:
            raise AuthenticationFailure("Old position witness does not match the arena root")
        if old_position_arena_witness.calculate_index() != piece.position.get_merkle_key():
            raise AuthenticationFailure("Old position witness is for a different cell")

        # New position is empty once the old cell is cleared
        mid_root = new_position_arena_witness.calculate_root(EMPTY_CELL)
        if mid_root != old_position_arena_witness.calculate_root(EMPTY_CELL):
            raise ConsistencyViolation(
                "New position witness does not describe the arena with the old cell cleared"
            )
        if new_position_arena_witness.calculate_index() != new_position.get_merkle_key():
            raise AuthenticationFailure("New position witness is for a different cell")

        new_arena_root = new_position_arena_witness.calculate_root(OCCUPIED_CELL)
        new_pieces_root = piece_witness.calculate_root(piece.with_position(new_position).hash())

        return replace(
            self,
            actions_nonce=action.nonce,
            current_pieces_root=new_pieces_root,
            current_arena_root=new_arena_root,
        )

    # =========================================================================
    # Attacks
    # =========================================================================

    def apply_ranged_attack_action(
        self,
        action: Action,
        action_signature: Signature,
        attacking_piece: Piece,
        target_piece: Piece,
        attacking_piece_witness: PiecesMerkleWitness,
        target_piece_witness: PiecesMerkleWitness,
        asserted_attack_distance: int,
        attack_roll: EncryptedAttackRoll,
        server_secret_key: PrivateKey,
        *,
        rng_public_key: PublicKey | None = None,
        save_policy: SavePolicy | None = None,
    ) -> PhaseState:
        return self._apply_attack(
            AttackKind.RANGED,
            action,
            action_signature,
            attacking_piece,
            target_piece,
            attacking_piece_witness,
            target_piece_witness,
            asserted_attack_distance,
            attack_roll,
            server_secret_key,
            rng_public_key,
            save_policy,
        )

    def apply_melee_attack_action(
        self,
        action: Action,
        action_signature: Signature,
        attacking_piece: Piece,
        target_piece: Piece,
        attacking_piece_witness: PiecesMerkleWitness,
        target_piece_witness: PiecesMerkleWitness,
        asserted_attack_distance: int,
        attack_roll: EncryptedAttackRoll,
        server_secret_key: PrivateKey,
        *,
        rng_public_key: PublicKey | None = None,
        save_policy: SavePolicy | None = None,
    ) -> PhaseState:
        return self._apply_attack(
            AttackKind.MELEE,
            action,
            action_signature,
            attacking_piece,
            target_piece,
            attacking_piece_witness,
            target_piece_witness,
            asserted_attack_distance,
            attack_roll,
            server_secret_key,
            rng_public_key,
            save_policy,
        )

    def _apply_attack(
        self,
        kind: AttackKind,
        action: Action,
        action_signature: Signature,
        attacking_piece: Piece,
        target_piece: Piece,
        attacking_piece_witness: PiecesMerkleWitness,
        target_piece_witness: PiecesMerkleWitness,
        asserted_attack_distance: int,
        attack_roll: EncryptedAttackRoll,
        server_secret_key: PrivateKey,
        rng_public_key: PublicKey | None,
        save_policy: SavePolicy | None,
    ) -> PhaseState:
        stats = attacking_piece.condition
        if kind == AttackKind.RANGED:
            action_type, attack_range, damage = (
                ActionType.RANGED_ATTACK, stats.ranged_attack_range, stats.ranged_damage
            )
        else:
            action_type, attack_range, damage = (
                ActionType.MELEE_ATTACK, stats.melee_attack_range, stats.melee_damage
            )

        self._assert_owner(attacking_piece)
        if not attacking_piece.position.verify_distance(
            target_piece.position, asserted_attack_distance
        ):
            raise RangeViolation("Asserted attack distance does not match the positions")
        if asserted_attack_distance > attack_range:
            raise RangeViolation(
                f"{kind.value.capitalize()} attack at {asserted_attack_distance} "
                f"exceeds range {attack_range}"
            )
        self._assert_signed(action, action_signature)
        self._assert_ordered(action)
        self._assert_bound(action, action_type, target_piece.hash(), attacking_piece)

        # Both pieces are in the same roster
        self._assert_piece_witness(attacking_piece_witness, attacking_piece, "attacking piece")
        self._assert_piece_witness(target_piece_witness, target_piece, "target piece")
        if attacking_piece.id == target_piece.id:
            raise ConsistencyViolation("A piece cannot attack itself")

        roll = attack_roll.decrypt_roll(server_secret_key, rng_public_key)
        outcome = resolve_attack(
            roll,
            attacking_piece,
            target_piece,
            damage,
            save_policy or default_save_policy(kind),
        )

        new_target = target_piece.with_health(outcome.new_health)
        new_pieces_root = target_piece_witness.calculate_root(new_target.hash())

        return replace(
            self,
            actions_nonce=action.nonce,
            current_pieces_root=new_pieces_root,
        )

    # =========================================================================
    # Checks
    # =========================================================================

    def _assert_owner(self, piece: Piece) -> None:
        if piece.player_public_key != self.player_public_key:
            raise OwnershipViolation(f"Piece {piece.id} does not belong to the active player")

    def _assert_signed(self, action: Action, signature: Signature) -> None:
        if not signature.verify(self.player_public_key, action.signature_arguments()):
            raise AuthenticationFailure("Action signature does not verify for the active player")

    def _assert_ordered(self, action: Action) -> None:
        if action.nonce <= self.actions_nonce:
            raise OrderingViolation(
                f"Action nonce {action.nonce} is not greater than {self.actions_nonce}"
            )

    def _assert_bound(
        self, action: Action, action_type: ActionType, params: int, piece: Piece
    ) -> None:
        if action.action_type != action_type:
            raise AuthenticationFailure(
                f"Action type {action.action_type} is not {action_type.name}"
            )
        if action.action_params != params:
            raise AuthenticationFailure("Action parameters do not commit to this target")
        if action.piece_id != piece.id:
            raise AuthenticationFailure(f"Action is for piece {action.piece_id}, not {piece.id}")

    def _assert_piece_witness(self, witness: PiecesMerkleWitness, piece: Piece, label: str) -> None:
        _require_witness(witness, PiecesMerkleWitness, label)
        if witness.calculate_root(piece.hash()) != self.current_pieces_root:
            raise AuthenticationFailure(f"The {label} witness does not match the pieces root")
        if witness.calculate_index() != piece.id:
            raise AuthenticationFailure(f"The {label} witness is for a different piece id")

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_fields(self) -> list[int]:
        return [
            self.nonce,
            self.actions_nonce,
            self.starting_pieces_root,
            self.current_pieces_root,
            self.starting_arena_root,
            self.current_arena_root,
            *self.player_public_key.to_fields(),
        ]

    def hash(self) -> int:
        return hash_fields(self.to_fields(), domain=_DOMAIN)

    def to_schema(self) -> PhaseStateSchema:
        return PhaseStateSchema(
            nonce=self.nonce,
            actions_nonce=self.actions_nonce,
            starting_pieces_root=str(self.starting_pieces_root),
            current_pieces_root=str(self.current_pieces_root),
            starting_arena_root=str(self.starting_arena_root),
            current_arena_root=str(self.current_arena_root),
            player_public_key=self.player_public_key.to_text(),
        )

    @classmethod
    def from_schema(cls, schema: PhaseStateSchema) -> PhaseState:
        return cls(
            nonce=schema.nonce,
            actions_nonce=schema.actions_nonce,
            starting_pieces_root=int(schema.starting_pieces_root),
            current_pieces_root=int(schema.current_pieces_root),
            starting_arena_root=int(schema.starting_arena_root),
            current_arena_root=int(schema.current_arena_root),
            player_public_key=PublicKey.from_text(schema.player_public_key),
        )

    def to_json(self) -> dict:
        return self.to_schema().model_dump()

    @classmethod
    def from_json(cls, data: dict) -> PhaseState:
        return cls.from_schema(PhaseStateSchema.model_validate(data))


def _require_witness(witness: MerkleWitness, expected: type[MerkleWitness], label: str) -> None:
    if not isinstance(witness, MerkleWitness) or witness.height != expected.height:
        raise AuthenticationFailure(f"The {label} witness is not for a tree of height {expected.height}")
