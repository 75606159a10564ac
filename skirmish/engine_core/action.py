"""
Action System - signed, nonce-ordered player commands.

An action names the acting piece and commits to its effect target:
- MOVE: action_params = hash of the destination position
- RANGED_ATTACK / MELEE_ATTACK: action_params = hash of the target piece

The player signs signature_arguments(); the state machine re-derives the
same fields, so a signature cannot be reused for a different target,
piece, kind or position in the turn's order.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum

from ..crypto.field import require_field
from ..crypto.keys import PrivateKey
from ..crypto.signature import Signature
from .position import Position
from .piece import Piece


class ActionType(IntEnum):
    """Kinds of actions a player can take during a turn."""
    MOVE = 0
    RANGED_ATTACK = 1
    MELEE_ATTACK = 2


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the turn state.

    nonce must be strictly greater than the turn's last applied nonce.
    Every field is a canonical field element, below MODULUS.
    """
    nonce: int
    action_type: int
    action_params: int
    piece_id: int

    def __post_init__(self):
        for name in ("nonce", "action_type", "action_params", "piece_id"):
            require_field(int(getattr(self, name)), name)

    def signature_arguments(self) -> list[int]:
        return [self.nonce, int(self.action_type), self.action_params, self.piece_id]

    def sign(self, private_key: PrivateKey) -> Signature:
        return Signature.create(private_key, self.signature_arguments())

    @classmethod
    def move(cls, nonce: int, piece_id: int, destination: Position) -> Action:
        """Factory for move action."""
        return cls(
            nonce=nonce,
            action_type=ActionType.MOVE,
            action_params=destination.hash(),
            piece_id=piece_id,
        )

    @classmethod
    def ranged_attack(cls, nonce: int, piece_id: int, target: Piece) -> Action:
        """Factory for ranged attack action."""
        return cls(
            nonce=nonce,
            action_type=ActionType.RANGED_ATTACK,
            action_params=target.hash(),
            piece_id=piece_id,
        )

    @classmethod
    def melee_attack(cls, nonce: int, piece_id: int, target: Piece) -> Action:
        """Factory for melee attack action."""
        return cls(
            nonce=nonce,
            action_type=ActionType.MELEE_ATTACK,
            action_params=target.hash(),
            piece_id=piece_id,
        )
