"""
Engine Core - Authenticated turn state and the records it commits to.

The engine:
1. Commits pieces and arena cells into Merkle trees
2. Checks signed, nonce-ordered actions against the current roots
3. Resolves encrypted attack rolls with the arbiter's key
4. Produces the next PhaseState
"""

from .constants import MELEE_ATTACK_RANGE, ARENA_WIDTH, ARENA_HEIGHT, ARENA_MERKLE_ROW_WIDTH
from .position import Position
from .unit import Unit
from .piece import Piece
from .action import Action, ActionType
from .attack_roll import EncryptedAttackRoll, DecryptedAttackRoll
from .dice import DiceAuthority
from .combat import SavePolicy, AttackKind, AttackOutcome, resolve_attack
from .phase_state import PhaseState
from .errors import (
    TransitionError,
    AuthenticationFailure,
    OrderingViolation,
    RangeViolation,
    OwnershipViolation,
    ConsistencyViolation,
    DecryptionAuthenticityFailure,
)

__all__ = [
    "MELEE_ATTACK_RANGE",
    "ARENA_WIDTH",
    "ARENA_HEIGHT",
    "ARENA_MERKLE_ROW_WIDTH",
    "Position",
    "Unit",
    "Piece",
    "Action",
    "ActionType",
    "EncryptedAttackRoll",
    "DecryptedAttackRoll",
    "DiceAuthority",
    "SavePolicy",
    "AttackKind",
    "AttackOutcome",
    "resolve_attack",
    "PhaseState",
    "TransitionError",
    "AuthenticationFailure",
    "OrderingViolation",
    "RangeViolation",
    "OwnershipViolation",
    "ConsistencyViolation",
    "DecryptionAuthenticityFailure",
]
