"""
Combat - attack resolution from an opened roll.

Every outcome is computed for every roll and the result is picked with
select(), so the sequence of operations is the same whether the attack
hits or misses.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ..crypto.field import select
from .. import settings
from .attack_roll import DecryptedAttackRoll
from .piece import Piece


class SavePolicy(Enum):
    """How a wounded target's save die is judged."""
    TARGET_SAVE_ROLL = "target_save_roll"  # saved if save die >= target's save_roll
    NO_SAVE = "no_save"  # wounds are never saved


class AttackKind(Enum):
    RANGED = "ranged"
    MELEE = "melee"


def default_save_policy(kind: AttackKind) -> SavePolicy:
    """Configured save policy for an attack kind."""
    value = settings.RANGED_SAVE_POLICY if kind == AttackKind.RANGED else settings.MELEE_SAVE_POLICY
    try:
        return SavePolicy(value)
    except ValueError as e:
        raise settings.ConfigurationError(f"Unknown save policy: {value}") from e


@dataclass(frozen=True)
class AttackOutcome:
    hit: bool
    wound: bool
    save: bool
    damage: int
    new_health: int


def resolve_attack(
    roll: DecryptedAttackRoll,
    attacker: Piece,
    target: Piece,
    damage: int,
    save_policy: SavePolicy,
) -> AttackOutcome:
    """
    Cascade hit -> wound -> save and compute the target's new health.

    hit:   hit die >= attacker's hit_roll
    wound: hit and wound die >= attacker's wound_roll
    save:  wound and the save policy accepts the save die
    """
    hit = bool(select(roll.hit >= attacker.condition.hit_roll, True, False))
    wound = bool(select(hit, roll.wound >= attacker.condition.wound_roll, False))

    save_roll = target.condition.save_roll
    saved_by_roll = save_roll > 0 and roll.save >= save_roll
    policy_save = select(save_policy == SavePolicy.TARGET_SAVE_ROLL, saved_by_roll, False)
    save = bool(select(wound, policy_save, False))

    dealt = select(wound and not save, damage, 0)
    health = target.condition.health
    new_health = select(dealt >= health, 0, health - dealt)

    return AttackOutcome(hit=hit, wound=wound, save=save, damage=dealt, new_health=new_health)
