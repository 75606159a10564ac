"""
Unit - combat stats of a piece.

Stat tables live outside the engine; Unit.default() is the single record
the default scenario needs.
"""

from __future__ import annotations
from dataclasses import dataclass, fields, replace

from ..schemas import UnitSchema
from .constants import MELEE_ATTACK_RANGE, DIE_FACES


@dataclass(frozen=True)
class Unit:
    """
    Stats committed into a piece's hash.

    Roll thresholds are die faces: a roll succeeds when it is >= the
    threshold. save_roll == 0 means the unit has no save.
    """
    health: int
    movement: int
    ranged_attack_range: int
    melee_attack_range: int
    hit_roll: int
    wound_roll: int
    save_roll: int
    ranged_damage: int
    melee_damage: int

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be >= 0")
        for name in ("hit_roll", "wound_roll", "save_roll"):
            if getattr(self, name) > DIE_FACES:
                raise ValueError(f"{name} must be <= {DIE_FACES}")

    @classmethod
    def default(cls) -> Unit:
        return cls(
            health=3,
            movement=100,
            ranged_attack_range=200,
            melee_attack_range=MELEE_ATTACK_RANGE,
            hit_roll=4,
            wound_roll=4,
            save_roll=5,
            ranged_damage=2,
            melee_damage=3,
        )

    def with_health(self, health: int) -> Unit:
        return replace(self, health=health)

    def to_fields(self) -> list[int]:
        return [getattr(self, f.name) for f in fields(self)]

    def to_schema(self) -> UnitSchema:
        return UnitSchema(**{f.name: getattr(self, f.name) for f in fields(self)})

    @classmethod
    def from_schema(cls, schema: UnitSchema) -> Unit:
        return cls(**schema.model_dump())
