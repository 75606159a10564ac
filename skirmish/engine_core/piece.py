"""
Piece - a unit on the board, as committed to the roster tree.
"""

from __future__ import annotations
from dataclasses import dataclass, replace

from ..crypto.field import hash_fields
from ..crypto.keys import PublicKey
from ..schemas import PieceSchema
from .position import Position
from .unit import Unit

_DOMAIN = b"skirmish/piece"


@dataclass(frozen=True)
class Piece:
    """
    A piece instance.

    Pieces are values: moving or wounding one produces a new Piece that is
    re-hashed into the roster tree under the same id.
    """
    id: int
    player_public_key: PublicKey
    position: Position
    condition: Unit

    def hash(self) -> int:
        return hash_fields(
            [
                self.id,
                *self.player_public_key.to_fields(),
                *self.position.to_fields(),
                *self.condition.to_fields(),
            ],
            domain=_DOMAIN,
        )

    def with_position(self, position: Position) -> Piece:
        return replace(self, position=position)

    def with_health(self, health: int) -> Piece:
        return replace(self, condition=self.condition.with_health(health))

    def clone(self) -> Piece:
        return replace(self)

    def to_schema(self) -> PieceSchema:
        return PieceSchema(
            id=self.id,
            player_public_key=self.player_public_key.to_text(),
            position=self.position.to_schema(),
            condition=self.condition.to_schema(),
        )

    @classmethod
    def from_schema(cls, schema: PieceSchema) -> Piece:
        return cls(
            id=schema.id,
            player_public_key=PublicKey.from_text(schema.player_public_key),
            position=Position.from_schema(schema.position),
            condition=Unit.from_schema(schema.condition),
        )
