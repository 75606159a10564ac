"""
Position - a cell of the arena grid.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..crypto.field import hash_fields
from ..schemas import PositionSchema
from .constants import ARENA_WIDTH, ARENA_HEIGHT, ARENA_MERKLE_ROW_WIDTH

_DOMAIN = b"skirmish/position"


@dataclass(frozen=True)
class Position:
    """
    Integer coordinate inside the arena bounds.

    Distances are only ever compared as squares, so checking an asserted
    distance never needs a square root.
    """
    x: int
    y: int

    def __post_init__(self):
        if not 0 <= self.x < ARENA_WIDTH:
            raise ValueError(f"x={self.x} outside arena width {ARENA_WIDTH}")
        if not 0 <= self.y < ARENA_HEIGHT:
            raise ValueError(f"y={self.y} outside arena height {ARENA_HEIGHT}")

    @classmethod
    def from_xy(cls, x: int, y: int) -> Position:
        return cls(x=x, y=y)

    def to_fields(self) -> list[int]:
        return [self.x, self.y]

    def hash(self) -> int:
        return hash_fields(self.to_fields(), domain=_DOMAIN)

    def get_merkle_key(self, row_width: int = ARENA_MERKLE_ROW_WIDTH) -> int:
        """Arena tree key of this cell."""
        if self.y >= row_width:
            raise ValueError(f"y={self.y} does not fit row width {row_width}")
        return self.x * row_width + self.y

    def squared_distance(self, other: Position) -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def verify_distance(self, other: Position, distance: int) -> bool:
        """True iff the Euclidean distance to `other` is exactly `distance`."""
        return distance >= 0 and self.squared_distance(other) == distance * distance

    def to_schema(self) -> PositionSchema:
        return PositionSchema(x=self.x, y=self.y)

    @classmethod
    def from_schema(cls, schema: PositionSchema) -> Position:
        return cls(x=schema.x, y=schema.y)
