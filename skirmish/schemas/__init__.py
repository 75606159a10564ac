"""
Schemas - Serialized forms exchanged with the game container.
"""

from .models import (
    PositionSchema,
    UnitSchema,
    PieceSchema,
    PhaseStateSchema,
    PhaseProofSchema,
    TransitionResultSchema,
)

__all__ = [
    "PositionSchema",
    "UnitSchema",
    "PieceSchema",
    "PhaseStateSchema",
    "PhaseProofSchema",
    "TransitionResultSchema",
]
