"""
Pydantic Schemas - serialized forms of the public state and proofs.

These models are the contract with the surrounding game container:
- Nonces and stats are plain integers
- Roots and other field scalars are decimal strings
- Public keys and signatures are hex strings

Private keys and decrypted rolls never appear here.
"""

from typing import Optional
from pydantic import BaseModel, Field

DECIMAL_PATTERN = r"^[0-9]+$"
HEX_PATTERN = r"^[0-9a-f]*$"


# =============================================================================
# Records
# =============================================================================

class PositionSchema(BaseModel):
    """Arena coordinate."""
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class UnitSchema(BaseModel):
    """Combat stats of a piece."""
    health: int = Field(ge=0)
    movement: int = Field(ge=0)
    ranged_attack_range: int = Field(ge=0)
    melee_attack_range: int = Field(ge=0)
    hit_roll: int = Field(ge=0, le=6)
    wound_roll: int = Field(ge=0, le=6)
    save_roll: int = Field(ge=0, le=6)
    ranged_damage: int = Field(ge=0)
    melee_damage: int = Field(ge=0)


class PieceSchema(BaseModel):
    """A piece as committed to the roster tree."""
    id: int = Field(ge=0)
    player_public_key: str = Field(pattern=HEX_PATTERN)
    position: PositionSchema
    condition: UnitSchema


# =============================================================================
# Turn state and proofs
# =============================================================================

class PhaseStateSchema(BaseModel):
    """Public turn state."""
    nonce: int = Field(ge=0)
    actions_nonce: int = Field(ge=0, description="Highest action nonce applied this turn")
    starting_pieces_root: str = Field(pattern=DECIMAL_PATTERN)
    current_pieces_root: str = Field(pattern=DECIMAL_PATTERN)
    starting_arena_root: str = Field(pattern=DECIMAL_PATTERN)
    current_arena_root: str = Field(pattern=DECIMAL_PATTERN)
    player_public_key: str = Field(pattern=HEX_PATTERN)


class PhaseProofSchema(BaseModel):
    """An attested turn state, chained to the proof it extends."""
    public_input: PhaseStateSchema
    depth: int = Field(ge=0, description="Number of actions since the turn's base proof")
    previous_digest: str = Field("", pattern=HEX_PATTERN)
    program_key: str = Field(pattern=HEX_PATTERN)
    attestation: str = Field(pattern=HEX_PATTERN)


class TransitionResultSchema(BaseModel):
    """Outcome of one attempted action."""
    success: bool
    state: Optional[PhaseStateSchema] = None
    proof: Optional[PhaseProofSchema] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
