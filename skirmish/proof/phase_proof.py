"""
Phase Proof - chained attestations of a turn's states.

A PhaseProgram is the only holder of its prover key. It attests a
PhaseState only after:
1. verifying the proof of the previous state (its own attestation),
2. replaying the action on that proof's public state, and
3. checking the replay equals the claimed new state.

A proof therefore vouches for every transition back to the turn's base
proof, while carrying only the public state, its depth, and the digest of
the proof it extends. The actions themselves are not part of it.

Usage:
    program = PhaseProgram()
    proof = program.init(state, state)
    proof = program.apply_move(next_state, proof, action, signature, ...)
    assert program.verify(proof)
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib
import logging

from ..crypto.field import hash_fields, require_field
from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.signature import Signature
from ..engine_core.action import Action
from ..engine_core.attack_roll import EncryptedAttackRoll
from ..engine_core.errors import AuthenticationFailure, ConsistencyViolation
from ..engine_core.phase_state import PhaseState
from ..engine_core.piece import Piece
from ..engine_core.position import Position
from ..merkle.trees import ArenaMerkleWitness, PiecesMerkleWitness
from ..schemas import PhaseProofSchema

logger = logging.getLogger(__name__)

PROGRAM_NAME = b"skirmish/phase-program/v1"
DIGEST_HEX_LENGTH = 64
HALF_MASK = (1 << 128) - 1
HEX_DIGITS = "0123456789abcdef"


@dataclass(frozen=True)
class PhaseProof:
    public_input: PhaseState
    depth: int
    previous_digest: str
    program_key: PublicKey
    attestation: Signature

    def __post_init__(self):
        require_field(self.depth, "depth")
        digest = self.previous_digest
        if digest and (len(digest) != DIGEST_HEX_LENGTH or digest.strip(HEX_DIGITS)):
            raise ValueError("previous_digest must be empty or a sha256 hex digest")

    @staticmethod
    def statement(public_input: PhaseState, depth: int, previous_digest: str) -> list[int]:
        """The field list a program signs for one proof."""
        previous = int(previous_digest, 16) if previous_digest else 0
        # Digest split in halves so each stays below the field modulus
        return [
            hash_fields(
                [
                    public_input.hash(),
                    depth,
                    int(bool(previous_digest)),
                    previous >> 128,
                    previous & HALF_MASK,
                ],
                domain=PROGRAM_NAME,
            )
        ]

    def digest(self) -> str:
        """Identifier of this proof, referenced by the proof that extends it."""
        h = hashlib.sha256()
        h.update(str(self.statement(self.public_input, self.depth, self.previous_digest)[0]).encode())
        h.update(self.program_key.to_bytes())
        h.update(self.attestation.der)
        return h.hexdigest()

    def to_schema(self) -> PhaseProofSchema:
        return PhaseProofSchema(
            public_input=self.public_input.to_schema(),
            depth=self.depth,
            previous_digest=self.previous_digest,
            program_key=self.program_key.to_text(),
            attestation=self.attestation.to_text(),
        )

    @classmethod
    def from_schema(cls, schema: PhaseProofSchema) -> PhaseProof:
        return cls(
            public_input=PhaseState.from_schema(schema.public_input),
            depth=schema.depth,
            previous_digest=schema.previous_digest,
            program_key=PublicKey.from_text(schema.program_key),
            attestation=Signature.from_text(schema.attestation),
        )

    def to_json(self) -> dict:
        return self.to_schema().model_dump()

    @classmethod
    def from_json(cls, data: dict) -> PhaseProof:
        return cls.from_schema(PhaseProofSchema.model_validate(data))


class PhaseProgram:
    """
    Proof production rules for a turn.

    Stateless apart from the prover key; every method is a pure function
    of its inputs, so independent proofs may be built on separate workers.
    """

    def __init__(self, prover_key: PrivateKey | None = None):
        self._prover_key = prover_key or PrivateKey.random()

    @property
    def verification_key(self) -> PublicKey:
        return self._prover_key.to_public_key()

    def verify(self, proof: PhaseProof) -> bool:
        """True iff this program produced the proof for exactly its public state."""
        if proof.program_key != self.verification_key:
            return False
        statement = PhaseProof.statement(proof.public_input, proof.depth, proof.previous_digest)
        return proof.attestation.verify(self.verification_key, statement)

    def init(self, state: PhaseState, init_state: PhaseState) -> PhaseProof:
        """Base proof: the turn starts at init_state."""
        if state != init_state:
            raise ConsistencyViolation("Initial state does not match the claimed state")
        return self._attest(state, depth=0, previous_digest="")

    def apply_move(
        self,
        new_state: PhaseState,
        old_phase_proof: PhaseProof,
        action: Action,
        action_signature: Signature,
        piece: Piece,
        piece_witness: PiecesMerkleWitness,
        old_position_arena_witness: ArenaMerkleWitness,
        new_position_arena_witness: ArenaMerkleWitness,
        new_position: Position,
        asserted_move_distance: int,
    ) -> PhaseProof:
        self._verify_or_raise(old_phase_proof)
        state_after_move = old_phase_proof.public_input.apply_move_action(
            action,
            action_signature,
            piece,
            piece_witness,
            old_position_arena_witness,
            new_position_arena_witness,
            new_position,
            asserted_move_distance,
        )
        return self._extend(old_phase_proof, state_after_move, new_state)

    def apply_ranged_attack(
        self,
        new_state: PhaseState,
        old_phase_proof: PhaseProof,
        action: Action,
        action_signature: Signature,
        attacking_piece: Piece,
        target_piece: Piece,
        attacking_piece_witness: PiecesMerkleWitness,
        target_piece_witness: PiecesMerkleWitness,
        asserted_attack_distance: int,
        attack_roll: EncryptedAttackRoll,
        server_secret_key: PrivateKey,
        **options,
    ) -> PhaseProof:
        self._verify_or_raise(old_phase_proof)
        state_after_attack = old_phase_proof.public_input.apply_ranged_attack_action(
            action,
            action_signature,
            attacking_piece,
            target_piece,
            attacking_piece_witness,
            target_piece_witness,
            asserted_attack_distance,
            attack_roll,
            server_secret_key,
            **options,
        )
        return self._extend(old_phase_proof, state_after_attack, new_state)

    def apply_melee_attack(
        self,
        new_state: PhaseState,
        old_phase_proof: PhaseProof,
        action: Action,
        action_signature: Signature,
        attacking_piece: Piece,
        target_piece: Piece,
        attacking_piece_witness: PiecesMerkleWitness,
        target_piece_witness: PiecesMerkleWitness,
        asserted_attack_distance: int,
        attack_roll: EncryptedAttackRoll,
        server_secret_key: PrivateKey,
        **options,
    ) -> PhaseProof:
        self._verify_or_raise(old_phase_proof)
        state_after_attack = old_phase_proof.public_input.apply_melee_attack_action(
            action,
            action_signature,
            attacking_piece,
            target_piece,
            attacking_piece_witness,
            target_piece_witness,
            asserted_attack_distance,
            attack_roll,
            server_secret_key,
            **options,
        )
        return self._extend(old_phase_proof, state_after_attack, new_state)

    def _verify_or_raise(self, proof: PhaseProof) -> None:
        if not self.verify(proof):
            logger.warning("Rejected unverifiable proof at depth %d", proof.depth)
            raise AuthenticationFailure("Previous phase proof does not verify")

    def _extend(self, old: PhaseProof, computed: PhaseState, claimed: PhaseState) -> PhaseProof:
        if computed != claimed:
            raise ConsistencyViolation("Claimed state does not follow from the previous proof")
        return self._attest(claimed, depth=old.depth + 1, previous_digest=old.digest())

    def _attest(self, state: PhaseState, depth: int, previous_digest: str) -> PhaseProof:
        attestation = Signature.create(
            self._prover_key, PhaseProof.statement(state, depth, previous_digest)
        )
        logger.debug("Attested phase state at depth %d (actions nonce %d)", depth, state.actions_nonce)
        return PhaseProof(
            public_input=state,
            depth=depth,
            previous_digest=previous_digest,
            program_key=self.verification_key,
            attestation=attestation,
        )
