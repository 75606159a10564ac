"""
Dice authority - the party that issues encrypted, signed attack rolls.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import secrets

from ..crypto.encryption import encrypt
from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.signature import Signature
from .attack_roll import EncryptedAttackRoll, ROLL_LENGTH
from .constants import DIE_FACES


@dataclass
class DiceAuthority:
    """
    Holds the signing key whose public half is SKIRMISH_RNG_PUBLIC_KEY.

    Usage:
        authority = DiceAuthority()
        roll = authority.roll(arbiter_public_key)
    """
    private_key: PrivateKey = field(default_factory=PrivateKey.random)

    @property
    def public_key(self) -> PublicKey:
        return self.private_key.to_public_key()

    def issue(self, values: Sequence[int], arbiter_public_key: PublicKey) -> EncryptedAttackRoll:
        """Encrypt and sign specific die faces (hit, wound, save)."""
        if len(values) != ROLL_LENGTH:
            raise ValueError(f"An attack roll has {ROLL_LENGTH} dice")
        if any(not 1 <= v <= DIE_FACES for v in values):
            raise ValueError(f"Die faces must be between 1 and {DIE_FACES}")
        cipher = encrypt(list(values), arbiter_public_key)
        signature = Signature.create(
            self.private_key,
            EncryptedAttackRoll.commitment(cipher.public_key, cipher.cipher_text),
        )
        return EncryptedAttackRoll.init(
            cipher.public_key, cipher.cipher_text, signature, rng_public_key=self.public_key
        )

    def roll(self, arbiter_public_key: PublicKey) -> EncryptedAttackRoll:
        """Draw fresh dice."""
        values = [secrets.randbelow(DIE_FACES) + 1 for _ in range(ROLL_LENGTH)]
        return self.issue(values, arbiter_public_key)
