"""
Attack rolls - three dice encrypted to the arbiter.

The randomness authority encrypts (hit, wound, save) to the arbiter's
public key and signs the ciphertext together with the encryption's
ephemeral public key. Only the arbiter's private key can open the roll,
and the signature ties the opened values to what the authority issued.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..crypto.encryption import CipherText, DecryptionError, decrypt
from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.signature import Signature
from .. import settings
from .constants import DIE_FACES
from .errors import DecryptionAuthenticityFailure

ROLL_LENGTH = 3


@dataclass(frozen=True)
class DecryptedAttackRoll:
    """Opened die faces, each in 1..DIE_FACES."""
    hit: int
    wound: int
    save: int


@dataclass(frozen=True)
class EncryptedAttackRoll:
    public_key: PublicKey
    ciphertext: tuple[int, ...]
    signature: Signature

    @classmethod
    def init(
        cls,
        public_key: PublicKey,
        ciphertext: tuple[int, ...] | list[int],
        signature: Signature,
        rng_public_key: PublicKey | None = None,
    ) -> EncryptedAttackRoll:
        """Build a roll, rejecting it unless the authority signed exactly this data."""
        roll = cls(public_key=public_key, ciphertext=tuple(ciphertext), signature=signature)
        roll.assert_authentic(rng_public_key)
        return roll

    @staticmethod
    def commitment(public_key: PublicKey, ciphertext: tuple[int, ...] | list[int]) -> list[int]:
        """The field list the randomness authority signs."""
        return [*public_key.to_fields(), *ciphertext]

    def verify_signature(self, rng_public_key: PublicKey | None = None) -> bool:
        key = settings.rng_public_key(rng_public_key)
        return self.signature.verify(key, self.commitment(self.public_key, self.ciphertext))

    def assert_authentic(self, rng_public_key: PublicKey | None = None) -> None:
        if not self.verify_signature(rng_public_key):
            raise DecryptionAuthenticityFailure(
                "Attack roll signature does not match its ciphertext and public key"
            )

    def decrypt_roll(
        self,
        server_secret_key: PrivateKey,
        rng_public_key: PublicKey | None = None,
    ) -> DecryptedAttackRoll:
        """Authenticate, then open the roll with the arbiter's private key."""
        self.assert_authentic(rng_public_key)
        try:
            values = decrypt(CipherText(self.public_key, self.ciphertext), server_secret_key)
        except DecryptionError as e:
            raise DecryptionAuthenticityFailure(str(e)) from e
        if len(values) != ROLL_LENGTH:
            raise DecryptionAuthenticityFailure(
                f"Attack roll holds {len(values)} dice, expected {ROLL_LENGTH}"
            )
        if any(not 1 <= v <= DIE_FACES for v in values):
            raise DecryptionAuthenticityFailure("Attack roll holds a value that is not a die face")
        hit, wound, save = values
        return DecryptedAttackRoll(hit=hit, wound=wound, save=save)
