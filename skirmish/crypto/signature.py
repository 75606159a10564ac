"""
Signatures over field element sequences.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .field import field_to_bytes
from .keys import PrivateKey, PublicKey


def _message(fields: Sequence[int]) -> bytes:
    return b"".join(field_to_bytes(f) for f in fields)


@dataclass(frozen=True)
class Signature:
    """ECDSA signature (DER bytes) over the canonical encoding of a field list."""
    der: bytes

    @classmethod
    def create(cls, private_key: PrivateKey, fields: Sequence[int]) -> Signature:
        return cls(private_key.raw.sign(_message(fields)))

    def verify(self, public_key: PublicKey, fields: Sequence[int]) -> bool:
        try:
            return public_key.raw.verify(self.der, _message(fields))
        except ValueError:
            # Malformed DER is simply not a valid signature
            return False

    @classmethod
    def from_text(cls, text: str) -> Signature:
        return cls(bytes.fromhex(text))

    def to_text(self) -> str:
        return self.der.hex()
