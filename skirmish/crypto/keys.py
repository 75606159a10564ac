"""
Key pairs - secp256k1 keys backed by coincurve.

Public keys travel as hex-encoded compressed SEC1 points and enter
commitments as three field elements (x high half, x low half, y parity).
"""

from __future__ import annotations

import coincurve

_HALF_BITS = 128
_HALF_MASK = (1 << _HALF_BITS) - 1


class PublicKey:
    """A secp256k1 public key."""

    def __init__(self, key: coincurve.PublicKey):
        self._key = key

    @classmethod
    def from_bytes(cls, data: bytes) -> PublicKey:
        return cls(coincurve.PublicKey(data))

    @classmethod
    def from_text(cls, text: str) -> PublicKey:
        """Parse the hex text encoding produced by to_text()."""
        return cls.from_bytes(bytes.fromhex(text))

    @property
    def raw(self) -> coincurve.PublicKey:
        return self._key

    def to_bytes(self) -> bytes:
        return self._key.format(compressed=True)

    def to_text(self) -> str:
        return self.to_bytes().hex()

    def to_fields(self) -> list[int]:
        x, y = self._key.point()
        return [x >> _HALF_BITS, x & _HALF_MASK, y & 1]

    def __eq__(self, other):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self):
        return hash(self.to_bytes())

    def __repr__(self):
        return f"PublicKey({self.to_text()})"


class PrivateKey:
    """A secp256k1 private key. Never serialized into public state."""

    def __init__(self, key: coincurve.PrivateKey):
        self._key = key

    @classmethod
    def random(cls) -> PrivateKey:
        return cls(coincurve.PrivateKey())

    @classmethod
    def from_text(cls, text: str) -> PrivateKey:
        return cls(coincurve.PrivateKey.from_hex(text))

    @property
    def raw(self) -> coincurve.PrivateKey:
        return self._key

    def to_text(self) -> str:
        return self._key.to_hex()

    def to_public_key(self) -> PublicKey:
        return PublicKey(self._key.public_key)

    def ecdh(self, public_key: PublicKey) -> bytes:
        """Shared secret with another party's public key."""
        return self._key.ecdh(public_key.to_bytes())

    def __repr__(self):
        return f"PrivateKey(public={self.to_public_key().to_text()})"
