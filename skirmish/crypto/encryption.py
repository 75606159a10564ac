"""
Public-key encryption of field element sequences.

encrypt() draws an ephemeral key pair, derives a shared secret with the
recipient by ECDH, and masks each element with a hash keystream. A final
tag element authenticates the plaintext, so decrypting with the wrong key
or a modified ciphertext fails instead of yielding different numbers.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .field import MODULUS, hash_fields, to_field
from .keys import PrivateKey, PublicKey

_PAD_DOMAIN = b"skirmish/encryption/pad"
_TAG_DOMAIN = b"skirmish/encryption/tag"


class DecryptionError(ValueError):
    """Raised when a ciphertext does not authenticate under the given key."""


@dataclass(frozen=True)
class CipherText:
    """Ephemeral public key plus masked elements; the last element is the tag."""
    public_key: PublicKey
    cipher_text: tuple[int, ...]


def _secret(shared: bytes) -> int:
    return int.from_bytes(shared, "big")


def _keystream(secret: int, length: int) -> list[int]:
    return [hash_fields([secret, i], domain=_PAD_DOMAIN) for i in range(length)]


def _tag(secret: int, message: Sequence[int]) -> int:
    return hash_fields([secret, *message], domain=_TAG_DOMAIN)


def encrypt(message: Sequence[int], public_key: PublicKey) -> CipherText:
    """Encrypt field elements to the holder of public_key's private key."""
    ephemeral = PrivateKey.random()
    secret = _secret(ephemeral.ecdh(public_key))
    plain = [to_field(m) for m in message]
    pads = _keystream(secret, len(plain))
    body = [(m + k) % MODULUS for m, k in zip(plain, pads)]
    return CipherText(
        public_key=ephemeral.to_public_key(),
        cipher_text=tuple(body + [_tag(secret, plain)]),
    )


def decrypt(cipher: CipherText, private_key: PrivateKey) -> list[int]:
    """Recover the plaintext, raising DecryptionError if the tag does not match."""
    if not cipher.cipher_text:
        raise DecryptionError("Empty ciphertext")
    *body, tag = cipher.cipher_text
    secret = _secret(private_key.ecdh(cipher.public_key))
    pads = _keystream(secret, len(body))
    plain = [(c - k) % MODULUS for c, k in zip(body, pads)]
    if _tag(secret, plain) != tag:
        raise DecryptionError("Ciphertext does not authenticate under this key")
    return plain
