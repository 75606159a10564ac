"""
Crypto - Scalar field hashing, keys, signatures and encryption.

Everything committed by the engine is expressed as a list of field
scalars (Python ints below MODULUS). Keys are secp256k1 key pairs.
"""

from .field import MODULUS, to_field, require_field, hash_fields, select
from .keys import PrivateKey, PublicKey
from .signature import Signature
from .encryption import CipherText, DecryptionError, encrypt, decrypt

__all__ = [
    "MODULUS",
    "to_field",
    "require_field",
    "hash_fields",
    "select",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "CipherText",
    "DecryptionError",
    "encrypt",
    "decrypt",
]
