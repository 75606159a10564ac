"""
Scalar field - the value domain of every commitment.

Roots, leaves, hashes and ciphertext elements are all integers reduced
modulo MODULUS (the Pallas base field prime), so they fit one fixed-width
scalar and serialize as decimal strings.
"""

from __future__ import annotations
from typing import Iterable
import hashlib

MODULUS = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001

FIELD_BYTES = 32


def to_field(value: int) -> int:
    """Reduce an integer into the field."""
    return int(value) % MODULUS


def require_field(value: int, name: str) -> int:
    """Reject integers that are not already canonical field elements."""
    if not 0 <= value < MODULUS:
        raise ValueError(f"{name} is not a field element")
    return value


def field_to_bytes(value: int) -> bytes:
    return to_field(value).to_bytes(FIELD_BYTES, "big")


def hash_fields(fields: Iterable[int], domain: bytes = b"") -> int:
    """
    Hash a sequence of field elements to a single field element.

    The domain tag separates hashes of different record kinds so that a
    position hash can never collide with a piece hash of the same inputs.
    """
    h = hashlib.sha256()
    h.update(len(domain).to_bytes(2, "big"))
    h.update(domain)
    for value in fields:
        h.update(field_to_bytes(value))
    return int.from_bytes(h.digest(), "big") % MODULUS


def select(condition: bool, if_true: int, if_false: int) -> int:
    """
    Branchless selection between two precomputed values.

    Both operands are evaluated by the caller; the condition only acts as
    a 0/1 mask, so no control flow depends on it.
    """
    mask = int(bool(condition))
    return mask * int(if_true) + (1 - mask) * int(if_false)
