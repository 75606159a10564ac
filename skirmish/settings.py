"""
Settings - environment-driven defaults.

    SKIRMISH_RNG_PUBLIC_KEY       hex public key of the randomness authority
    SKIRMISH_RANGED_SAVE_POLICY   save policy for ranged attacks
    SKIRMISH_MELEE_SAVE_POLICY    save policy for melee attacks

Save policies: "target_save_roll" (default) or "no_save".
"""

from __future__ import annotations
import os

from .crypto.keys import PublicKey

SKIRMISH_RNG_PUBLIC_KEY = os.getenv("SKIRMISH_RNG_PUBLIC_KEY", None)
RANGED_SAVE_POLICY = os.getenv("SKIRMISH_RANGED_SAVE_POLICY", "target_save_roll")
MELEE_SAVE_POLICY = os.getenv("SKIRMISH_MELEE_SAVE_POLICY", "target_save_roll")


class ConfigurationError(Exception):
    """Raised when a required setting is missing or malformed."""


def rng_public_key(explicit: PublicKey | None = None) -> PublicKey:
    """
    The randomness authority's public key.

    An explicitly supplied key wins; otherwise SKIRMISH_RNG_PUBLIC_KEY is used.
    """
    if explicit is not None:
        return explicit
    if not SKIRMISH_RNG_PUBLIC_KEY:
        raise ConfigurationError(
            "No randomness authority key: pass rng_public_key or set SKIRMISH_RNG_PUBLIC_KEY"
        )
    try:
        return PublicKey.from_text(SKIRMISH_RNG_PUBLIC_KEY)
    except ValueError as e:
        raise ConfigurationError(f"SKIRMISH_RNG_PUBLIC_KEY is not a valid public key: {e}") from e
