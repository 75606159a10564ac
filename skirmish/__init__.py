"""
Skirmish - Verifiable Turn Engine

The authenticated state-transition core of a turn-based tactical game.
The engine provides:
- Commitment trees over the piece roster and the arena grid
- Signed, nonce-ordered player actions
- Encrypted dice rolls resolved by a trusted arbiter
- A per-turn state machine and a chained proof of each turn
"""

__version__ = "0.1.0"
