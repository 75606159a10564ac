"""
Session Module - Client-side driver of turns.

A session represents one roster and arena played over successive turns:
- Holds the piece records and both commitment trees
- Signs actions and assembles witnesses
- Extends the proof chain action by action
- Rolls the state over at turn boundaries

Sessions are in-memory only; the public state and proofs they produce
are the only things meant to leave them.
"""

from .turn import TurnSession, TransitionResult, exact_distance

__all__ = [
    "TurnSession",
    "TransitionResult",
    "exact_distance",
]
