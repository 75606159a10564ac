"""
Proof - Chained attestations of turn states.
"""

from .phase_proof import PhaseProgram, PhaseProof

__all__ = [
    "PhaseProgram",
    "PhaseProof",
]
