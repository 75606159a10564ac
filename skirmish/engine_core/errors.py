"""
Transition errors - why an action was rejected.

Every check in the state machine is unconditional: a failed check raises
one of these and no new state is produced. error_code is the stable string
reported to callers in TransitionResult.
"""

from __future__ import annotations


class TransitionError(Exception):
    """Base class for rejected transitions."""
    error_code = "TRANSITION_REJECTED"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationFailure(TransitionError):
    """A signature does not verify, or a witness does not match its root or key."""
    error_code = "AUTHENTICATION_FAILURE"


class OrderingViolation(TransitionError):
    """The action nonce is not strictly greater than the last applied one."""
    error_code = "ORDERING_VIOLATION"


class RangeViolation(TransitionError):
    """An asserted distance is wrong or exceeds the relevant stat."""
    error_code = "RANGE_VIOLATION"


class OwnershipViolation(TransitionError):
    """The acting piece does not belong to the active player."""
    error_code = "OWNERSHIP_VIOLATION"


class ConsistencyViolation(TransitionError):
    """Two witnesses or states imply different underlying data."""
    error_code = "CONSISTENCY_VIOLATION"


class DecryptionAuthenticityFailure(TransitionError):
    """An encrypted roll is not the one the randomness authority signed."""
    error_code = "DECRYPTION_AUTHENTICITY_FAILURE"
