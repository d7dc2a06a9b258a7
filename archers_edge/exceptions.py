"""
Policy violations raised by the scoring core.

These are user-facing validation failures, not crashes:
- PolicyError: Base exception, message is safe to show to the user
- CapacityExceededError: More archers selected than the bales can hold
- InvalidBaleLayoutError: Bale count or targets per bale is not positive
- EmptySelectionError: No competition or no archers selected
- InvalidAssignmentTypeError: Unknown bale grouping policy
- IncompleteScorecardError: Verification attempted before all arrows are in
- AlreadyVerifiedError: Scorecard is frozen
- InvalidScoreTokenError: Arrow token outside the closed enumeration
- AssignmentNotFoundError: Event assignment id does not exist
"""


class PolicyError(Exception):
    """Base exception for all policy violations."""
    pass


class CapacityExceededError(PolicyError):
    """Too many archers for the configured bales and targets."""
    pass


class InvalidBaleLayoutError(PolicyError):
    """Number of bales and archers per bale must both be at least 1."""
    pass


class EmptySelectionError(PolicyError):
    """Required selection is missing."""
    pass


class InvalidAssignmentTypeError(PolicyError):
    """Assignment type is not one of school, mixed, school-vs-school."""
    pass


class IncompleteScorecardError(PolicyError):
    """Scorecard does not have all 36 arrows filled."""
    pass


class AlreadyVerifiedError(PolicyError):
    """Scorecard has been verified and can no longer change."""
    pass


class InvalidScoreTokenError(PolicyError):
    """Arrow token is not X, M or a number 0-10."""
    pass


class AssignmentNotFoundError(PolicyError):
    """Event assignment does not exist."""
    pass
