"""
Domain-specific exceptions for penalties app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PenaltiesServiceError(Exception):
    """Base exception for all penalty service errors."""
    pass


class PenaltyNotFoundError(PenaltiesServiceError):
    """Raised when a penalty does not exist."""
    pass


class PolicyNotFoundError(PenaltiesServiceError):
    """Raised when a penalty policy does not exist."""
    pass


class InvalidDamageAssessmentError(PenaltiesServiceError):
    """Raised when a damage map entry cannot be valued."""
    pass


class InvalidPolicyError(PenaltiesServiceError):
    """Raised when a policy of the wrong type is used."""
    pass


class PenaltyAlreadyResolvedError(PenaltiesServiceError):
    """Raised when paying a penalty that is already settled."""
    pass


class LatePenaltyNotApplicableError(PenaltiesServiceError):
    """Raised when a late fee is issued for a request that was not returned late."""
    pass


class InsufficientPermissionsError(PenaltiesServiceError):
    """Raised when a user acts on a penalty that is not theirs."""
    pass
