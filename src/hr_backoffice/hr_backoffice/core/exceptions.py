class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is the stable identifier surfaced to API callers.
    """

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class InvalidRange(ValidationError):
    """Raised when an end date falls before its start date."""

    code = "invalid_range"


class NotFoundError(DomainError):
    code = "not_found"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class InsufficientBalance(DomainError):
    code = "insufficient_balance"

    def __init__(self, leave_type: str, requested, available):
        super().__init__(f"Insufficient balance for {leave_type}. Requested: {requested}, available: {available}")
        self.leave_type = leave_type
        self.requested = requested
        self.available = available


class DuplicatePunchIn(DomainError):
    code = "duplicate_punch_in"


class NoPunchInFound(DomainError):
    code = "no_punch_in_found"


class AlreadyPunchedOut(DomainError):
    code = "already_punched_out"


class NoApproversAvailable(DomainError):
    code = "no_approvers_available"


class ActiveResignationExists(DomainError):
    code = "active_resignation_exists"


class InvalidTransition(DomainError):
    """Raised when a decision or cancel targets a request that is no longer pending."""

    code = "invalid_transition"


class StoreConflict(Exception):
    """Transient store failure (deadlock, lock timeout). Safe to retry."""
