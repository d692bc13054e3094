class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials or access tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a course, user or session does not exist."""


class ConflictError(DomainError):
    """Raised when a write violates a uniqueness rule (duplicate username, course code, mark)."""


class ScanRejected(DomainError):
    """Base for reasons a presented QR token does not produce an attendance mark."""

    reason = "SCAN_REJECTED"


class MalformedToken(ScanRejected):
    reason = "MALFORMED_TOKEN"


class TokenExpired(ScanRejected):
    reason = "TOKEN_EXPIRED"


class NotEnrolled(ScanRejected):
    reason = "NOT_ENROLLED"


class AlreadyMarked(ScanRejected):
    """Same student, course and day already has a mark. Non-fatal for callers."""

    reason = "ALREADY_MARKED"
