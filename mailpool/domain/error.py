"""Domain layer errors.

Every error carries a stable machine-readable ``kind`` and a human message.
Messages never include store error text or token material.
"""

from mailpool.domain.value.types import ErrorKind

INVALID_TOKEN_MESSAGE = "Token is invalid or has been tampered with"


class DomainError(Exception):
    """Base domain error."""

    kind: ErrorKind = ErrorKind.INVALID
    default_message: str = "Domain error"
    retryable: bool = False

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DecodeError(DomainError):
    """Token string is malformed before authentication is attempted."""

    kind = ErrorKind.INVALID
    default_message = INVALID_TOKEN_MESSAGE


class IntegrityError(DomainError):
    """Token failed authentication (tampered, truncated or foreign context)."""

    kind = ErrorKind.INVALID
    default_message = INVALID_TOKEN_MESSAGE


class ValidationError(DomainError):
    """Caller input violates a stated precondition."""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class ExpiredError(DomainError):
    """Token is past its expiry instant."""

    kind = ErrorKind.EXPIRED
    default_message = "Token has expired"


class ExhaustedError(DomainError):
    """Invite has no registrations left."""

    kind = ErrorKind.EXHAUSTED
    default_message = "Invite has no remaining uses"


class InvalidMethodError(DomainError):
    """Registration method is unknown or not enabled for this invite."""

    kind = ErrorKind.INVALID_METHOD
    default_message = "Registration method is not allowed for this invite"


class AlreadyUsedError(DomainError):
    """Single-use card key was already consumed."""

    kind = ErrorKind.ALREADY_USED
    default_message = "Card key has already been used"


class UnavailableError(DomainError):
    """Backing store unreachable or timed out. Safe to retry."""

    kind = ErrorKind.UNAVAILABLE
    default_message = "Service temporarily unavailable, please retry"
    retryable = True


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"
