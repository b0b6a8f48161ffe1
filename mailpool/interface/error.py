"""Interface layer errors.

Domain errors raised out of use cases become HTTP errors carrying only the
stable kind and the domain message.
"""

from fastapi import HTTPException, status

from mailpool.domain.error import DomainError
from mailpool.domain.value import ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_METHOD: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorKind.EXHAUSTED: status.HTTP_409_CONFLICT,
    ErrorKind.EXPIRED: status.HTTP_410_GONE,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(kind: ErrorKind, message: str) -> dict[str, str]:
    return {"kind": kind.value, "message": message}


def to_http_exception(error: DomainError) -> HTTPException:
    """Map a domain error to an HTTPException.

    Args:
        error: Domain error raised by a use case

    Returns:
        HTTPException with a {kind, message} detail
    """
    headers = {"Retry-After": "1"} if error.retryable else None
    return HTTPException(
        status_code=STATUS_BY_KIND.get(error.kind, status.HTTP_400_BAD_REQUEST),
        detail=error_body(error.kind, error.message),
        headers=headers,
    )
