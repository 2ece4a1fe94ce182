"""Domain error taxonomy."""

from typing import Optional


class DomainError(Exception):
    """Base class for errors raised or returned by the core."""
    
    code = "DOMAIN_ERROR"
    
    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class FetchError(DomainError):
    """Upstream source unreachable or returned something unusable."""
    
    code = "FETCH_ERROR"


class ValidationError(DomainError, ValueError):
    """Malformed entity fields."""
    
    code = "VALIDATION_ERROR"


class SendError(DomainError):
    """Delivery to a destination failed."""
    
    code = "SEND_ERROR"


class DuplicateError(DomainError):
    """Item was already delivered to the destination."""
    
    code = "DUPLICATE_ERROR"


class NotFoundError(DomainError):
    """No qualifying item exists anywhere."""
    
    code = "NOT_FOUND"


class RetryExhaustedError(DomainError):
    """Attempt budget ran out on an unexpected failure."""
    
    code = "MAX_RETRY_EXCEEDED"
    
    def __init__(
        self, message: str, attempts: int, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message, cause)
        self.attempts = attempts
