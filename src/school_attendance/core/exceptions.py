class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class OutsideWindowError(ValidationError):
    """Raised when a check-in/check-out happens outside its daily window."""


class AlreadyCheckedInError(ValidationError):
    """Raised on a second check-in for the same teacher and date."""


class NotCheckedInError(ValidationError):
    """Raised on a check-out without a check-in for the day."""


class AlreadyCheckedOutError(ValidationError):
    """Raised when the day's record already carries a check-out time."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RecordNotFoundError(DomainError):
    """Raised when a referenced document does not exist."""


class DuplicateRecordError(Exception):
    """Raised by a document store when an explicit id is already taken."""


class BackendUnavailableError(Exception):
    """Raised when the backing store cannot be reached.

    Kept outside ``DomainError`` so callers can fall back to cached data
    instead of treating it as a rejection.
    """
