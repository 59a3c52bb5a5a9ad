"""Domain-specific exceptions raised inside the ledger service."""

from bookkeeper.models.ledger import ErrorKind


class LedgerError(Exception):
    """Base exception for ledger operations."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LedgerError):
    """A user, record or post does not exist."""
    kind = ErrorKind.NOT_FOUND


class LedgerValidationError(LedgerError):
    """Input violates a business rule (empty content, dangling reference, ...)."""
    kind = ErrorKind.VALIDATION


class ConflictError(LedgerError):
    """A unique username or email is already taken."""
    kind = ErrorKind.CONFLICT


class PersistenceError(LedgerError):
    """A user document could not be read or written."""
    kind = ErrorKind.IO


# Messages reported at the service boundary
USERNAME_EXISTS = "username exists"
EMAIL_EXISTS = "email exists"
USER_NOT_FOUND = "user not found"
WRONG_PASSWORD = "wrong password"
CANNOT_ADD_SELF = "cannot add self"
CATEGORY_IN_USE = "category in use"
CATEGORY_NOT_FOUND = "category not found"
BILL_NOT_FOUND = "bill not found"
REMINDER_NOT_FOUND = "reminder not found"
CONTENT_EMPTY = "content empty"
POST_NOT_FOUND = "post not found"
LOAD_USER_FAILED = "failed to load user"
LOAD_FRIEND_FAILED = "failed to load friend"
SAVE_FAILED = "failed to save user data"
INVALID_VISIBILITY = "invalid visibility"
