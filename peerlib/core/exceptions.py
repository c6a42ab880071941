"""
Exception hierarchy for the peer library.

Every error raised by the stores and services derives from LibraryError,
so callers (the HTTP boundary in particular) can map whole families of
failures at once.
"""

from typing import Any, Dict, Optional


class LibraryError(Exception):
    """Base class for all peer library errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(LibraryError):
    """An account or resource id is absent from the store."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(
            f"{kind} with identifier '{identifier}' not found",
            {"kind": kind, "identifier": identifier},
        )


class AlreadyExistsError(LibraryError):
    """A record with the same id (or unique key) is already stored."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(
            f"{kind} with identifier '{identifier}' already exists",
            {"kind": kind, "identifier": identifier},
        )


class ValidationError(LibraryError):
    """Malformed input at the service boundary."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            f"validation error on field '{field}': {message}",
            {"field": field},
        )


class InsufficientReputationError(LibraryError):
    """
    An account's score is below what an action requires.

    Carries the account id, the required and current scores, and a label
    for the attempted action.
    """

    def __init__(self, account_id: str, required: int, current: int, action: str):
        self.account_id = account_id
        self.required = required
        self.current = current
        self.action = action
        super().__init__(
            f"account '{account_id}' has insufficient reputation for '{action}': "
            f"required {required}, current {current}",
            {
                "account_id": account_id,
                "required": required,
                "current": current,
                "action": action,
            },
        )


class OperationError(LibraryError):
    """A store or service operation failed for a reason other than the above."""

    def __init__(self, operation: str, reason: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.reason = reason
        self.cause = cause
        message = f"operation '{operation}' failed: {reason}"
        if cause is not None:
            message += f" (caused by: {cause})"
        super().__init__(message, {"operation": operation, "reason": reason})


def is_not_found(error: BaseException) -> bool:
    """Check whether an error (or its cause) is a not-found condition."""
    if isinstance(error, NotFoundError):
        return True
    if isinstance(error, OperationError) and error.cause is not None:
        return is_not_found(error.cause)
    return False
