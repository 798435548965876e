"""Kanban domain exceptions.

Every business-rule rejection raised by the services is a ``KanbanError``
subclass carrying an HTTP status code and a machine-readable code, so the
API layer can render it without knowing which service raised it.
"""

from typing import Any, Optional


class KanbanError(Exception):
    """Base exception for Kanban business errors."""

    status_code: int = 500
    code: str = "KANBAN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(message)


class AuthorizationDenied(KanbanError):
    """The acting user's project role does not permit the operation."""

    status_code = 403
    code = "AUTHORIZATION_DENIED"


# Membership rules use the shorter name; both render as 403.
Forbidden = AuthorizationDenied


class NotFound(KanbanError):
    """Referenced entity does not exist or is outside the caller's scope."""

    status_code = 404
    code = "NOT_FOUND"


class NotMember(NotFound):
    """Target user has no membership row in the project."""

    code = "NOT_MEMBER"


class ValidationFailed(KanbanError):
    """Structurally invalid input.

    ``details`` maps field names to error messages.
    """

    status_code = 422
    code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Any] = None):
        if details is None and field is not None:
            details = {field: message}
        super().__init__(message, details=details)


class InvalidNewOwner(ValidationFailed):
    """Ownership target is the current owner or not a project member."""

    code = "INVALID_NEW_OWNER"


class InvalidReorder(KanbanError):
    """Supplied id list does not match the actual sibling set."""

    status_code = 422
    code = "INVALID_REORDER"


class InvalidTag(KanbanError):
    """One or more tag ids do not belong to the item's project."""

    status_code = 422
    code = "INVALID_TAG"

    def __init__(self, message: str, tag_ids: Optional[list] = None):
        self.tag_ids = tag_ids or []
        super().__init__(message, details={"tag_ids": [str(t) for t in self.tag_ids]})


class Conflict(KanbanError):
    """Operation would violate a uniqueness or state invariant."""

    status_code = 409
    code = "CONFLICT"


class TransferFailed(KanbanError):
    """Ownership transfer transaction rolled back; state is unchanged."""

    status_code = 500
    code = "TRANSFER_FAILED"


class Internal(KanbanError):
    """Unexpected store or infrastructure failure."""

    status_code = 500
    code = "INTERNAL_ERROR"
