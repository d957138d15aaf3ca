"""Domain exceptions.

Repositories raise these; the web layer turns them into
``{"error": message}`` responses with the matching HTTP status.
"""


class SalonError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SalonError):
    """Request data failed a business validation rule."""

    status_code = 400


class InvalidOperationError(SalonError):
    """The operation is not allowed in the record's current state."""

    status_code = 400


class PermissionDeniedError(SalonError):
    """The supplied PIN does not authorize the operation."""

    status_code = 403


class NotFoundError(SalonError):
    """A referenced record does not exist."""

    status_code = 404

    @classmethod
    def for_record(cls, kind: str, record_id) -> "NotFoundError":
        return cls(f"{kind} not found: {record_id}")
