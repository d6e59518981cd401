"""Error kinds raised by the labelhub core.

Exception Hierarchy:
    LabelhubError (base)
    ├── NotFoundError
    ├── UnauthorizedError
    ├── InvalidOperationError
    └── ConflictError

Every subclass carries the HTTP status code the transport layer maps it to,
so routes can translate errors without a lookup table.
"""


class LabelhubError(Exception):
    """Base exception for all labelhub service operations."""

    status_code: int = 400


class NotFoundError(LabelhubError):
    """Raised when a user, project, assignment or review log does not exist."""

    status_code = 404

    def __init__(self, entity: str, identifier: object = None):
        self.entity = entity
        self.identifier = identifier
        if identifier is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} not found: {identifier}")


class UnauthorizedError(LabelhubError):
    """Raised when the caller is not the owner of the record they act on."""

    status_code = 403


class InvalidOperationError(LabelhubError):
    """Raised when an operation is not valid for the current state."""

    status_code = 400


class ConflictError(LabelhubError):
    """Raised when a concurrent write on the same record won the race."""

    status_code = 409
