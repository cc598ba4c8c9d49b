"""
Error taxonomy shared by services and routes.

Services raise these; the handler registered in ``app.main`` turns them into
``{"error": <message>, "category": <category>}`` responses.
"""
from fastapi import status


class AdminError(Exception):
    """Base class for failures surfaced to API callers."""
    category = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AdminError):
    """Referenced entity does not exist."""
    category = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidInputError(AdminError):
    """Input is syntactically fine but semantically unacceptable."""
    category = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AdminError):
    """A uniqueness or structural constraint would be violated."""
    category = "conflict"
    status_code = status.HTTP_409_CONFLICT


class HierarchyCycleError(ConflictError):
    """A parent chain loops back on itself."""


class PersistenceError(AdminError):
    """The backing store is unavailable or rejected the write."""
    category = "persistence"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
