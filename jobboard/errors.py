"""
Error taxonomy for the data-access layer.

Each error carries the client-fault status a transport layer should
answer with. Storage failures are not wrapped: SQLAlchemy exceptions
reach the caller unmodified.
"""

from typing import List, Optional


class JobBoardError(Exception):
    """Base class for errors raised by builders and repositories."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JobBoardError):
    """Malformed or empty input reached a builder or repository."""

    status = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFoundError(JobBoardError):
    """No row matched the requested primary key."""

    status = 404


class ConflictError(JobBoardError):
    """A uniqueness constraint rejected the write."""

    status = 409
