"""
Error taxonomy shared by services and repositories.

Services raise the domain errors; repositories wrap driver failures in
StorageError. The HTTP layer maps each class to its status code.
"""

from fastapi import status


class ChatError(Exception):
    """Base class for every error surfaced to the API boundary"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChatError):
    """Malformed or out-of-range input"""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ChatError):
    """Missing or unknown bearer token"""

    status_code = status.HTTP_401_UNAUTHORIZED

    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"

    def __init__(self, reason: str):
        message = "Authentication required" if reason == self.MISSING_TOKEN else "Invalid API token"
        super().__init__(message)
        self.reason = reason


class ForbiddenError(ChatError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ChatError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ChatError):
    status_code = status.HTTP_409_CONFLICT


class StorageError(ChatError):
    """Store failure, annotated with the operation that was attempted"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
