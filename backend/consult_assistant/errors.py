"""Error kinds raised inside the consultation assistant."""

from __future__ import annotations


class ConsultAssistantError(Exception):
    """Base error with a machine-readable code and a readable message."""

    code = "ASSISTANT_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class ValidationError(ConsultAssistantError):
    """Raised when a consultation record is missing a required identity field."""

    code = "INVALID_RECORD"


class RemoteServiceError(ConsultAssistantError):
    """Raised when an embedding or generation call fails.

    Covers unreachable hosts, auth and quota errors, timeouts and malformed
    responses. ``status`` holds the provider's HTTP status when one exists.
    """

    code = "REMOTE_SERVICE_ERROR"

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class StorageError(ConsultAssistantError):
    """Raised when the local key-value backend fails."""

    code = "STORAGE_ERROR"
