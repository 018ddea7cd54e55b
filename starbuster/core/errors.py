"""Error categories for failures reported by the analysis service."""

from enum import Enum
from typing import Optional

from starbuster.core.constants import ERROR_MESSAGES


class ErrorKind(Enum):
    INVALID_INPUT = "invalid-input"
    NOT_FOUND = "not-found"
    SERVER_ERROR = "server-error"
    NETWORK_ERROR = "network-error"
    UNKNOWN = "unknown"


class AnalysisServiceError(Exception):
    """Raised when an analysis cannot be obtained from the service."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return user_message(self.kind, self.message)


def _classify_message(message: str) -> ErrorKind:
    # Untyped errors only carry a message; match the markers the service emits
    if "400" in message or "Invalid" in message:
        return ErrorKind.INVALID_INPUT
    if "404" in message or "not found" in message:
        return ErrorKind.NOT_FOUND
    if "500" in message or "Internal" in message:
        return ErrorKind.SERVER_ERROR
    if "Network" in message or "fetch" in message:
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN


def classify_error(status_code: Optional[int] = None, message: str = "") -> ErrorKind:
    """
    Map a failed request to an ErrorKind.

    The HTTP status code wins when present; the message markers are only
    consulted for responses without a usable status.
    """
    if status_code:
        if status_code in (400, 422):
            return ErrorKind.INVALID_INPUT
        if status_code == 404:
            return ErrorKind.NOT_FOUND
        if status_code >= 500:
            return ErrorKind.SERVER_ERROR
    return _classify_message(message or "")


def user_message(kind: ErrorKind, raw_message: str = "") -> str:
    """User-facing sentence for an error category."""
    return ERROR_MESSAGES.get(kind.value, raw_message or "An unexpected error occurred")
