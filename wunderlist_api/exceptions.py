"""
Wunderlist Client Exceptions

Errors raised for infrastructure and parsing failures. Business-level
rejections (the server answered but said no) are not exceptions: the
client returns False/None for those.

Usage:
    from wunderlist_api.exceptions import (
        WunderlistException,
        TransportError,
        ProtocolError,
        SessionAcquisitionError,
        UnsupportedEntityError,
        UnknownListError,
    )
"""
from typing import Any, Dict, Optional


def wrap_transport_error(
    exc: Exception,
    operation: str,
    details: Optional[Dict[str, Any]] = None
) -> 'TransportError':
    """
    Wrap a requests exception into a TransportError with context.

    Args:
        exc: The original exception to wrap
        operation: The operation that failed (e.g., "lists", "save_task")
        details: Optional additional details

    Returns:
        TransportError carrying the operation and original error
    """
    error_details = dict(details or {})
    error_details.update({
        'operation': operation,
        'original_error': str(exc),
        'error_type': type(exc).__name__,
    })

    return TransportError(
        message=f"Wunderlist operation '{operation}' failed: {exc}",
        details=error_details,
        cause=exc
    )


class WunderlistException(Exception):
    """
    Base exception for all client errors.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message})"


class TransportError(WunderlistException):
    """Raised when the server could not be reached (network/socket failure)."""
    pass


class ProtocolError(WunderlistException):
    """Raised when a response is not the expected JSON or HTML shape."""
    pass


class SessionAcquisitionError(WunderlistException):
    """Raised when no session cookie could be read from the bootstrap response."""

    def __init__(self, message: str = "No WLSESSID cookie in session bootstrap response", **kwargs):
        super().__init__(message, **kwargs)


class UnsupportedEntityError(WunderlistException, TypeError):
    """Raised when save/destroy receives something that is not a TaskList or Task."""

    def __init__(self, entity: Any, message: str = None):
        self.entity = entity
        super().__init__(message or f"Unsupported entity type: {type(entity).__name__}")


class UnknownListError(WunderlistException, KeyError):
    """Raised when a list id is not present in the list cache."""

    def __init__(self, list_id: Any, message: str = None):
        self.list_id = list_id
        super().__init__(message or f"List not found: {list_id}")

    def __str__(self) -> str:
        return self.message


class DetachedEntityError(WunderlistException):
    """Raised when an entity with no client attached is asked to save or destroy itself."""

    def __init__(self, entity: Any, message: str = None):
        self.entity = entity
        super().__init__(message or f"{type(entity).__name__} is not attached to a client")
