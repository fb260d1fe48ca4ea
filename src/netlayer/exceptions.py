"""
Exceptions raised by netlayer calls.

Callers tell the two failure categories apart by type: ``BackendError``
carries the structured error payload the server returned, ``TransportError``
carries the original lower-level failure unchanged.
"""

from typing import Any, Dict, Optional


class NetworkLayerError(Exception):
    """Base exception for netlayer errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BackendError(NetworkLayerError):
    """Raised when the server answered with a decodable error payload."""

    MESSAGE_FIELDS = ("message", "localized_description", "detail", "error")

    def __init__(self, payload: Any, status_code: Optional[int] = None):
        self.payload = payload
        self.status_code = status_code
        super().__init__(
            self._message_from(payload, status_code),
            {"status_code": status_code},
        )

    @classmethod
    def _message_from(cls, payload: Any, status_code: Optional[int]) -> str:
        for field_name in cls.MESSAGE_FIELDS:
            if isinstance(payload, dict):
                value = payload.get(field_name)
            else:
                value = getattr(payload, field_name, None)
            if isinstance(value, str) and value:
                return value
        if status_code is not None:
            return f"Backend error ({status_code}): {payload!r}"
        return f"Backend error: {payload!r}"


class TransportError(NetworkLayerError):
    """Raised when no structured error payload could be recovered.

    ``error`` is the original exception (network failure, timeout, bad
    status, undecodable body) exactly as the transport produced it.
    """

    def __init__(self, error: BaseException, status_code: Optional[int] = None):
        self.error = error
        self.status_code = status_code
        super().__init__(
            str(error) or type(error).__name__,
            {"status_code": status_code, "error_type": type(error).__name__},
        )


class ResponseInvariantError(NetworkLayerError):
    """A raw response carried both a value and an error, or neither."""

    pass
