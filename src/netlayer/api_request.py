"""
The capability set every dispatchable request provides.
"""

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from .models import ErrorMessage, NetworkRequest

T = TypeVar("T")
E = TypeVar("E")


@runtime_checkable
class APIRequest(Protocol):
    """
    Anything the dispatcher can send.

    Attributes:
        response_type: Shape the success body is decoded into (any type
            pydantic can validate, or None when no body is expected)
        error_type: Shape a failure body is decoded into
        network_request: The request descriptor

    Example:
        >>> class Login:
        ...     response_type = Token
        ...     error_type = LoginError
        ...
        ...     def __init__(self, user, password):
        ...         self.network_request = NetworkRequest(
        ...             host="https://api.example.com",
        ...             endpoint="/login",
        ...             method=HTTPMethod.POST,
        ...             body={"user": user, "pass": password},
        ...         )
    """

    response_type: Any
    error_type: Any
    network_request: NetworkRequest


@dataclass
class TypedRequest(Generic[T, E]):
    """Ready-made ``APIRequest`` for callers that don't need their own class."""

    network_request: NetworkRequest
    response_type: Any
    error_type: Any = ErrorMessage
