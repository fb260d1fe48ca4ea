"""
netlayer

Typed API requests over httpx: declare a request, get back a decoded value
or a typed error.
"""

from .api_request import APIRequest, TypedRequest
from .config import Settings, get_settings
from .dispatch import Dispatcher, ResponseStream
from .exceptions import (
    BackendError,
    NetworkLayerError,
    ResponseInvariantError,
    TransportError,
)
from .models import (
    BackendFailure,
    ErrorMessage,
    FileExtension,
    FileKind,
    HTTPMethod,
    MultipartFile,
    NetworkRequest,
    Outcome,
    RawResponse,
    Success,
    TransportFailure,
)
from .registry import PendingCall, PendingCallRegistry
from .transport import HTTPTransport

__version__ = "1.0.0"

__all__ = [
    "APIRequest",
    "TypedRequest",
    "Dispatcher",
    "ResponseStream",
    "HTTPTransport",
    "PendingCall",
    "PendingCallRegistry",
    "Settings",
    "get_settings",
    "NetworkRequest",
    "HTTPMethod",
    "MultipartFile",
    "FileKind",
    "FileExtension",
    "ErrorMessage",
    "RawResponse",
    "Outcome",
    "Success",
    "BackendFailure",
    "TransportFailure",
    "NetworkLayerError",
    "BackendError",
    "TransportError",
    "ResponseInvariantError",
]
