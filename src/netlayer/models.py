"""
Data models for request descriptors, multipart payloads and call outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass
class NetworkRequest:
    """
    Description of a single API call.

    The URL is ``host`` followed by ``endpoint`` with no slash normalization.
    When ``body`` is set it is sent as a form-encoded request body and
    ``parameters`` is not encoded at all; otherwise ``parameters`` becomes the
    query string.

    Attributes:
        host: Scheme and authority, e.g. "https://api.example.com"
        endpoint: Path appended verbatim to the host, e.g. "/login"
        method: HTTP method
        parameters: Query parameters, in insertion order
        body: Optional body parameters, takes precedence over ``parameters``
        headers: Request headers, override the dispatcher defaults

    Example:
        >>> login = NetworkRequest(
        ...     host="https://api.example.com",
        ...     endpoint="/login",
        ...     method=HTTPMethod.POST,
        ... ).merge_body({"user": "a", "pass": "b"})
        >>> login.url
        'https://api.example.com/login'
    """

    host: str
    endpoint: str
    method: HTTPMethod = HTTPMethod.GET
    parameters: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"{self.host}{self.endpoint}"

    @property
    def effective_parameters(self) -> Dict[str, Any]:
        """Parameters that will actually be encoded for this request."""
        if self.body is not None:
            return self.body
        return self.parameters

    @property
    def encoding(self) -> str:
        """Either "form" (body) or "query"."""
        return "form" if self.body is not None else "query"

    def merge_query(self, params: Dict[str, Any]) -> "NetworkRequest":
        self.parameters.update(params)
        return self

    def merge_headers(self, params: Dict[str, str]) -> "NetworkRequest":
        self.headers.update(params)
        return self

    def merge_body(self, params: Dict[str, Any]) -> "NetworkRequest":
        if self.body is None:
            self.body = {}
        self.body.update(params)
        return self

    def snapshot(self) -> "NetworkRequest":
        """Copy of this request whose mappings are detached from the original."""
        return NetworkRequest(
            host=self.host,
            endpoint=self.endpoint,
            method=HTTPMethod(self.method),
            parameters=dict(self.parameters),
            body=dict(self.body) if self.body is not None else None,
            headers=dict(self.headers),
        )


class FileKind(str, Enum):
    FILE = "file"
    IMAGE = "image"
    VIDEO = "video"


class FileExtension(str, Enum):
    PNG = "png"
    JPG = "jpg"
    JPEG = "jpeg"
    MP4 = "mp4"
    MP3 = "mp3"
    MKV = "mkv"
    TXT = "txt"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


@dataclass(frozen=True)
class MultipartFile:
    """
    A file uploaded as one multipart field.

    The filename is generated when the form is built; only the kind and
    extension are needed to derive the MIME type.

    Example:
        >>> avatar = MultipartFile(FileKind.IMAGE, FileExtension.PNG, png_bytes)
        >>> avatar.mime_type
        'image/png'
    """

    kind: FileKind
    extension: FileExtension
    data: bytes

    @property
    def mime_type(self) -> str:
        return f"{FileKind(self.kind).value}/{FileExtension(self.extension).value}"


class ErrorMessage(BaseModel):
    """Default backend error shape: any JSON object with a ``message``."""

    model_config = ConfigDict(extra="allow")

    message: str
    code: Optional[str] = None


@dataclass
class RawResponse(Generic[T]):
    """
    What the transport hands back for one call.

    ``decoded`` is True when the status was successful and the body decoded
    as the declared response type; ``error`` is set for every failure. A
    network failure has no status code and no content.
    """

    status_code: Optional[int] = None
    content: Optional[bytes] = None
    value: Optional[T] = None
    error: Optional[BaseException] = None
    decoded: bool = False


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class BackendFailure:
    error: Any
    status_code: Optional[int] = None


@dataclass(frozen=True)
class TransportFailure:
    error: BaseException
    status_code: Optional[int] = None


Outcome = Union[Success, BackendFailure, TransportFailure]
