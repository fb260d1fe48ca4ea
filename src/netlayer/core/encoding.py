"""
Pure functions for turning a request descriptor into transport arguments.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from ..models import NetworkRequest

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


@dataclass
class PreparedRequest:
    """Everything the transport needs to issue one call."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[List[Tuple[str, str]]] = None
    content: Optional[bytes] = None
    files: Optional[List[Tuple[str, Tuple[Any, ...]]]] = None

    def as_httpx_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
        }
        if self.params:
            kwargs["params"] = self.params
        if self.content is not None:
            kwargs["content"] = self.content
        if self.files is not None:
            kwargs["files"] = self.files
        return kwargs


def format_scalar(value: Any) -> str:
    """Format a single parameter value for URL encoding."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def query_components(key: str, value: Any) -> List[Tuple[str, str]]:
    """Expand one parameter into key/value pairs.

    Lists become repeated ``key[]`` pairs and mappings become
    ``key[subkey]`` pairs, recursively.
    """
    if isinstance(value, Mapping):
        components: List[Tuple[str, str]] = []
        for nested_key, nested_value in value.items():
            components.extend(query_components(f"{key}[{nested_key}]", nested_value))
        return components
    if isinstance(value, (list, tuple)):
        components = []
        for element in value:
            components.extend(query_components(f"{key}[]", element))
        return components
    return [(key, format_scalar(value))]


def encode_parameters(parameters: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """Encode a parameter mapping into ordered key/value pairs."""
    pairs: List[Tuple[str, str]] = []
    for key, value in parameters.items():
        pairs.extend(query_components(key, value))
    return pairs


def merge_headers(
    defaults: Mapping[str, str], overrides: Mapping[str, str]
) -> Dict[str, str]:
    """Merge request headers over defaults, matching names case-insensitively."""
    overridden = {name.lower() for name in overrides}
    merged = {
        name: value for name, value in defaults.items() if name.lower() not in overridden
    }
    merged.update(overrides)
    return merged


def prepare_request(
    network_request: NetworkRequest, default_headers: Mapping[str, str]
) -> PreparedRequest:
    """Build a plain (non-multipart) request from a descriptor.

    The descriptor is copied first, so later mutations of it do not reach
    the prepared request.
    """
    request = network_request.snapshot()
    headers = merge_headers(default_headers, request.headers)
    pairs = encode_parameters(request.effective_parameters)

    if request.encoding == "form":
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return PreparedRequest(
            method=request.method.value,
            url=request.url,
            headers=headers,
            content=urlencode(pairs).encode("utf-8"),
        )

    return PreparedRequest(
        method=request.method.value,
        url=request.url,
        headers=headers,
        params=pairs,
    )
