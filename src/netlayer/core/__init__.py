"""
Core pure functions for netlayer.

This package contains I/O-free functions for request encoding, multipart
construction, decoding and response classification.
"""

from .classify import classify, unwrap
from .decoding import decode, get_adapter, try_decode
from .encoding import (
    FORM_CONTENT_TYPE,
    PreparedRequest,
    encode_parameters,
    format_scalar,
    merge_headers,
    prepare_request,
    query_components,
)
from .multipart import (
    MultipartForm,
    MultipartPart,
    append_parameters,
    build_multipart,
    prepare_multipart_request,
)

__all__ = [
    # Classification
    "classify",
    "unwrap",
    # Decoding
    "decode",
    "get_adapter",
    "try_decode",
    # Encoding
    "FORM_CONTENT_TYPE",
    "PreparedRequest",
    "encode_parameters",
    "format_scalar",
    "merge_headers",
    "prepare_request",
    "query_components",
    # Multipart
    "MultipartForm",
    "MultipartPart",
    "append_parameters",
    "build_multipart",
    "prepare_multipart_request",
]
