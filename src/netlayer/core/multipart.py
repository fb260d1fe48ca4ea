"""
Multipart form construction for file uploads.
"""

import uuid
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from ..config import get_logger
from ..models import FileExtension, MultipartFile, NetworkRequest
from .encoding import PreparedRequest, merge_headers

logger = get_logger("multipart")


@dataclass(frozen=True)
class MultipartPart:
    name: str
    data: bytes
    filename: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.filename is not None


class MultipartForm:
    """Ordered list of multipart parts, appended in place."""

    def __init__(self) -> None:
        self.parts: List[MultipartPart] = []

    def append(
        self,
        data: bytes,
        name: str,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> None:
        self.parts.append(MultipartPart(name, data, filename, mime_type))

    def fields(self, name: str) -> List[MultipartPart]:
        return [part for part in self.parts if part.name == name]

    def to_httpx(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        """Render the parts as an httpx ``files`` argument, in order.

        Plain fields go in as filename-less parts so the body is multipart
        even when no file was attached.
        """
        fields: List[Tuple[str, Tuple[Any, ...]]] = []
        for part in self.parts:
            if part.is_file:
                mime_type = part.mime_type or "application/octet-stream"
                fields.append((part.name, (part.filename, part.data, mime_type)))
            else:
                fields.append((part.name, (None, part.data)))
        return fields


def generate_filename(extension: FileExtension) -> str:
    return f"{uuid.uuid4()}{FileExtension(extension).suffix}"


def format_form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def append_value(form: MultipartForm, value: Any, name: str) -> None:
    """Append one stringified value; values that aren't valid UTF-8 are skipped."""
    try:
        data = format_form_value(value).encode("utf-8")
    except UnicodeEncodeError:
        logger.warning("Skipping multipart field %r: value is not valid UTF-8", name)
        return
    form.append(data, name)


def append_parameters(form: MultipartForm, parameters: Mapping[str, Any]) -> None:
    for key, value in parameters.items():
        if isinstance(value, (list, tuple)):
            for element in value:
                append_value(form, element, f"{key}[]")
        else:
            append_value(form, value, key)


def build_multipart(
    network_request: NetworkRequest, files: Mapping[str, MultipartFile]
) -> MultipartForm:
    """Build the multipart body for an upload.

    Every file gets a fresh ``<uuid>.<extension>`` filename and a
    ``<kind>/<extension>`` MIME type. The descriptor's effective parameters
    follow the files: list values are appended element by element under
    ``key[]``, everything else is stringified under ``key``.
    """
    form = MultipartForm()
    for key, upload in files.items():
        form.append(
            upload.data,
            key,
            filename=generate_filename(upload.extension),
            mime_type=upload.mime_type,
        )
    append_parameters(form, network_request.effective_parameters)
    return form


def prepare_multipart_request(
    network_request: NetworkRequest,
    files: Mapping[str, MultipartFile],
    default_headers: Mapping[str, str],
) -> PreparedRequest:
    request = network_request.snapshot()
    fields = build_multipart(request, files).to_httpx()
    return PreparedRequest(
        method=request.method.value,
        url=request.url,
        headers=merge_headers(default_headers, request.headers),
        files=fields,
    )
