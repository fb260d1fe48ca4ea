"""
Decoding of response bodies into caller-declared shapes.
"""

from functools import lru_cache
from typing import Any, Optional, Tuple

from pydantic import TypeAdapter, ValidationError


@lru_cache(maxsize=256)
def _cached_adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def get_adapter(shape: Any) -> TypeAdapter:
    """Return a TypeAdapter for ``shape``, reusing one when the shape is hashable."""
    try:
        return _cached_adapter(shape)
    except TypeError:
        return TypeAdapter(shape)


def decode(content: Optional[bytes], shape: Any) -> Any:
    """Decode JSON ``content`` as ``shape``.

    A ``None`` shape means no body is expected and always decodes to None.
    Anything else must validate; an empty body raises ValidationError.
    """
    if shape is None:
        return None
    return get_adapter(shape).validate_json(content or b"")


def try_decode(content: Optional[bytes], shape: Any) -> Tuple[bool, Any]:
    """Decode ``content`` as ``shape`` without raising.

    Returns ``(False, None)`` when there is no data or no shape to decode
    into, or when validation fails.
    """
    if not content or shape is None:
        return False, None
    try:
        return True, get_adapter(shape).validate_json(content)
    except ValidationError:
        return False, None
