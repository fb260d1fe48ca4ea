"""
Response classification.

Turns what the transport produced into exactly one outcome: a decoded
value, a decoded backend error payload, or the original transport failure.
"""

from typing import Any

from ..exceptions import BackendError, ResponseInvariantError, TransportError
from ..models import BackendFailure, Outcome, RawResponse, Success, TransportFailure
from .decoding import try_decode


def classify(raw: RawResponse, error_type: Any) -> Outcome:
    """Classify a raw response. Never raises.

    A failure becomes a ``BackendFailure`` only when the body decodes as
    ``error_type``; otherwise the transport's own error is kept as is.
    Success values are passed through without decoding them again.
    """
    if raw.error is not None and not raw.decoded:
        decoded, payload = try_decode(raw.content, error_type)
        if decoded:
            return BackendFailure(payload, raw.status_code)
        return TransportFailure(raw.error, raw.status_code)

    if raw.decoded and raw.error is None:
        return Success(raw.value)

    if raw.decoded:
        problem = "response carried both a decoded value and an error"
    else:
        problem = "response carried neither a decoded value nor an error"
    return TransportFailure(
        ResponseInvariantError(problem, {"status_code": raw.status_code}),
        raw.status_code,
    )


def unwrap(outcome: Outcome) -> Any:
    """Return the success value or raise the matching exception."""
    if isinstance(outcome, Success):
        return outcome.value
    if isinstance(outcome, BackendFailure):
        raise BackendError(outcome.error, outcome.status_code)
    if isinstance(outcome, TransportFailure):
        raise TransportError(outcome.error, outcome.status_code) from outcome.error
    raise TypeError(f"Unknown outcome: {outcome!r}")
