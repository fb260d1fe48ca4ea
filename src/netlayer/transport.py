"""
HTTP transport built on httpx.

The transport issues prepared requests, validates the status code and
decodes successful bodies. Failures are captured in the returned
``RawResponse`` rather than raised so the classifier can inspect them.
"""

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .config import Settings, get_logger, get_settings
from .core.decoding import decode
from .core.encoding import PreparedRequest
from .models import RawResponse

# UnicodeEncodeError (a ValueError) comes from non-ASCII header values and
# TypeError from values httpx cannot serialize, both while building the request
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError)


class HTTPTransport:
    """httpx-backed transport with a blocking and an async entry point."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger("transport")
        self._async_transport = async_transport
        if self._async_transport is None and isinstance(
            transport, httpx.AsyncBaseTransport
        ):
            self._async_transport = transport

        self._client = httpx.Client(transport=transport, **self._client_kwargs())

    def _client_kwargs(self) -> Dict[str, Any]:
        return {
            "timeout": httpx.Timeout(self.settings.timeout_seconds),
            "follow_redirects": self.settings.follow_redirects,
            "verify": self.settings.verify_ssl,
        }

    def execute(self, prepared: PreparedRequest, response_type: Any) -> RawResponse:
        """Issue ``prepared`` and block until the response is read."""
        self.logger.debug("Request: %s %s", prepared.method, prepared.url)
        try:
            request = self._client.build_request(**prepared.as_httpx_kwargs())
            response = self._client.send(request)
        except TRANSPORT_ERRORS as e:
            self.logger.debug(
                "Transport failure for %s %s: %r", prepared.method, prepared.url, e
            )
            return RawResponse(error=e)

        return self._read_response(response, response_type)

    async def execute_async(
        self, prepared: PreparedRequest, response_type: Any
    ) -> RawResponse:
        """Issue ``prepared`` on the running event loop."""
        self.logger.debug("Request: %s %s", prepared.method, prepared.url)
        # async clients are tied to the loop they first run on, so each call
        # gets its own
        async with httpx.AsyncClient(
            transport=self._async_transport, **self._client_kwargs()
        ) as client:
            try:
                request = client.build_request(**prepared.as_httpx_kwargs())
                response = await client.send(request)
            except TRANSPORT_ERRORS as e:
                self.logger.debug(
                    "Transport failure for %s %s: %r", prepared.method, prepared.url, e
                )
                return RawResponse(error=e)

        return self._read_response(response, response_type)

    def _read_response(self, response: httpx.Response, response_type: Any) -> RawResponse:
        content = response.content
        try:
            response.raise_for_status()
            value = decode(content, response_type)
        except (httpx.HTTPStatusError, ValidationError) as e:
            return RawResponse(
                status_code=response.status_code, content=content, error=e
            )

        return RawResponse(
            status_code=response.status_code,
            content=content,
            value=value,
            decoded=True,
        )

    def close(self) -> None:
        self._client.close()
