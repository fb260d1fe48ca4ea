"""
End-to-end tests against a Litestar stub backend served through httpx's
ASGI transport.
"""

from typing import List, Tuple
from urllib.parse import parse_qs, parse_qsl

import httpx
import pytest
from litestar import Litestar, Request, get, post
from litestar.response import Response
from pydantic import BaseModel

from netlayer import (
    BackendError,
    Dispatcher,
    ErrorMessage,
    HTTPMethod,
    NetworkRequest,
    TransportError,
    TypedRequest,
)
from tests.helpers.shapes import LoginError, Token, login_request, make_settings

HOST = "http://testserver"


class Echo(BaseModel):
    pairs: List[Tuple[str, str]]


@post("/login")
async def login(request: Request) -> Response:
    form = parse_qs((await request.body()).decode("utf-8"))
    if form.get("user") == ["a"] and form.get("pass") == ["b"]:
        return Response({"token": "abc"}, status_code=200)
    return Response({"code": "bad_credentials"}, status_code=401)


@get("/echo")
async def echo(request: Request) -> Response:
    query = request.scope["query_string"].decode("utf-8")
    return Response({"pairs": parse_qsl(query)}, status_code=200)


@get("/down")
async def down() -> Response:
    return Response("maintenance", status_code=503, media_type="text/plain")


def backend() -> Litestar:
    return Litestar(route_handlers=[login, echo, down])


@pytest.fixture
def dispatcher():
    dispatcher = Dispatcher(
        settings=make_settings(),
        async_transport=httpx.ASGITransport(app=backend()),
    )
    yield dispatcher
    dispatcher.close()


class TestStubBackend:
    """Test the async form against a real ASGI application."""

    @pytest.mark.asyncio
    async def test_login_success(self, dispatcher):
        """Test valid credentials decode into a token."""
        token = await dispatcher.request(login_request(host=HOST))
        assert token == Token(token="abc")

    @pytest.mark.asyncio
    async def test_login_bad_credentials(self, dispatcher):
        """Test the server's error payload is recovered as a BackendError."""
        with pytest.raises(BackendError) as exc_info:
            await dispatcher.request(login_request(host=HOST, user="a", **{"pass": "x"}))

        assert exc_info.value.payload == LoginError(code="bad_credentials")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_query_string(self, dispatcher):
        """Test query parameters arrive in order with bracketed arrays."""
        echo_request = TypedRequest(
            NetworkRequest(
                host=HOST,
                endpoint="/echo",
                method=HTTPMethod.GET,
                parameters={"q": "py", "tags": ["x", "y"], "draft": False},
            ),
            response_type=Echo,
        )

        result = await dispatcher.request(echo_request)

        assert result.pairs == [
            ("q", "py"),
            ("tags[]", "x"),
            ("tags[]", "y"),
            ("draft", "0"),
        ]

    @pytest.mark.asyncio
    async def test_plain_text_error(self, dispatcher):
        """Test an error without a structured body is a TransportError."""
        status = TypedRequest(
            NetworkRequest(host=HOST, endpoint="/down"),
            response_type=dict,
            error_type=ErrorMessage,
        )

        with pytest.raises(TransportError) as exc_info:
            await dispatcher.request(status)

        assert isinstance(exc_info.value.error, httpx.HTTPStatusError)
        assert exc_info.value.status_code == 503
