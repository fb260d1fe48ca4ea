"""
Typed dispatch of API requests.

``Dispatcher`` sends an ``APIRequest`` and hands back the decoded response
through one of several calling conventions:

- ``await dispatcher.request(req)``: async/await
- ``dispatcher.request_sync(req)``: blocking
- ``dispatcher.request_callback(req, on_success, on_error)``: fire and forget
- ``dispatcher.stream(req)``: lazy single-value async stream

Every convention goes through the same pipeline: prepare, transport,
classify, deliver. Passing ``files`` turns any of them into a multipart
upload.
"""

import asyncio
import threading
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Coroutine,
    Generic,
    Mapping,
    Optional,
    TypeVar,
)

import httpx

from .api_request import APIRequest
from .config import Settings, get_logger, get_settings
from .core.classify import classify, unwrap
from .core.encoding import PreparedRequest, prepare_request
from .core.multipart import prepare_multipart_request
from .delivery import DeliveryLoop
from .exceptions import BackendError, TransportError
from .models import (
    BackendFailure,
    MultipartFile,
    Outcome,
    RawResponse,
    Success,
)
from .registry import PendingCall, PendingCallRegistry
from .transport import HTTPTransport

T = TypeVar("T")

Files = Optional[Mapping[str, MultipartFile]]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Dispatcher:
    """
    Sends API requests and delivers typed results.

    Non-blocking calls (callbacks and stream subscriptions) are tracked in a
    registry until they complete, and their callbacks always run on a single
    event loop: the loop that was running when the first non-blocking call
    was made, or a background loop owned by the dispatcher when there was
    none.

    Examples:
        Async usage:
        >>> async with Dispatcher() as dispatcher:
        ...     token = await dispatcher.request(Login("a", "b"))

        Callbacks:
        >>> dispatcher.request_callback(
        ...     Login("a", "b"),
        ...     on_success=lambda token: print(token),
        ...     on_error=lambda error: print(error),
        ... )
        >>> dispatcher.cancel_all()

        Testing against a stub backend:
        >>> dispatcher = Dispatcher(transport=httpx.MockTransport(handler))
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
        http_transport: Optional[HTTPTransport] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            settings: Settings to use; read from the environment when omitted
            transport: httpx transport for blocking calls (and async calls if
                it supports them, like ``httpx.MockTransport``)
            async_transport: httpx transport for async calls
            http_transport: Fully built transport, overrides the two above
        """
        self.settings = settings or get_settings()
        self.settings.setup_logging()
        self.logger = get_logger("dispatch")

        self._transport = http_transport or HTTPTransport(
            self.settings, transport=transport, async_transport=async_transport
        )
        self._pending = PendingCallRegistry()
        self._background: Optional[DeliveryLoop] = None
        self._delivery_loop: Optional[asyncio.AbstractEventLoop] = None
        self._bind_lock = threading.Lock()

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "Dispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def delivery_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """Loop callbacks are delivered on, once bound."""
        return self._delivery_loop

    async def request(self, api_request: APIRequest, files: Files = None) -> Any:
        """Send ``api_request`` and return the decoded response.

        Raises:
            BackendError: The server returned an error payload that decoded
                as ``api_request.error_type``
            TransportError: Any other failure
        """
        return await self._send(self._prepare(api_request, files), api_request)

    async def _send(self, prepared: PreparedRequest, api_request: APIRequest) -> Any:
        raw = await self._transport.execute_async(prepared, api_request.response_type)
        return self._finish(prepared, raw, api_request.error_type)

    def request_sync(self, api_request: APIRequest, files: Files = None) -> Any:
        """Blocking version of request."""
        prepared = self._prepare(api_request, files)
        raw = self._transport.execute(prepared, api_request.response_type)
        return self._finish(prepared, raw, api_request.error_type)

    def request_callback(
        self,
        api_request: APIRequest,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        files: Files = None,
    ) -> PendingCall:
        """Send ``api_request`` without waiting for it.

        Exactly one of ``on_success`` / ``on_error`` is called, once, unless
        the call is cancelled first.
        """
        return self._start(api_request, files, on_success, on_error)

    def stream(self, api_request: APIRequest, files: Files = None) -> "ResponseStream":
        """Lazy stream that sends ``api_request`` each time it is consumed."""
        return ResponseStream(self, api_request, files)

    def cancel_all(self) -> int:
        """Cancel every pending non-blocking call and return how many there were."""
        count = self._pending.cancel_all()
        if count:
            self.logger.debug("Cancelled %d pending call(s)", count)
        return count

    def close(self) -> None:
        self.cancel_all()
        self._transport.close()
        with self._bind_lock:
            background, self._background = self._background, None
            if background is not None:
                self._delivery_loop = None
        if background is not None:
            background.stop()

    def _prepare(self, api_request: APIRequest, files: Files) -> PreparedRequest:
        default_headers = self.settings.default_headers()
        if files is None:
            return prepare_request(api_request.network_request, default_headers)
        return prepare_multipart_request(
            api_request.network_request, files, default_headers
        )

    def _finish(self, prepared: PreparedRequest, raw: RawResponse, error_type: Any) -> Any:
        outcome = classify(raw, error_type)
        self._log_outcome(prepared, outcome)
        return unwrap(outcome)

    def _log_outcome(self, prepared: PreparedRequest, outcome: Outcome) -> None:
        if isinstance(outcome, Success):
            self.logger.debug("Completed %s %s", prepared.method, prepared.url)
        elif isinstance(outcome, BackendFailure):
            self.logger.info(
                "Backend error for %s %s (status %s)",
                prepared.method,
                prepared.url,
                outcome.status_code,
            )
        else:
            self.logger.info(
                "Transport error for %s %s: %r",
                prepared.method,
                prepared.url,
                outcome.error,
            )

    def _start(
        self,
        api_request: APIRequest,
        files: Files,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> PendingCall:
        prepared = self._prepare(api_request, files)
        call = self._pending.register(f"{prepared.method} {prepared.url}")
        coro = self._deliver(
            call, prepared, api_request, on_success, on_error, on_complete
        )
        handle = self._schedule(coro)
        handle.add_done_callback(lambda done: self._on_done(call, done))
        call.attach(handle)
        return call

    async def _deliver(
        self,
        call: PendingCall,
        prepared: PreparedRequest,
        api_request: APIRequest,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        on_complete: Optional[Callable[[], None]],
    ) -> None:
        try:
            value = await self._send(prepared, api_request)
        except (BackendError, TransportError) as e:
            if self._pending.complete(call):
                on_error(e)
            return
        except Exception as e:
            self.logger.exception("Unexpected failure in call %s", call.label)
            if self._pending.complete(call):
                on_error(TransportError(e))
            return

        if self._pending.complete(call):
            on_success(value)
            if on_complete is not None:
                on_complete()

    def _on_done(self, call: PendingCall, handle: Any) -> None:
        self._pending.discard(call)
        if handle.cancelled():
            self.logger.debug("Call %s cancelled", call.label)
            return
        error = handle.exception()
        if error is not None:
            self.logger.error(
                "Unhandled error in call %s", call.label, exc_info=error
            )

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> Any:
        loop = self._bind_delivery_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            return loop.create_task(coro)
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def _bind_delivery_loop(self) -> asyncio.AbstractEventLoop:
        with self._bind_lock:
            if self._delivery_loop is None or self._delivery_loop.is_closed():
                try:
                    self._delivery_loop = asyncio.get_running_loop()
                except RuntimeError:
                    if self._background is None:
                        self._background = DeliveryLoop()
                    self._delivery_loop = self._background.loop
            return self._delivery_loop


class ResponseStream(Generic[T]):
    """
    Single-result stream for one API request.

    Nothing is sent until the stream is consumed. Each consumption sends a
    fresh request and produces either one value or one error.

    Example:
        >>> async for token in dispatcher.stream(Login("a", "b")):
        ...     print(token)
    """

    def __init__(self, dispatcher: Dispatcher, api_request: APIRequest, files: Files = None):
        self._dispatcher = dispatcher
        self._api_request = api_request
        self._files = files

    def __aiter__(self) -> AsyncIterator[T]:
        return self._produce()

    async def _produce(self) -> AsyncIterator[T]:
        yield await self._dispatcher.request(self._api_request, self._files)

    async def first(self) -> T:
        return await self._dispatcher.request(self._api_request, self._files)

    def subscribe(
        self,
        on_value: SuccessCallback,
        on_error: ErrorCallback,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> PendingCall:
        """Start a tracked subscription; ``on_complete`` follows ``on_value``."""
        return self._dispatcher._start(
            self._api_request, self._files, on_value, on_error, on_complete
        )
