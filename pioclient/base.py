"""
pioclient Base Client
Request executor shared by EventClient and EngineClient.

Every request runs on one httpx.AsyncClient hosted by a private event loop on
the client's I/O thread. ``execute_async`` hands back a
``concurrent.futures.Future`` right away; ``execute`` blocks on the same
future. Inside asyncio code, await a future with ``asyncio.wrap_future``.
"""

import asyncio
import json
import logging
import threading
from concurrent.futures import Future
from typing import Any, Coroutine, Dict, Optional, Type
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .config import ClientConfig, access_key_from_env
from .exceptions import (
    ClientClosedError,
    InvalidArgumentError,
    ParseError,
    PioClientError,
    TransportError,
)
from .schemas import ServerStatus

logger = logging.getLogger(__name__)

METHODS = ("GET", "POST")


class _IOLoop:
    """Event loop running forever on a dedicated thread."""

    def __init__(self, name: str):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self):
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_forever()
        finally:
            self.loop.close()

    def submit(self, coro: Coroutine) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def is_current(self) -> bool:
        """True when called from the loop thread, e.g. inside a future callback."""
        return threading.current_thread() is self._thread

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()


class BaseClient:
    """
    Sends requests to a PredictionIO-style REST server.

    Usage:
        with EventClient("ACCESS_KEY") as client:
            future = client.execute_async("/events.json", "POST", {...}, ApiResponse)
            response = future.result()
    """

    def __init__(
        self,
        access_key: Optional[str],
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        access_key = access_key or access_key_from_env()
        if not access_key:
            raise InvalidArgumentError("an access key is required")

        self.access_key = access_key
        self.config = config
        self.base_url = config.base_url.rstrip('/')

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.timeout,
            limits=httpx.Limits(max_connections=config.max_connections),
            transport=transport,
        )
        self._io = _IOLoop(name=f"pioclient-{type(self).__name__}")
        self._lock = threading.Lock()
        self._closed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Cancel pending calls, release the connection pool and stop the I/O thread."""
        self._check_blocking_allowed("close()")
        if not self._mark_closed():
            return
        try:
            self._io.submit(self._shutdown()).result()
        finally:
            self._io.stop()

    async def aclose(self):
        """Same as close(), awaitable from a running event loop."""
        if not self._mark_closed():
            return
        try:
            await asyncio.wrap_future(self._io.submit(self._shutdown()))
        finally:
            self._io.stop()

    def _mark_closed(self) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            return True

    async def _shutdown(self):
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self._http.aclose()
        logger.debug("%r closed (%d pending calls cancelled)", self, len(pending))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def with_access_key(self, path: str) -> str:
        """Append the access key to a resource path."""
        separator = '&' if '?' in path else '?'
        return f"{path}{separator}accessKey={quote(self.access_key, safe='')}"

    def execute_async(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        model: Optional[Type[BaseModel]] = None,
    ) -> Future:
        """
        Start a request and return a future for its result.

        Args:
            path: Server-relative resource path
            method: GET or POST
            body: JSON-serializable request entity
            model: Response model to validate the body into; the decoded
                JSON is returned as-is when omitted

        The future raises TransportError or ParseError on failure.
        Argument problems raise InvalidArgumentError here, before anything
        is sent.
        """
        method = method.upper()
        if method not in METHODS:
            raise InvalidArgumentError(f"unsupported HTTP method: {method}")

        content = None
        if body is not None:
            try:
                content = json.dumps(body)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"request body is not JSON serializable: {e}") from e

        url = self.with_access_key(path)
        return self._submit(self._send(method, path, url, content, model))

    def execute(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """Blocking form of execute_async()."""
        return self._wait(self.execute_async(path, method, body, model))

    def is_alive_async(self) -> Future:
        """Future resolving to True when the server root reports status "alive"."""
        try:
            return self._submit(self._check_alive(self.with_access_key("/")))
        except ClientClosedError:
            future: Future = Future()
            future.set_result(False)
            return future

    def is_alive(self) -> bool:
        """Check server liveness. Never raises on transport or parse failures."""
        return self._wait(self.is_alive_async())

    def _check_blocking_allowed(self, what: str):
        # the loop would wait on itself
        if self._io.is_current():
            raise InvalidArgumentError(
                f"{what} cannot block inside a {type(self).__name__} callback; "
                "use the *_async variant instead"
            )

    def _wait(self, future: Future) -> Any:
        """Block until a future from this client resolves."""
        if self._io.is_current():
            # drop the request instead of leaving it orphaned
            future.cancel()
            self._check_blocking_allowed("a blocking call")
        return future.result()

    def _submit(self, coro: Coroutine) -> Future:
        with self._lock:
            if self._closed:
                coro.close()
                raise ClientClosedError(f"{type(self).__name__} is closed")
            return self._io.submit(coro)

    async def _check_alive(self, url: str) -> bool:
        try:
            status = await self._send("GET", "/", url, None, ServerStatus)
        except PioClientError as e:
            logger.debug("liveness check failed: %s", e)
            return False
        return status.status == "alive"

    async def _send(
        self,
        method: str,
        path: str,
        url: str,
        content: Optional[str],
        model: Optional[Type[BaseModel]],
    ) -> Any:
        headers: Dict[str, str] = {}
        if content is not None:
            headers["Content-Type"] = "application/json"

        # httpx applies its timeout per connect/read/write; this caps the whole call
        try:
            response = await asyncio.wait_for(
                self._http.request(method, url, content=content, headers=headers),
                self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{method} {path} timed out after {self.config.timeout}s",
                body=f"timed out after {self.config.timeout}s",
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e!r}", body=str(e)) from e

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if not response.is_success:
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return self._decode(response, model)

    @staticmethod
    def _decode(response: httpx.Response, model: Optional[Type[BaseModel]]) -> Any:
        text = response.text
        if text.strip():
            try:
                data = response.json()
            except ValueError as e:
                raise ParseError(f"response is not valid JSON: {e}", body=text) from e
        elif model is None:
            return None
        else:
            data = {}

        if model is None:
            return data
        try:
            return model.model_validate(data, context={"status_code": response.status_code})
        except ValidationError as e:
            raise ParseError(f"response does not match {model.__name__}: {e}", body=text) from e
