"""Base HTTP client with retry logic and a shared error sink."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from telemetry_client.errors import TransferError

# Default settings
API_BASE_URL = "https://apptelemetry.io/api/v1"
API_TIMEOUT = 60

ErrorHandler = Callable[[TransferError], None]


def url_for_path(*parts: Any) -> str:
    """Join path segments, e.g. url_for_path("apps", app_id, "insightgroups")."""
    return "/".join(str(p).strip("/") for p in parts)


def _is_retryable_error(exc: BaseException) -> bool:
    """Check if exception is retryable (network errors + 5xx server errors)."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class BaseClient:
    """Base async HTTP client with bounded concurrency and typed errors.

    Every public request helper raises `TransferError` on failure. Callers that
    do not want to handle it themselves pass it to `handle_error`, which logs
    it and forwards it to every registered error handler.
    """

    def __init__(
        self,
        max_concurrent: int = 20,
        base_url: str | None = None,
        token: str | None = None,
        timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._request_count = 0
        self._base_url = base_url or API_BASE_URL
        self._token = token
        self._timeout = timeout or API_TIMEOUT
        self._transport = transport
        self._error_handlers: list[ErrorHandler] = []
        logger.info("{}: base_url={}, max_concurrent={}", self.__class__.__name__, self._base_url, max_concurrent)

    async def __aenter__(self):
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_):
        logger.info("Total API requests: {}", self._request_count)
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def request_count(self) -> int:
        return self._request_count

    # ========== Error sink ==========

    def add_error_handler(self, handler: ErrorHandler) -> None:
        """Register a callback that receives every error passed to `handle_error`."""
        self._error_handlers.append(handler)

    def handle_error(self, error: TransferError) -> None:
        """Shared error sink for failures nobody returns to a caller."""
        logger.error("API error: {}", error)
        for handler in self._error_handlers:
            handler(error)

    # ========== Requests ==========

    async def _request(self, method: str, path: str, body: Any = None, text: bool = False) -> Any:
        """Send one request; raises httpx errors."""
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} used outside of 'async with'")
        async with self._sem:
            self._request_count += 1
            logger.debug("{} {}", method, path)
            resp = await self._client.request(method, path, json=body)
            resp.raise_for_status()
            return resp.text if text else resp.json()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def _get_with_retry(self, path: str) -> Any:
        """GET request with retry logic."""
        return await self._request("GET", path)

    async def _transfer(self, coro) -> Any:
        """Await a request, converting httpx and JSON failures into TransferError."""
        try:
            return await coro
        except (httpx.HTTPError, ValueError) as e:
            raise TransferError.from_exception(e) from e

    async def _get(self, path: str) -> Any:
        return await self._transfer(self._get_with_retry(path))

    async def _post(self, path: str, body: Any) -> Any:
        return await self._transfer(self._request("POST", path, body))

    async def _patch(self, path: str, body: Any) -> Any:
        return await self._transfer(self._request("PATCH", path, body))

    async def _delete(self, path: str, text: bool = False) -> Any:
        return await self._transfer(self._request("DELETE", path, text=text))
