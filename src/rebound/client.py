import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any, Callable, Union

from .adapters import HttpxTransport, RequestsTransport
from .env import DEFAULT_PREFIX, load_base_url_from_env, load_client_options_from_env
from .policies import RetryPolicy, coerce_retry_config
from .request import QueryParams, build_request
from .state import RetryState
from .types import ClientOptions, Method, RequestDescriptor, RetryConfig

GET: Method = "GET"
POST: Method = "POST"


# ---------- Base client (shared config; I/O handled by subclasses) ----------


class _BaseClient:
    def __init__(
        self,
        base_url: str,
        options: Union[ClientOptions, None] = None,
        retry_config: Union[RetryConfig, int, None] = None,
        log_level: Union[int, None] = None,
        **kwargs,
    ):
        """Initialize a client.

        Args:
            base_url (str): prefix for every request path, used verbatim
            options (ClientOptions | None): timeout, retry budget and default headers
            retry_config (RetryConfig | int | None): backoff settings or a bare retry budget
            log_level (int | None): level for the "rebound" logger
            kwargs (used when no options object is given):
            - timeout: float
            - max_retries: int
            - headers: dict[str, str]
        """
        self.base_url = base_url
        self.retry_config = coerce_retry_config(retry_config)
        if options is None:
            options = ClientOptions(
                timeout=kwargs.get("timeout"),
                max_retries=kwargs.get("max_retries", self.retry_config.max_retries),
                headers=dict(kwargs.get("headers") or {}),
            )
        elif options.max_retries is None and self.retry_config.max_retries is not None:
            options = ClientOptions(
                timeout=options.timeout,
                max_retries=self.retry_config.max_retries,
                headers=options.headers,
            )
        self.options = options
        self.timeout = options.timeout
        self._req_headers: dict[str, str] = dict(options.headers)
        self._policy = RetryPolicy(self.retry_config)
        self._logger = logging.getLogger("rebound")
        if log_level is not None:
            self._logger.setLevel(log_level)

    @property
    def req_headers(self) -> dict[str, str]:
        return dict(self._req_headers)

    def set_req_headers(self, headers: Mapping[str, str]) -> None:
        """Replace the default headers sent with every subsequent request."""
        self._req_headers = dict(headers)

    def set_sid(self, sid: str) -> None:
        self.set_req_headers({**self._req_headers, "Authorization": f"Bearer {sid}"})

    def _build(
        self, method: Method, path: str, body: Any = None, params: QueryParams | None = None
    ) -> RequestDescriptor:
        return build_request(
            method,
            self.base_url + path,
            body=body,
            headers=self._req_headers,
            timeout=self.timeout,
            params=params if method == GET else None,
        )

    def _resolve_max_retries(self, max_retries: int | None) -> int | None:
        return self.options.max_retries if max_retries is None else max_retries

    def _next_delay(
        self, request: RequestDescriptor, error: Exception, state: RetryState, max_retries
    ) -> float | None:
        delay = self._policy.next_delay(error, state.attempt, max_retries)
        status = getattr(error, "status", None)
        if delay is None:
            if state.attempt:
                self._logger.warning(
                    f"giving up method={request.method} url={request.url} "
                    f"after {state.attempt} retries ({state.total_delay:g}s) status={status}: "
                    f"{error!r} (previous: {state.last_error!r})"
                )
            return None
        self._logger.info(
            f"retry {state.attempt + 1} method={request.method} url={request.url} "
            f"status={status}; sleeping {delay:g}s"
        )
        return delay

    @classmethod
    def from_env(
        cls,
        base_url: Union[str, None] = None,
        prefix: str = DEFAULT_PREFIX,
        env_path: Union[str, None] = None,
        **kwargs,
    ):
        """Create a client from <prefix>BASE_URL, <prefix>TIMEOUT, <prefix>MAX_RETRIES
        and <prefix>HEADER_* variables. An explicit base_url wins over the environment.
        """
        base = base_url or load_base_url_from_env(prefix=prefix, env_path=env_path)
        if not base:
            raise ValueError(f"{prefix}BASE_URL is not set and no base_url was given")
        options = load_client_options_from_env(prefix=prefix, env_path=env_path)
        return cls(base, options, **kwargs)


# ---------- Async client (httpx/aiohttp) ----------


class RetryingClient(_BaseClient):
    """Async HTTP client that transparently retries 5xx, 429 and connection failures.

    Other keywords for kwargs:
    - transport: object with ``async perform(RequestDescriptor) -> Response``
        (default HttpxTransport)
    - sleep: awaitable ``sleep(seconds)`` used for backoff (default asyncio.sleep)
    - retry_config, log_level, timeout, max_retries, headers: see _BaseClient
    """

    def __init__(
        self,
        base_url: str,
        options: Union[ClientOptions, None] = None,
        *,
        transport=None,
        sleep: Union[Callable[[float], Any], None] = None,
        **kwargs,
    ):
        super().__init__(base_url, options, **kwargs)
        self._transport = transport if transport is not None else HttpxTransport()
        self._sleep = sleep or asyncio.sleep

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
        return False

    async def aclose(self):
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def get(self, path: str, params: QueryParams | None = None, *, max_retries: int | None = None):
        return await self.request(GET, path, params=params, max_retries=max_retries)

    async def post(self, path: str, body: Any = None, *, max_retries: int | None = None):
        return await self.request(POST, path, body=body, max_retries=max_retries)

    async def request(
        self,
        method: Method,
        path: str,
        body: Any = None,
        params: QueryParams | None = None,
        *,
        max_retries: int | None = None,
    ):
        request = self._build(method, path, body, params)
        return await self._perform(request, self._resolve_max_retries(max_retries))

    async def _perform(self, request: RequestDescriptor, max_retries: int | None):
        # Cancellation (CancelledError) is not an Exception and ends the loop as-is
        state = RetryState()
        while True:
            self._logger.debug(
                f"req start method={request.method} url={request.url} attempt={state.attempt}"
            )
            try:
                response = await self._transport.perform(request)
            except Exception as e:
                delay = self._next_delay(request, e, state, max_retries)
                if delay is None:
                    raise
                await self._sleep(delay)
                state.record(e, delay)
                continue
            self._logger.debug(
                f"req done method={request.method} url={request.url} status={response.status}"
            )
            return response.payload


# ---------- Sync client (requests) ----------


class SyncRetryingClient(_BaseClient):
    """Blocking twin of RetryingClient; same retry schedule, requests transport by default."""

    def __init__(
        self,
        base_url: str,
        options: Union[ClientOptions, None] = None,
        *,
        transport=None,
        sleep: Union[Callable[[float], Any], None] = None,
        **kwargs,
    ):
        super().__init__(base_url, options, **kwargs)
        self._transport = transport if transport is not None else RequestsTransport()
        self._sleep = sleep or time.sleep

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def get(self, path: str, params: QueryParams | None = None, *, max_retries: int | None = None):
        return self.request(GET, path, params=params, max_retries=max_retries)

    def post(self, path: str, body: Any = None, *, max_retries: int | None = None):
        return self.request(POST, path, body=body, max_retries=max_retries)

    def request(
        self,
        method: Method,
        path: str,
        body: Any = None,
        params: QueryParams | None = None,
        *,
        max_retries: int | None = None,
    ):
        request = self._build(method, path, body, params)
        return self._perform(request, self._resolve_max_retries(max_retries))

    def _perform(self, request: RequestDescriptor, max_retries: int | None):
        state = RetryState()
        while True:
            self._logger.debug(
                f"req start method={request.method} url={request.url} attempt={state.attempt}"
            )
            try:
                response = self._transport.perform(request)
            except Exception as e:
                delay = self._next_delay(request, e, state, max_retries)
                if delay is None:
                    raise
                self._sleep(delay)
                state.record(e, delay)
                continue
            self._logger.debug(
                f"req done method={request.method} url={request.url} status={response.status}"
            )
            return response.payload
