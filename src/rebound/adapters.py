import asyncio
import contextlib
import json
from typing import Any

from .errors import TransportError, TransportTimeoutError
from .types import FormData, RequestDescriptor, Response

# First status treated as a failed exchange
HTTP_ERROR_MIN = 400


# ---------- shared helpers ----------


def _decode_payload(content_type: str | None, text: str) -> Any:
    """JSON bodies are decoded, everything else is returned as text (None if empty)."""
    if not text:
        return None
    if content_type and "json" in content_type.lower():
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


def _check_status(request: RequestDescriptor, response: Response) -> Response:
    if response.status >= HTTP_ERROR_MIN:
        raise TransportError(
            f"HTTP {response.status} for {request.method} {request.url}",
            status=response.status,
            request=request,
            payload=response.payload,
        )
    return response


def _body_kwargs(body: Any) -> dict[str, Any]:
    """Keyword arguments shared by httpx and requests for the request body."""
    if body is None:
        return {}
    if isinstance(body, FormData):
        kw: dict[str, Any] = {"data": body.fields}
        if body.files:
            kw["files"] = body.files
        return kw
    if isinstance(body, (str, bytes)):
        return {"content": body}
    return {"json": body}


# ---------- httpx (async, default) ----------
class HttpxTransport:
    def __init__(self, client=None):
        self.client = client
        self._own_client = False

    def _get_client(self):
        if self.client is None:
            import httpx  # noqa: PLC0415

            # timeout=None disables httpx's 5s default; per-request timeouts still apply
            self.client = httpx.AsyncClient(timeout=None)
            self._own_client = True
        return self.client

    async def perform(self, request: RequestDescriptor) -> Response:
        import httpx  # noqa: PLC0415

        client = self._get_client()
        kwargs = _body_kwargs(request.body)
        # None means no timeout, also on injected clients
        kwargs["timeout"] = request.timeout
        try:
            resp = await client.request(
                request.method, request.url, headers=request.headers, **kwargs
            )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(str(e) or "request timed out", request=request) from e
        except (httpx.NetworkError, httpx.ProtocolError, httpx.ProxyError) as e:
            raise TransportError(str(e) or "connection failed", request=request) from e
        response = Response(
            status=resp.status_code,
            headers=dict(resp.headers),
            payload=_decode_payload(resp.headers.get("content-type"), resp.text),
        )
        return _check_status(request, response)

    async def aclose(self):
        if self._own_client and self.client is not None:
            await self.client.aclose()
            self.client = None
            self._own_client = False


# ---------- aiohttp (async) ----------
class AiohttpTransport:
    def __init__(self, session=None):
        self.session = session
        self._own_session = False

    def _get_session(self):
        if self.session is None:
            import aiohttp  # noqa: PLC0415

            self.session = aiohttp.ClientSession()
            self._own_session = True
        return self.session

    @staticmethod
    def _body_kwargs(body: Any) -> dict[str, Any]:
        if body is None:
            return {}
        if isinstance(body, FormData):
            import aiohttp  # noqa: PLC0415

            form = aiohttp.FormData()
            for name, value in body.fields.items():
                form.add_field(name, value)
            for name, value in body.files.items():
                if isinstance(value, tuple):
                    filename, content = value[0], value[1]
                    form.add_field(name, content, filename=filename)
                else:
                    form.add_field(name, value)
            return {"data": form}
        if isinstance(body, (str, bytes)):
            return {"data": body}
        return {"json": body}

    async def perform(self, request: RequestDescriptor) -> Response:
        import aiohttp  # noqa: PLC0415

        session = self._get_session()
        kwargs = self._body_kwargs(request.body)
        # total=None disables the session's 300s default
        kwargs["timeout"] = aiohttp.ClientTimeout(total=request.timeout)
        resp = None
        try:
            resp = await session.request(
                request.method, request.url, headers=request.headers, **kwargs
            )
            text = await resp.text()
        except (asyncio.TimeoutError, aiohttp.ServerTimeoutError) as e:
            raise TransportTimeoutError(str(e) or "request timed out", request=request) from e
        except aiohttp.ClientError as e:
            raise TransportError(str(e) or "connection failed", request=request) from e
        finally:
            # Ensure the connection goes back to the session
            if resp is not None and not resp.closed:
                with contextlib.suppress(Exception):
                    await resp.release()
        headers = dict(resp.headers or {})
        response = Response(
            status=resp.status,
            headers=headers,
            payload=_decode_payload(headers.get("Content-Type") or headers.get("content-type"), text),
        )
        return _check_status(request, response)

    async def aclose(self):
        if self._own_session and self.session is not None:
            await self.session.close()
            self.session = None
            self._own_session = False


# ---------- requests (sync) ----------
class RequestsTransport:
    def __init__(self, session=None):
        self.session = session
        self._own_session = False

    def _get_session(self):
        if self.session is None:
            import requests  # noqa: PLC0415

            self.session = requests.Session()
            self._own_session = True
        return self.session

    def perform(self, request: RequestDescriptor) -> Response:
        import requests  # noqa: PLC0415

        session = self._get_session()
        kwargs = _body_kwargs(request.body)
        if "content" in kwargs:
            kwargs["data"] = kwargs.pop("content")
        try:
            resp = session.request(
                request.method,
                request.url,
                headers=request.headers,
                timeout=request.timeout,
                **kwargs,
            )
        except requests.Timeout as e:
            raise TransportTimeoutError(str(e) or "request timed out", request=request) from e
        except requests.ConnectionError as e:
            raise TransportError(str(e) or "connection failed", request=request) from e
        headers = dict(resp.headers)
        response = Response(
            status=resp.status_code,
            headers=headers,
            payload=_decode_payload(resp.headers.get("content-type"), resp.text),
        )
        return _check_status(request, response)

    def close(self):
        if self._own_session and self.session is not None:
            with contextlib.suppress(Exception):
                self.session.close()
            self.session = None
            self._own_session = False
