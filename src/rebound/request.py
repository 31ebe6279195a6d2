import math
from collections.abc import Mapping
from typing import Any, Union
from urllib.parse import quote

from .types import FormData, Method, RequestDescriptor

JSON_CONTENT_TYPE = "application/json"

# Characters encodeURIComponent leaves untouched
_UNRESERVED = "-_.!~*'()"

SimpleValue = Union[None, int, float, str]
QueryParams = Mapping[str, Union[SimpleValue, list, tuple]]


# JavaScript switches integral numbers to exponent notation from here on
_JS_EXPONENT_MIN = 1e21


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < _JS_EXPONENT_MIN:
            return str(int(value))
    return str(value)


def _encode_pair(key: str, value: Any) -> str:
    return quote(key, safe=_UNRESERVED) + "=" + quote(_stringify(value), safe=_UNRESERVED)


def encode_params(params: QueryParams | None) -> str:
    """Encode query params into ``a=1&b=x``.

    None values are dropped, including inside lists. Lists repeat the key once
    per element, in order.
    """
    if not params:
        return ""
    pairs: list[str] = []
    for key, val in params.items():
        if isinstance(val, (list, tuple)):
            pairs.extend(_encode_pair(key, v) for v in val if v is not None)
        elif val is not None:
            pairs.append(_encode_pair(key, val))
    return "&".join(pairs)


def merge_headers(
    defaults: Mapping[str, str] | None, overrides: Mapping[str, str] | None
) -> dict[str, str]:
    """Merge two header sets; the last writer wins, so ``overrides`` beat ``defaults``."""
    return {**(defaults or {}), **(overrides or {})}


def build_request(
    method: Method,
    url: str,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
    params: QueryParams | None = None,
) -> RequestDescriptor:
    query = encode_params(params)
    if query:
        url += "?" + query
    defaults: dict[str, str] = {}
    if body is not None and not isinstance(body, FormData):
        defaults["Content-Type"] = JSON_CONTENT_TYPE
    return RequestDescriptor(
        url=url,
        method=method,
        headers=merge_headers(defaults, headers),
        body=body,
        timeout=timeout,
    )
