from .adapters import AiohttpTransport, HttpxTransport, RequestsTransport
from .client import RetryingClient, SyncRetryingClient
from .env import load_base_url_from_env, load_client_options_from_env
from .errors import ReboundError, TransportError, TransportTimeoutError
from .policies import (
    Generic,
    NonRetryable,
    Retryable,
    RetryPolicy,
    backoff_delay,
    classify,
    coerce_retry_config,
)
from .request import build_request, encode_params, merge_headers
from .state import RetryState
from .types import ClientOptions, FormData, RequestDescriptor, Response, RetryConfig

__all__ = [
    "RetryingClient",
    "SyncRetryingClient",
    "ClientOptions",
    "RetryConfig",
    "RequestDescriptor",
    "Response",
    "FormData",
    "RetryState",
    "RetryPolicy",
    "Retryable",
    "NonRetryable",
    "Generic",
    "classify",
    "backoff_delay",
    "coerce_retry_config",
    "build_request",
    "encode_params",
    "merge_headers",
    "ReboundError",
    "TransportError",
    "TransportTimeoutError",
    "HttpxTransport",
    "AiohttpTransport",
    "RequestsTransport",
    "load_client_options_from_env",
    "load_base_url_from_env",
]
