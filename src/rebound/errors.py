from typing import Any

from .types import RequestDescriptor


class ReboundError(Exception):
    """Base class for errors raised by rebound."""


class TransportError(ReboundError):
    """A failed HTTP exchange.

    ``status`` is the HTTP status of the response, or None when no response was
    received at all (connection refused, DNS failure, timeout, ...).
    ``payload`` holds the decoded error body when a response exists.
    """

    is_timeout = False

    def __init__(
        self,
        message: str = "transport error",
        status: int | None = None,
        request: RequestDescriptor | None = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.request = request
        self.payload = payload

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, status={self.status!r})"


class TransportTimeoutError(TransportError):
    is_timeout = True

    def __init__(self, message: str = "request timed out", request: RequestDescriptor | None = None):
        super().__init__(message, status=None, request=request)
