from dataclasses import dataclass, field
from typing import Any, Literal

Method = Literal["GET", "POST"]


@dataclass(frozen=True)
class RequestDescriptor:
    url: str
    method: Method
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    # seconds; None leaves the transport default in place
    timeout: float | None = None


@dataclass
class Response:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    payload: Any = None


class FormData:
    """Multipart form payload. Sent as-is, never tagged as JSON."""

    def __init__(self, fields: dict[str, str] | None = None, files: dict[str, Any] | None = None):
        self.fields = dict(fields or {})
        self.files = dict(files or {})

    def __eq__(self, other):
        if not isinstance(other, FormData):
            return NotImplemented
        return self.fields == other.fields and self.files == other.files

    def __repr__(self):
        return f"FormData(fields={self.fields!r}, files={list(self.files)!r})"


@dataclass(frozen=True)
class RetryConfig:
    # None or negative: retry forever
    max_retries: int | None = None

    # 429 handling: linear ramp
    rate_limit_step: float = 30.0
    rate_limit_max_steps: int = 6

    # 5xx / connection failures: exponential then flat
    error_base: float = 1.0
    error_growth: float = 2.0
    error_max_exponent: int = 6
    error_cap: float = 60.0

    # timeouts carry no status; treat them as connection failures
    retry_timeouts: bool = True


@dataclass(frozen=True)
class ClientOptions:
    timeout: float | None = None
    max_retries: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
