from dataclasses import dataclass
from typing import Union

from .errors import TransportError
from .types import RetryConfig

# Status codes that are worth another attempt
RATE_LIMITED = 429
SERVER_ERROR_MIN = 500


# ---------- Failure classification ----------


@dataclass(frozen=True)
class Retryable:
    status: int | None = None


@dataclass(frozen=True)
class NonRetryable:
    status: int | None = None


@dataclass(frozen=True)
class Generic:
    pass


Classification = Union[Retryable, NonRetryable, Generic]

_DEFAULT_CONFIG = RetryConfig()


def classify(error: BaseException, config: RetryConfig | None = None) -> Classification:
    """Sort a failure into Retryable(status), NonRetryable(status) or Generic.

    Only TransportError is ever retryable: no status (connection level failure),
    5xx, or 429. Timeouts follow ``config.retry_timeouts``.
    """
    config = config or _DEFAULT_CONFIG
    if not isinstance(error, TransportError):
        return Generic()
    status = error.status
    if error.is_timeout and not config.retry_timeouts:
        return NonRetryable(status)
    if not status or status >= SERVER_ERROR_MIN or status == RATE_LIMITED:
        return Retryable(status or None)
    return NonRetryable(status)


def backoff_delay(
    classification: Retryable, attempt: int, config: RetryConfig | None = None
) -> float:
    """Seconds to wait before retry number ``attempt`` (0-based).

    429:   30, 60, 90, 120, 150, 180, 180...
    other: 1, 2, 4, 8, 16, 32, 60, 60...
    """
    config = config or _DEFAULT_CONFIG
    if classification.status == RATE_LIMITED:
        return min(attempt + 1, config.rate_limit_max_steps) * config.rate_limit_step
    if attempt < config.error_max_exponent:
        return config.error_base * (config.error_growth**attempt)
    return config.error_cap


# ---------- Policy ----------


class RetryPolicy:
    """Decides, per failure, whether a request gets another attempt and when."""

    def __init__(self, config: RetryConfig | None = None):
        self.config = config or _DEFAULT_CONFIG

    def budget_exhausted(self, attempt: int, max_retries: int | None) -> bool:
        return max_retries is not None and max_retries >= 0 and attempt >= max_retries

    def next_delay(
        self, error: BaseException, attempt: int, max_retries: int | None = None
    ) -> float | None:
        """Return the backoff in seconds, or None when ``error`` should be raised."""
        verdict = classify(error, self.config)
        if not isinstance(verdict, Retryable):
            return None
        if self.budget_exhausted(attempt, max_retries):
            return None
        return backoff_delay(verdict, attempt, self.config)


def coerce_retry_config(value: Union[object, None]) -> RetryConfig:
    """Turn None | int | RetryConfig into a RetryConfig.

    Accepted inputs:
      - None          -> unlimited retries, default backoff
      - int           -> RetryConfig(max_retries=value); negative means unlimited
      - RetryConfig   (returned as-is)
    """
    if value is None:
        return RetryConfig()
    if isinstance(value, RetryConfig):
        return value
    if isinstance(value, bool):
        raise TypeError("retry config must be None, an int or a RetryConfig")
    if isinstance(value, int):
        return RetryConfig(max_retries=value)
    raise TypeError("retry config must be None, an int or a RetryConfig")
