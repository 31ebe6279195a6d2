import pytest

from rebound import (
    Generic,
    NonRetryable,
    Retryable,
    RetryConfig,
    RetryPolicy,
    TransportError,
    TransportTimeoutError,
    backoff_delay,
    classify,
    coerce_retry_config,
)


def test_classify():
    assert classify(TransportError(status=500)) == Retryable(500)
    assert classify(TransportError(status=503)) == Retryable(503)
    assert classify(TransportError(status=429)) == Retryable(429)
    assert classify(TransportError(status=None)) == Retryable(None)
    assert classify(TransportError(status=0)) == Retryable(None)
    assert classify(TransportError(status=400)) == NonRetryable(400)
    assert classify(TransportError(status=404)) == NonRetryable(404)
    assert classify(ValueError("boom")) == Generic()


def test_classify_timeouts():
    assert classify(TransportTimeoutError()) == Retryable(None)
    strict = RetryConfig(retry_timeouts=False)
    assert classify(TransportTimeoutError(), strict) == NonRetryable(None)
    # plain connection failures stay retryable either way
    assert classify(TransportError(status=None), strict) == Retryable(None)


def test_server_error_backoff_schedule():
    delays = [backoff_delay(Retryable(500), n) for n in range(9)]
    assert delays == [1, 2, 4, 8, 16, 32, 60, 60, 60]


def test_connection_failure_uses_exponential_schedule():
    delays = [backoff_delay(Retryable(None), n) for n in range(7)]
    assert delays == [1, 2, 4, 8, 16, 32, 60]


def test_rate_limit_backoff_schedule():
    delays = [backoff_delay(Retryable(429), n) for n in range(7)]
    assert delays == [30, 60, 90, 120, 150, 180, 180]


def test_next_delay_budget():
    policy = RetryPolicy()
    err = TransportError(status=500)
    assert policy.next_delay(err, 0, max_retries=0) is None
    assert policy.next_delay(err, 4, max_retries=5) == 16  # noqa: PLR2004
    assert policy.next_delay(err, 5, max_retries=5) is None
    # None / negative budgets never run out
    assert policy.next_delay(err, 100, max_retries=None) == 60  # noqa: PLR2004
    assert policy.next_delay(err, 100, max_retries=-1) == 60  # noqa: PLR2004


def test_next_delay_never_retries_non_retryable():
    policy = RetryPolicy()
    assert policy.next_delay(TransportError(status=400), 0, max_retries=None) is None
    assert policy.next_delay(RuntimeError(), 0, max_retries=10) is None


def test_coerce_retry_config():
    assert coerce_retry_config(None) == RetryConfig()
    assert coerce_retry_config(3).max_retries == 3  # noqa: PLR2004
    cfg = RetryConfig(max_retries=1)
    assert coerce_retry_config(cfg) is cfg
    with pytest.raises(TypeError):
        coerce_retry_config("three")
    with pytest.raises(TypeError):
        coerce_retry_config(True)
