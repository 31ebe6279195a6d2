from unittest.mock import MagicMock

import pytest

from rebound import RequestDescriptor, Response, SyncRetryingClient, TransportError


def _client(outcomes, **kwargs):
    transport = MagicMock()
    transport.perform.side_effect = outcomes
    delays = []
    client = SyncRetryingClient("/base", transport=transport, sleep=delays.append, **kwargs)
    return client, transport, delays


def test_sync_post_and_payload():
    client, transport, delays = _client([Response(200, {}, {"ok": True})])
    assert client.post("/u", {"x": 1}) == {"ok": True}
    transport.perform.assert_called_once_with(
        RequestDescriptor(
            url="/base/u",
            method="POST",
            headers={"Content-Type": "application/json"},
            body={"x": 1},
        )
    )
    assert delays == []


def test_sync_retries_follow_same_schedule():
    client, transport, delays = _client([TransportError(status=500)] * 3 + [Response(200)])
    assert client.get("/u", {"q": "a b"}) is None
    assert delays == [1, 2, 4]
    assert transport.perform.call_args.args[0].url == "/base/u?q=a%20b"


def test_sync_budget_exhausted_raises_last_error():
    errors = [TransportError(status=429), TransportError(status=429)]
    client, transport, delays = _client(errors)
    with pytest.raises(TransportError) as info:
        client.get("/u", max_retries=1)
    assert info.value is errors[1]
    assert delays == [30]


def test_sync_context_manager_closes_transport():
    transport = MagicMock()
    with SyncRetryingClient("/base", transport=transport):
        pass
    transport.close.assert_called_once_with()


def test_from_env(monkeypatch):
    monkeypatch.setenv("REBOUND_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("REBOUND_TIMEOUT", "2.5")
    monkeypatch.setenv("REBOUND_MAX_RETRIES", "3")
    monkeypatch.setenv("REBOUND_HEADER_AUTHORIZATION", "Bearer t")
    client = SyncRetryingClient.from_env(transport=MagicMock())
    assert client.base_url == "https://api.example.com"
    assert client.timeout == 2.5  # noqa: PLR2004
    assert client.options.max_retries == 3  # noqa: PLR2004
    assert client.req_headers == {"Authorization": "Bearer t"}


def test_from_env_requires_base_url(monkeypatch):
    monkeypatch.delenv("REBOUND_BASE_URL", raising=False)
    with pytest.raises(ValueError):
        SyncRetryingClient.from_env(transport=MagicMock())
