from unittest.mock import MagicMock

import pytest
import requests

from rebound import (
    RequestsTransport,
    SyncRetryingClient,
    TransportError,
    TransportTimeoutError,
    build_request,
)


def _resp(status=200, text="", content_type="application/json"):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = {"content-type": content_type}
    return resp


def test_requests_json_post():
    sess = MagicMock()
    sess.request.return_value = _resp(200, '{"a": 1}')
    transport = RequestsTransport(session=sess)
    resp = transport.perform(build_request("POST", "https://e.com/u", body={"x": 1}, timeout=2.0))
    assert resp.payload == {"a": 1}
    args, kwargs = sess.request.call_args
    assert args == ("POST", "https://e.com/u")
    assert kwargs["json"] == {"x": 1}
    assert kwargs["timeout"] == 2.0  # noqa: PLR2004
    assert kwargs["headers"] == {"Content-Type": "application/json"}


def test_requests_raw_body_goes_to_data():
    sess = MagicMock()
    sess.request.return_value = _resp(200, "ok", "text/plain")
    transport = RequestsTransport(session=sess)
    resp = transport.perform(build_request("POST", "https://e.com/u", body="raw"))
    assert resp.payload == "ok"
    assert sess.request.call_args.kwargs["data"] == "raw"


def test_requests_errors():
    sess = MagicMock()
    transport = RequestsTransport(session=sess)
    req = build_request("GET", "https://e.com/")

    sess.request.return_value = _resp(401, '{"error": "no"}')
    with pytest.raises(TransportError) as info:
        transport.perform(req)
    assert info.value.status == 401  # noqa: PLR2004

    sess.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(TransportError) as info:
        transport.perform(req)
    assert info.value.status is None

    sess.request.side_effect = requests.ReadTimeout("slow")
    with pytest.raises(TransportTimeoutError):
        transport.perform(req)


def test_requests_client_retries_connection_failures():
    sess = MagicMock()
    sess.request.side_effect = [requests.ConnectionError("refused"), _resp(200, '"done"')]
    delays = []
    client = SyncRetryingClient(
        "https://e.com", transport=RequestsTransport(session=sess), sleep=delays.append
    )
    assert client.get("/x") == "done"
    assert delays == [1]


def test_requests_owns_default_session():
    transport = RequestsTransport()
    assert isinstance(transport._get_session(), requests.Session)
    transport.close()
    assert transport.session is None
