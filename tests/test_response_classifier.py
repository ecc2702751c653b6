import pytest
import requests

from conftest import make_response
from resilient_notifier import (
    ApiError,
    InvalidChatId,
    InvalidToken,
    NetworkError,
    RateLimited,
    RequestTimeout,
)
from resilient_notifier.responseClassifier import classify_response, classify_transport_error

CHAT = "-100123"


def test_success_returns_envelope():
    data = classify_response(make_response(200, {"ok": True, "result": {"message_id": 7}}), CHAT)
    assert data["result"]["message_id"] == 7


def test_success_with_non_json_body():
    assert classify_response(make_response(200, text="OK"), CHAT) == {"ok": True}


def test_bad_request_includes_body():
    resp = make_response(400, {"ok": False, "description": "Bad Request: can't parse entities"})
    with pytest.raises(ApiError) as err:
        classify_response(resp, CHAT)
    assert err.value.detail.startswith("bad request: ")
    assert "can't parse entities" in err.value.detail
    assert err.value.status_code == 400
    assert not err.value.retryable


def test_unauthorized_is_invalid_token():
    with pytest.raises(InvalidToken) as err:
        classify_response(make_response(401, {"ok": False, "error_code": 401}), CHAT)
    assert not err.value.retryable


def test_forbidden():
    with pytest.raises(ApiError) as err:
        classify_response(make_response(403, {"ok": False}), CHAT)
    assert err.value.detail == "forbidden"
    assert not err.value.retryable


def test_not_found_is_invalid_chat_id():
    with pytest.raises(InvalidChatId) as err:
        classify_response(make_response(404, {"ok": False}), CHAT)
    assert err.value.chat_id == CHAT


def test_rate_limit_uses_provider_hint():
    resp = make_response(429, {"ok": False, "error_code": 429, "parameters": {"retry_after": 17}})
    with pytest.raises(RateLimited) as err:
        classify_response(resp, CHAT)
    assert err.value.retry_after == 17
    assert err.value.retryable


def test_rate_limit_falls_back_to_header():
    resp = make_response(429, text="Too Many Requests", headers={"Retry-After": "5"})
    with pytest.raises(RateLimited) as err:
        classify_response(resp, CHAT)
    assert err.value.retry_after == 5


def test_rate_limit_defaults_to_sixty_seconds():
    with pytest.raises(RateLimited) as err:
        classify_response(make_response(429, {"ok": False}), CHAT)
    assert err.value.retry_after == 60


def test_server_error_is_retryable_api_error():
    with pytest.raises(ApiError) as err:
        classify_response(make_response(502, text="Bad Gateway"), CHAT)
    assert err.value.detail == "http 502: Bad Gateway"
    assert err.value.retryable


def test_other_client_error_is_fatal():
    with pytest.raises(ApiError) as err:
        classify_response(make_response(409, text="Conflict"), CHAT)
    assert err.value.status_code == 409
    assert not err.value.retryable


def test_timeout_maps_to_request_timeout():
    error = classify_transport_error(requests.ReadTimeout("read timed out"))
    assert isinstance(error, RequestTimeout)
    assert error.retryable


def test_connection_error_maps_to_network_error():
    error = classify_transport_error(requests.ConnectionError("connection refused"))
    assert isinstance(error, NetworkError)
    assert error.detail == "connection refused"


def test_transport_error_scrubs_token():
    error = classify_transport_error(
        requests.ConnectionError("Max retries exceeded with url: /bot123:secret/sendMessage"),
        secret="123:secret",
    )
    assert "123:secret" not in str(error)
    assert "<token>" in error.detail
