from urllib.parse import parse_qs

import httpx
import pytest

from at_connect.config import AtConfig, RetryConfig
from at_connect.exceptions import (
    ApiAuthenticationError,
    ApiError,
    ApiTimeoutError,
    RateLimitExceededError,
)
from at_connect.http_client import DEFAULT_RETRY_AFTER, AsyncHttpClient, HttpClient


def _config(**retry_kwargs) -> AtConfig:
    retry_kwargs.setdefault("max_attempts", 1)
    retry = RetryConfig(initial_delay=0.01, max_delay=0.01, **retry_kwargs)
    return AtConfig(api_key="atsk_test", username="sandbox", retry_config=retry)


def _form(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def test_post_sends_form_with_username_and_api_key():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"ok": True})

    with HttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        data = client.post("/version1/messaging", {"to": "+254711000111", "from": None})

    assert data == {"ok": True}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.sandbox.africastalking.com/version1/messaging"
    assert request.headers["apiKey"] == "atsk_test"
    assert _form(request) == {"username": "sandbox", "to": "+254711000111"}


def test_get_puts_username_in_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"UserData": {"balance": "KES 10.00"}})

    with HttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        client.get("/version1/user")

    assert seen[0].method == "GET"
    assert seen[0].url.params["username"] == "sandbox"


def test_voice_paths_go_to_voice_host():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    with HttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        client.post("/call", {"from": "+254711000111"})

    assert seen[0].url.host == "voice.sandbox.africastalking.com"


def test_unauthorized_maps_to_authentication_error():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(401, text="The supplied authentication is invalid")
    )
    with HttpClient(_config(), transport=transport) as client:
        with pytest.raises(ApiAuthenticationError) as exc_info:
            client.get("/version1/user")

    assert exc_info.value.status_code == 401
    assert "supplied authentication" in exc_info.value.message


def test_gateway_error_body_is_parsed():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            400, json={"ErrorMessage": "Invalid phone number", "ErrorCode": "InvalidPhoneNumber"}
        )
    )
    with HttpClient(_config(), transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            client.post("/version1/messaging", {"to": "+1"})

    assert exc_info.value.message == "Invalid phone number"
    assert exc_info.value.error_code == "InvalidPhoneNumber"
    assert exc_info.value.status_code == 400


def test_server_error_with_plain_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="down"))
    with HttpClient(_config(), transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            client.get("/version1/user")

    assert exc_info.value.message == "Server error: 503 down"


def test_undecodable_success_body_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
    with HttpClient(_config(), transport=transport) as client:
        with pytest.raises(ApiError):
            client.get("/version1/user")


def test_timeout_maps_to_timeout_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with HttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiTimeoutError) as exc_info:
            client.get("/version1/user")

    assert exc_info.value.endpoint == "/version1/user"


def test_network_error_maps_to_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with HttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiError) as exc_info:
            client.get("/version1/user")

    assert "Network error" in exc_info.value.message


def test_rate_limit_is_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(429, headers={"Retry-After": "1"})
        return httpx.Response(200, json={"ok": True})

    with HttpClient(_config(max_attempts=2), transport=httpx.MockTransport(handler)) as client:
        assert client.get("/version1/user") == {"ok": True}

    assert len(calls) == 2


def test_rate_limit_not_retried_when_disabled():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, headers={"Retry-After": "7"})

    config = _config(max_attempts=3, retry_on_rate_limit=False)
    with HttpClient(config, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RateLimitExceededError) as exc_info:
            client.get("/version1/user")

    assert exc_info.value.retry_after == 7
    assert len(calls) == 1


def test_client_errors_are_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, json={"errorMessage": "bad request"})

    with HttpClient(_config(max_attempts=3), transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiError):
            client.get("/version1/user")

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_async_post_sends_form():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"ok": True})

    async with AsyncHttpClient(_config(), transport=httpx.MockTransport(handler)) as client:
        data = await client.post("/version1/messaging", {"message": "Hi"})

    assert data == {"ok": True}
    assert _form(seen[0]) == {"username": "sandbox", "message": "Hi"}


@pytest.mark.asyncio
async def test_async_timeout_is_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, json={"ok": True})

    async with AsyncHttpClient(
        _config(max_attempts=2), transport=httpx.MockTransport(handler)
    ) as client:
        assert await client.get("/version1/user") == {"ok": True}

    assert len(calls) == 2


def test_http_date_retry_after_uses_default():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}
        )
    )
    with HttpClient(_config(), transport=transport) as client:
        with pytest.raises(RateLimitExceededError) as exc_info:
            client.get("/version1/user")

    assert exc_info.value.retry_after == DEFAULT_RETRY_AFTER


def test_http_date_retry_after_is_still_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})
        return httpx.Response(200, json={"ok": True})

    with HttpClient(_config(max_attempts=2), transport=httpx.MockTransport(handler)) as client:
        assert client.get("/version1/user") == {"ok": True}

    assert len(calls) == 2
