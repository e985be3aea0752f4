import pytest

from at_connect.config import AtConfig, Endpoint, Environment, RetryConfig
from at_connect.exceptions import ConfigurationError


def test_at_config_requires_api_key():
    with pytest.raises(ConfigurationError):
        AtConfig(api_key="", username="sandbox")


def test_at_config_requires_username():
    with pytest.raises(ConfigurationError) as exc_info:
        AtConfig(api_key="key", username="")
    assert exc_info.value.setting == "username"


def test_at_config_rejects_unknown_environment():
    with pytest.raises(ConfigurationError):
        AtConfig(api_key="key", username="sandbox", environment="staging")


def test_at_config_normalizes_log_level_and_environment():
    config = AtConfig(api_key="key", username="app", environment="production", log_level="debug")
    assert config.environment is Environment.PRODUCTION
    assert config.log_level == "DEBUG"


def test_at_config_from_env_reads_values(monkeypatch):
    monkeypatch.setenv("AFRICASTALKING_API_KEY", "env-key")
    monkeypatch.setenv("AFRICASTALKING_USERNAME", "env-app")
    monkeypatch.setenv("AFRICASTALKING_ENVIRONMENT", "Production")
    monkeypatch.setenv("AFRICASTALKING_TIMEOUT", "45")
    monkeypatch.setenv("AFRICASTALKING_MAX_RETRIES", "5")
    config = AtConfig.from_env()
    assert config.api_key == "env-key"
    assert config.username == "env-app"
    assert config.environment is Environment.PRODUCTION
    assert config.timeout == 45
    assert config.retry_config.max_attempts == 5


def test_at_config_from_env_missing_key(monkeypatch):
    monkeypatch.delenv("AFRICASTALKING_API_KEY", raising=False)
    monkeypatch.setenv("AFRICASTALKING_USERNAME", "sandbox")
    with pytest.raises(ConfigurationError):
        AtConfig.from_env()


def test_retry_config_defaults_and_validation():
    retry = RetryConfig()
    assert retry.max_attempts == 3
    assert retry.retry_on_timeout is True

    with pytest.raises(ValueError):
        RetryConfig(max_attempts=0)


def test_headers_carry_api_key():
    headers = AtConfig(api_key="atsk_123", username="sandbox").get_headers()
    assert headers["apiKey"] == "atsk_123"
    assert headers["Accept"] == "application/json"


@pytest.mark.parametrize(
    "path,endpoint",
    [
        ("/version1/messaging", Endpoint.STANDARD),
        ("/call", Endpoint.VOICE),
        ("/queueStatus", Endpoint.VOICE),
        ("/mobile/data/request", Endpoint.MOBILE_DATA),
        ("/checkout/token/create", Endpoint.STANDARD),
    ],
)
def test_endpoint_for_path(path, endpoint):
    assert Endpoint.for_path(path) is endpoint


def test_build_url_per_environment():
    sandbox = AtConfig(api_key="key", username="sandbox")
    production = AtConfig(api_key="key", username="app", environment=Environment.PRODUCTION)

    assert sandbox.base_url == "https://api.sandbox.africastalking.com"
    assert sandbox.build_url("/call") == "https://voice.sandbox.africastalking.com/call"
    assert production.build_url("/version1/user") == "https://api.africastalking.com/version1/user"


def test_content_host_differs_in_sandbox():
    assert (
        Endpoint.CONTENT.build_url(Environment.SANDBOX, "/messaging")
        == "https://api.sandbox.africastalking.com/version1/messaging"
    )
    assert (
        Endpoint.CONTENT.build_url(Environment.PRODUCTION, "/messaging")
        == "https://content.africastalking.com/version1/messaging"
    )
