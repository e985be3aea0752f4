"""
@file http_client.py
@description HTTP client with retry logic for the Africa's Talking SDK
@module at_connect.http_client
@author AT-Connect Team
@created 2025-01-15
"""

import logging
from typing import Optional, Dict, Any, Tuple, Type

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_never,
    stop_after_attempt,
    wait_exponential,
    RetryCallState,
)

from at_connect.config import AtConfig, RetryConfig
from at_connect.validators import mask_sensitive_data
from at_connect.exceptions import (
    AfricasTalkingError,
    ApiAuthenticationError,
    ApiTimeoutError,
    ApiError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset({200, 201})
DEFAULT_RETRY_AFTER = 60


def _retryable_errors(retry_config: RetryConfig) -> Tuple[Type[AfricasTalkingError], ...]:
    errors = []
    if retry_config.retry_on_timeout:
        errors.append(ApiTimeoutError)
    if retry_config.retry_on_rate_limit:
        errors.append(RateLimitExceededError)
    return tuple(errors)


def _parse_retry_after(value: Optional[str]) -> int:
    """Seconds form of Retry-After; the HTTP-date form falls back to the default."""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER


def create_retry_decorator(retry_config: RetryConfig):
    """
    Create retry decorator based on configuration.

    Works for both plain and coroutine functions.

    Returns:
        Tenacity retry decorator configured with settings from config
    """

    def before_retry_log(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        if retry_state.outcome and retry_state.outcome.failed:
            exception = retry_state.outcome.exception()
            logger.warning(
                f"Retry attempt {retry_state.attempt_number} after error: {exception}"
            )

    errors = _retryable_errors(retry_config)
    return retry(
        stop=stop_after_attempt(retry_config.max_attempts),
        wait=wait_exponential(
            multiplier=retry_config.initial_delay,
            max=retry_config.max_delay,
        ),
        retry=retry_if_exception_type(errors) if errors else retry_never,
        before_sleep=before_retry_log,
        reraise=True,
    )


def handle_response(response: httpx.Response, endpoint: str) -> Dict[str, Any]:
    """
    Handle API response and raise appropriate exceptions.

    Error bodies from the gateway carry ``ErrorMessage`` and ``ErrorCode``
    fields; plain-text bodies are used verbatim.

    Args:
        response: HTTP response object
        endpoint: API endpoint that was called

    Returns:
        Parsed JSON response data

    Raises:
        ApiAuthenticationError: If authentication fails (401)
        RateLimitExceededError: If rate limit is exceeded (429)
        ApiError: For other API errors or undecodable bodies
    """
    logger.debug(f"Response from {endpoint}: status={response.status_code}")

    if response.status_code in SUCCESS_STATUS_CODES:
        try:
            return response.json()
        except ValueError:
            logger.error(f"Undecodable response body from {endpoint}")
            raise ApiError(
                f"Invalid JSON in response from {endpoint}",
                status_code=response.status_code,
            )

    if response.status_code == 401:
        logger.error(f"Authentication failed for endpoint {endpoint}")
        raise ApiAuthenticationError(
            response.text.strip() or "Invalid API key or authentication failed"
        )

    if response.status_code == 429:
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        logger.warning(f"Rate limit exceeded. Retry after {retry_after} seconds")
        raise RateLimitExceededError(retry_after)

    kind = "Client error" if response.status_code < 500 else "Server error"
    error_message = f"{kind}: {response.status_code}"
    error_code = None
    error_data = None
    try:
        error_data = response.json()
    except ValueError:
        if response.text.strip():
            error_message = f"{error_message} {response.text.strip()}"

    if isinstance(error_data, dict):
        error_message = (
            error_data.get("ErrorMessage")
            or error_data.get("errorMessage")
            or error_data.get("message")
            or error_message
        )
        error_code = error_data.get("ErrorCode")
    else:
        error_data = None

    logger.error(f"{kind} for {endpoint}: {error_message}")
    raise ApiError(
        error_message,
        status_code=response.status_code,
        response_data=error_data,
        error_code=error_code,
    )


class HttpClient:
    """
    HTTP client for making requests to the Africa's Talking API.

    Handles authentication, service host routing, retries, timeouts and
    error mapping. Every request carries the application ``username``:
    in the form body for POST, in the query string for GET.

    Example:
        >>> config = AtConfig(api_key="test-key", username="sandbox")
        >>> client = HttpClient(config)
        >>> client.post("/version1/messaging", {"to": "+254711XXXYYY", "message": "Hi"})
    """

    def __init__(
        self,
        config: AtConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            config: SDK configuration object
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests)
        """
        self.config = config
        self.headers = config.get_headers()

        self._client = httpx.Client(
            headers=self.headers,
            timeout=config.timeout,
            verify=config.verify_ssl,
            transport=transport,
        )
        self._send_with_retry = create_retry_decorator(config.retry_config)(self._send)

        logging.getLogger("at_connect").setLevel(config.log_level)
        logger.debug(
            f"HTTP client for '{config.username}' using key {mask_sensitive_data(config.api_key)}"
        )

    def __enter__(self) -> "HttpClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = self.config.build_url(endpoint)
        try:
            response = self._client.request(method, url, params=params, data=data, json=json)
            return handle_response(response, endpoint)

        except httpx.TimeoutException as e:
            logger.error(f"Request timeout for {endpoint}: {e}")
            raise ApiTimeoutError(self.config.timeout, endpoint)

        except httpx.NetworkError as e:
            logger.error(f"Network error for {endpoint}: {e}")
            raise ApiError(f"Network error: {str(e)}")

        except httpx.HTTPError as e:
            logger.error(f"HTTP error for {endpoint}: {e}")
            raise ApiError(f"HTTP error: {str(e)}")

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a GET request to the API.

        Args:
            endpoint: API path (e.g., "/version1/user")
            params: Optional query parameters

        Returns:
            Parsed JSON response
        """
        logger.info(f"GET request to {endpoint}")
        query = {"username": self.config.username, **(params or {})}
        return self._send_with_retry("GET", endpoint, params=query)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a form-encoded POST request to the API.

        Args:
            endpoint: API path (e.g., "/version1/messaging")
            data: Form fields; None values are dropped

        Returns:
            Parsed JSON response
        """
        logger.info(f"POST request to {endpoint}")
        form = {"username": self.config.username}
        form.update({key: value for key, value in (data or {}).items() if value is not None})
        return self._send_with_retry("POST", endpoint, data=form)

    def post_json(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make a JSON POST request to the API.

        Used by the bundles host, which takes a JSON body instead of a form.
        ``username`` is added to the top level of the payload.
        """
        logger.info(f"JSON POST request to {endpoint}")
        body = {"username": self.config.username, **payload}
        return self._send_with_retry("POST", endpoint, json=body)


class AsyncHttpClient:
    """
    Async HTTP client for making requests to the Africa's Talking API.

    Example:
        >>> config = AtConfig(api_key="test-key", username="sandbox")
        >>> async with AsyncHttpClient(config) as client:
        ...     data = await client.get("/version1/user")
    """

    def __init__(
        self,
        config: AtConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.headers = config.get_headers()

        self._client = httpx.AsyncClient(
            headers=self.headers,
            timeout=config.timeout,
            verify=config.verify_ssl,
            transport=transport,
        )
        self._send_with_retry = create_retry_decorator(config.retry_config)(self._send)

        logging.getLogger("at_connect").setLevel(config.log_level)

    async def __aenter__(self) -> "AsyncHttpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the async HTTP client."""
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = self.config.build_url(endpoint)
        try:
            response = await self._client.request(method, url, params=params, data=data, json=json)
            return handle_response(response, endpoint)

        except httpx.TimeoutException as e:
            logger.error(f"Request timeout for {endpoint}: {e}")
            raise ApiTimeoutError(self.config.timeout, endpoint)

        except httpx.NetworkError as e:
            logger.error(f"Network error for {endpoint}: {e}")
            raise ApiError(f"Network error: {str(e)}")

        except httpx.HTTPError as e:
            logger.error(f"HTTP error for {endpoint}: {e}")
            raise ApiError(f"HTTP error: {str(e)}")

    async def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Make an async GET request to the API."""
        logger.info(f"Async GET request to {endpoint}")
        query = {"username": self.config.username, **(params or {})}
        return await self._send_with_retry("GET", endpoint, params=query)

    async def post(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Make an async form-encoded POST request to the API."""
        logger.info(f"Async POST request to {endpoint}")
        form = {"username": self.config.username}
        form.update({key: value for key, value in (data or {}).items() if value is not None})
        return await self._send_with_retry("POST", endpoint, data=form)

    async def post_json(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make an async JSON POST request to the API."""
        logger.info(f"Async JSON POST request to {endpoint}")
        body = {"username": self.config.username, **payload}
        return await self._send_with_retry("POST", endpoint, json=body)
