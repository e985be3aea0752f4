"""
@file exceptions.py
@description Custom exception classes for the Africa's Talking SDK
@module at_connect.exceptions
@author AT-Connect Team
@created 2025-01-15
"""

from typing import Optional, Dict, Any


class AfricasTalkingError(Exception):
    """
    Base exception for all AT-Connect errors.

    All custom exceptions in the SDK inherit from this base class.
    This allows users to catch all SDK-specific errors with a single except clause.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary containing additional error context
        status_code: HTTP status code if error originated from API response
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """
        Initialize AfricasTalkingError.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
            status_code: HTTP status code if applicable

        Example:
            >>> raise AfricasTalkingError("Operation failed", details={"reason": "timeout"})
        """
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ConfigurationError(AfricasTalkingError):
    """
    Raised when the SDK configuration is incomplete or inconsistent.

    Example:
        >>> if not username:
        ...     raise ConfigurationError("Username cannot be empty", setting="username")
    """

    def __init__(self, message: str, setting: Optional[str] = None) -> None:
        details = {"setting": setting} if setting else {}
        super().__init__(message, details=details)
        self.setting = setting


class ValidationError(AfricasTalkingError):
    """
    Raised when input validation fails.

    Used for request parameters before making API calls and for voice and
    USSD builder arguments before anything is rendered.

    Example:
        >>> if num_digits < 1:
        ...     raise ValidationError("num_digits", "must be a positive integer")
    """

    def __init__(self, field: str, message: str) -> None:
        """
        Initialize ValidationError.

        Args:
            field: The field that failed validation
            message: Validation error message
        """
        super().__init__(
            f"Validation error for field '{field}': {message}",
            details={"field": field},
        )
        self.field = field


class ApiAuthenticationError(AfricasTalkingError):
    """
    Raised when API authentication fails.

    This typically occurs when:
    - API key is missing or revoked
    - The username does not own the API key
    - A sandbox key is used against production (or the reverse)
    """

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, status_code=401)


class ApiTimeoutError(AfricasTalkingError):
    """
    Raised when an API request times out.

    Example:
        >>> try:
        ...     client.send_sms(["+254711000000"], "Hello")
        ... except ApiTimeoutError as e:
        ...     print(f"Request timed out after {e.timeout} seconds")
    """

    def __init__(self, timeout: float, endpoint: str) -> None:
        """
        Initialize ApiTimeoutError.

        Args:
            timeout: The timeout duration in seconds
            endpoint: The API endpoint that timed out
        """
        message = f"Request to {endpoint} timed out after {timeout} seconds"
        super().__init__(
            message,
            details={"timeout": timeout, "endpoint": endpoint},
        )
        self.timeout = timeout
        self.endpoint = endpoint


class RateLimitExceededError(AfricasTalkingError):
    """
    Raised when the gateway answers with HTTP 429.

    Attributes:
        retry_after: Number of seconds to wait before retrying
    """

    def __init__(self, retry_after: int) -> None:
        message = f"Rate limit exceeded. Retry after {retry_after} seconds"
        super().__init__(
            message,
            details={"retry_after": retry_after},
            status_code=429,
        )
        self.retry_after = retry_after


class ApiError(AfricasTalkingError):
    """
    Raised when an API request fails for reasons other than authentication or timeout.

    This is a generic error for API failures including:
    - Server errors (5xx)
    - Invalid requests (4xx other than 401/429)
    - Network errors
    - Responses that cannot be decoded

    Attributes:
        error_code: Gateway error code (``ErrorCode`` field) when one was sent
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        """
        Initialize ApiError.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Raw API response data
            error_code: Gateway-specific error code
        """
        details: Dict[str, Any] = {"response_data": response_data} if response_data else {}
        if error_code:
            details["error_code"] = error_code
        super().__init__(message, details=details, status_code=status_code)
        self.error_code = error_code
