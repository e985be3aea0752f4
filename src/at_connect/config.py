"""
@file config.py
@description Configuration management for the Africa's Talking SDK
@module at_connect.config
@author AT-Connect Team
@created 2025-01-15
"""

import os
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field

from dotenv import load_dotenv

from at_connect.exceptions import ConfigurationError

# Load environment variables
load_dotenv()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Voice resources are mounted at the root of the voice host.
VOICE_PATHS = frozenset({"/call", "/queueStatus", "/mediaUpload"})


class Environment(str, Enum):
    """Gateway environment the credentials belong to."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def domain(self) -> str:
        """Base domain shared by every service host of the environment."""
        if self is Environment.SANDBOX:
            return "sandbox.africastalking.com"
        return "africastalking.com"

    @property
    def base_url(self) -> str:
        """Base URL of the standard API host."""
        return f"https://api.{self.domain}"


class Endpoint(str, Enum):
    """
    Service hosts used by the gateway.

    Most resources live on the ``api.`` host, but voice, mobile data,
    insights and content each have their own subdomain.
    """

    STANDARD = "api"
    MOBILE_DATA = "bundles"
    VOICE = "voice"
    INSIGHTS = "insights"
    CONTENT = "content"

    @classmethod
    def for_path(cls, path: str) -> "Endpoint":
        """
        Pick the service host for a resource path.

        Example:
            >>> Endpoint.for_path("/mobile/data/request")
            <Endpoint.MOBILE_DATA: 'bundles'>
            >>> Endpoint.for_path("/version1/messaging")
            <Endpoint.STANDARD: 'api'>
        """
        if "mobile/data" in path:
            return cls.MOBILE_DATA
        if path in VOICE_PATHS or "voice" in path:
            return cls.VOICE
        if "insights" in path:
            return cls.INSIGHTS
        if "content" in path:
            return cls.CONTENT
        return cls.STANDARD

    def build_url(self, environment: Environment, path: str) -> str:
        """Build the absolute URL for ``path`` on this host."""
        domain = environment.domain
        if self is Endpoint.CONTENT:
            # sandbox serves content from the api host
            if environment is Environment.SANDBOX:
                return f"https://api.{domain}/version1{path}"
            return f"https://content.{domain}/version1{path}"
        return f"https://{self.value}.{domain}{path}"


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Controls how the SDK handles failed requests with exponential backoff.

    Attributes:
        max_attempts: Maximum number of attempts including the first (default: 3)
        initial_delay: Initial delay in seconds before first retry (default: 1.0)
        max_delay: Maximum delay in seconds between retries (default: 30.0)
        retry_on_timeout: Whether to retry on timeout errors (default: True)
        retry_on_rate_limit: Whether to retry on rate limit errors (default: True)

    Example:
        >>> retry_config = RetryConfig(max_attempts=5, initial_delay=2.0)
        >>> config = AtConfig(api_key="key", username="sandbox", retry_config=retry_config)
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    retry_on_timeout: bool = True
    retry_on_rate_limit: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be positive")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be greater than or equal to initial_delay")


@dataclass
class AtConfig:
    """
    Main configuration for the AT-Connect SDK.

    Holds the two static credentials (API key and application username)
    together with transport settings.

    Attributes:
        api_key: Africa's Talking API key (required)
        username: Application username, ``sandbox`` in the sandbox (required)
        environment: Sandbox or production
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates
        retry_config: Configuration for retry behavior
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        user_agent: Custom user agent string

    Example:
        >>> config = AtConfig(
        ...     api_key="your-api-key",
        ...     username="sandbox",
        ...     environment=Environment.SANDBOX,
        ... )
        >>> client = AtClient(config=config)

        Using environment variables:
        >>> # Set AFRICASTALKING_API_KEY and AFRICASTALKING_USERNAME in .env
        >>> config = AtConfig.from_env()
    """

    api_key: str
    username: str
    environment: Environment = Environment.SANDBOX
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    log_level: str = "INFO"
    user_agent: str = "at-connect-python/0.1.0"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.api_key:
            raise ConfigurationError(
                "API key is required. Set AFRICASTALKING_API_KEY environment variable "
                "or pass api_key parameter.",
                setting="api_key",
            )
        if not self.username:
            raise ConfigurationError(
                "Username is required. Set AFRICASTALKING_USERNAME environment variable "
                "or pass username parameter.",
                setting="username",
            )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", setting="timeout")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                "log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL",
                setting="log_level",
            )

        try:
            self.environment = Environment(self.environment)
        except ValueError:
            raise ConfigurationError(
                f"Unknown environment '{self.environment}'. "
                "Expected 'sandbox' or 'production'.",
                setting="environment",
            )

    @classmethod
    def from_env(
        cls,
        api_key: Optional[str] = None,
        username: Optional[str] = None,
        environment: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "AtConfig":
        """
        Create configuration from environment variables.

        Environment Variables:
            - AFRICASTALKING_API_KEY: API key (required if not passed as parameter)
            - AFRICASTALKING_USERNAME: Application username (required)
            - AFRICASTALKING_ENVIRONMENT: ``sandbox`` (default) or ``production``
            - AFRICASTALKING_TIMEOUT: Request timeout in seconds
            - AFRICASTALKING_MAX_RETRIES: Maximum request attempts
            - AFRICASTALKING_LOG_LEVEL: Logging level

        Args:
            api_key: Optional API key (overrides environment variable)
            username: Optional username (overrides environment variable)
            environment: Optional environment name (overrides environment variable)
            timeout: Optional timeout (overrides environment variable)

        Returns:
            AtConfig instance initialized from environment

        Raises:
            ConfigurationError: If credentials are missing or values are invalid
        """
        final_api_key = api_key or os.getenv("AFRICASTALKING_API_KEY", "")
        final_username = username or os.getenv("AFRICASTALKING_USERNAME", "")
        final_environment = (
            environment or os.getenv("AFRICASTALKING_ENVIRONMENT", "sandbox")
        ).lower()

        final_timeout = timeout
        if final_timeout is None:
            final_timeout = float(os.getenv("AFRICASTALKING_TIMEOUT", "30.0"))

        retry_config = RetryConfig(
            max_attempts=int(os.getenv("AFRICASTALKING_MAX_RETRIES", "3")),
            retry_on_timeout=os.getenv("AFRICASTALKING_RETRY_ON_TIMEOUT", "true").lower() == "true",
            retry_on_rate_limit=os.getenv("AFRICASTALKING_RETRY_ON_RATE_LIMIT", "true").lower() == "true",
        )

        return cls(
            api_key=final_api_key,
            username=final_username,
            environment=final_environment,
            timeout=final_timeout,
            retry_config=retry_config,
            log_level=os.getenv("AFRICASTALKING_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def base_url(self) -> str:
        """Base URL of the standard API host for the configured environment."""
        return self.environment.base_url

    def build_url(self, path: str) -> str:
        """
        Build the absolute URL for an API path.

        Example:
            >>> config = AtConfig(api_key="k", username="sandbox")
            >>> config.build_url("/version1/messaging")
            'https://api.sandbox.africastalking.com/version1/messaging'
            >>> config.build_url("/call")
            'https://voice.sandbox.africastalking.com/call'
        """
        return Endpoint.for_path(path).build_url(self.environment, path)

    def get_headers(self) -> dict[str, str]:
        """
        Get HTTP headers for API requests.

        The gateway authenticates with a plain ``apiKey`` header; the
        username travels in the request body or query string.
        """
        return {
            "apiKey": self.api_key,
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
