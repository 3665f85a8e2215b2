"""
OrderCloud SDK Configuration

Each client instance owns one immutable Configuration. To change a setting,
build a new Configuration (see Configuration.replace) and a new client.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional, Tuple

from .errors import ConfigurationError


DEFAULT_BASE_API_URL = "https://api.ordercloud.io"
DEFAULT_API_VERSION = "v1"
DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class CookieOptions:
    """Options for cookie-backed token storage."""

    # Prepended to every cookie name
    prefix: str = "ordercloud"
    samesite: Literal["strict", "lax", "none"] = "lax"
    secure: bool = False
    domain: Optional[str] = None
    path: str = "/"


@dataclass(frozen=True)
class Configuration:
    """SDK configuration options."""

    # API base URL (default: https://api.ordercloud.io)
    base_api_url: str = DEFAULT_BASE_API_URL
    # API version segment prepended to resource paths (default: v1)
    api_version: str = DEFAULT_API_VERSION
    # Client ID of the API client; used for token refresh and storage keys
    client_id: Optional[str] = None
    # Request timeout in seconds (default: 60)
    timeout: float = DEFAULT_TIMEOUT
    # Cookie options used when tokens are stored in a cookie jar
    cookie_options: CookieOptions = field(default_factory=CookieOptions)
    # Number of retry attempts for network errors and retryable statuses (default: 0)
    retry_attempts: int = 0
    # Base delay between retries in seconds, multiplied by the attempt number
    retry_delay: float = 1.0
    # Response statuses that are retried
    retry_statuses: Tuple[int, ...] = (429, 502, 503, 504)
    # Custom headers to include in every request
    headers: Optional[Mapping[str, str]] = None
    # Enable debug logging (default: False)
    debug: bool = False

    def replace(self, **changes) -> "Configuration":
        """Return a new Configuration with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is unusable."""
        if not self.base_api_url:
            raise ConfigurationError("base_api_url is required")
        if not self.api_version:
            raise ConfigurationError("api_version is required")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError(
                "timeout must be a positive number of seconds",
                {"timeout": self.timeout},
            )
        if self.retry_attempts < 0:
            raise ConfigurationError(
                "retry_attempts cannot be negative",
                {"retry_attempts": self.retry_attempts},
            )
