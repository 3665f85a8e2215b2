"""
OrderCloud Python SDK

An async Python SDK for the OrderCloud commerce API with per-client token
storage, automatic token refresh and normalized API errors.
"""

from .client import OrderCloudClient, create_ordercloud_client
from .configuration import Configuration, CookieOptions
from .auth import Auth, build_scope
from .cancellation import AbortManager, CancelToken
from .types import (
    AccessToken,
    Impersonation,
    RequestIntent,
    RequestOptions,
    TokenKind,
    TokenStorage,
)
from .errors import (
    OrderCloudError,
    ApiError,
    CancellationError,
    ConfigurationError,
    InvalidTokenError,
    MalformedTokenError,
    ValidationError,
    is_ordercloud_error,
    is_cancel,
)
from .storage import CookieStorage, MemoryStorage, StorageKeyGenerator
from .tokens import TokenStore
from .validator import TokenValidator

__version__ = "0.1.0"
__all__ = [
    # Client
    "OrderCloudClient",
    "create_ordercloud_client",
    # Configuration
    "Configuration",
    "CookieOptions",
    # Auth
    "Auth",
    "build_scope",
    # Cancellation
    "AbortManager",
    "CancelToken",
    # Types
    "AccessToken",
    "Impersonation",
    "RequestIntent",
    "RequestOptions",
    "TokenKind",
    "TokenStorage",
    # Errors
    "OrderCloudError",
    "ApiError",
    "CancellationError",
    "ConfigurationError",
    "InvalidTokenError",
    "MalformedTokenError",
    "ValidationError",
    "is_ordercloud_error",
    "is_cancel",
    # Tokens
    "CookieStorage",
    "MemoryStorage",
    "StorageKeyGenerator",
    "TokenStore",
    "TokenValidator",
]
