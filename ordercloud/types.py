"""
OrderCloud SDK Type Definitions

Value types shared across the token store, the auth resolver and the
HTTP pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Literal, Mapping, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .cancellation import CancelToken


HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class TokenKind(str, Enum):
    """The token slots held for each client instance."""

    ACCESS = "access_token"
    REFRESH = "refresh_token"
    IMPERSONATION = "impersonation_token"
    IDENTITY = "identity_token"
    IDP_ACCESS = "idp_access_token"


class Impersonation(str, Enum):
    """Which stored token a call is authorized with."""

    NORMAL = "normal"
    IMPERSONATED = "impersonated"


@runtime_checkable
class TokenStorage(Protocol):
    """Token storage interface for custom implementations."""

    def get(self, key: str) -> Optional[str]:
        """Get the token stored under key."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a token under key."""
        ...

    def remove(self, key: str) -> None:
        """Remove the token stored under key."""
        ...


@dataclass(frozen=True)
class RequestOptions:
    """Per-call options accepted by every API method."""

    # Alternative token to the one stored in the client (bypasses refresh)
    access_token: Optional[str] = None
    # Cancel token; create with AbortManager.create_cancel_token()
    cancel_token: Optional["CancelToken"] = None
    # Identifies the type of request, useful for error logs
    request_type: Optional[str] = None
    # Timeout in seconds, overrides Configuration.timeout
    timeout: Optional[float] = None


@dataclass(frozen=True)
class RequestIntent:
    """One outgoing API call, before a token has been attached."""

    method: HttpMethod
    path: str
    body: Any = None
    params: Optional[Mapping[str, Any]] = None
    options: RequestOptions = field(default_factory=RequestOptions)
    impersonation: Impersonation = Impersonation.NORMAL


@dataclass
class AccessToken:
    """Token payload returned by the OAuth token endpoint."""

    access_token: str
    expires_in: int = 0
    token_type: str = "bearer"
    refresh_token: Optional[str] = None
    identity_token: Optional[str] = None
    idp_access_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessToken":
        """Create from dictionary."""
        return cls(
            access_token=data.get("access_token") or "",
            expires_in=data.get("expires_in", 0),
            token_type=data.get("token_type", "bearer"),
            refresh_token=data.get("refresh_token"),
            identity_token=data.get("identity_token"),
            idp_access_token=data.get("idp_access_token"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting absent optional tokens."""
        result: Dict[str, Any] = {
            "access_token": self.access_token,
            "expires_in": self.expires_in,
            "token_type": self.token_type,
        }
        if self.refresh_token is not None:
            result["refresh_token"] = self.refresh_token
        if self.identity_token is not None:
            result["identity_token"] = self.identity_token
        if self.idp_access_token is not None:
            result["idp_access_token"] = self.idp_access_token
        return result
