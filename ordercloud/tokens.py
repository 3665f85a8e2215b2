"""
Per-client token store.

Holds the access, refresh, impersonation, identity and identity-provider
access tokens of one client instance. The store is created empty with the
client and is never shared between clients.
"""

import logging
from typing import Dict, Optional

import httpx

from .configuration import Configuration
from .errors import InvalidTokenError, MalformedTokenError
from .storage import CookieStorage, MemoryStorage, StorageKeyGenerator, detect_environment
from .types import TokenKind, TokenStorage
from .validator import TokenValidator


logger = logging.getLogger("ordercloud.tokens")

# Kinds that are decoded before being stored
_VALIDATED_KINDS = frozenset({TokenKind.ACCESS, TokenKind.IMPERSONATION})


def create_storage(config: Configuration, cookies: Optional[httpx.Cookies] = None) -> TokenStorage:
    """
    Pick the storage medium for the current runtime.

    A cookie jar is used when the caller shares one or when running in a
    browser; otherwise tokens stay in instance memory.
    """
    if cookies is None and detect_environment() == "browser":
        cookies = httpx.Cookies()
    if cookies is not None:
        return CookieStorage(cookies, config.cookie_options)
    return MemoryStorage()


class TokenStore:
    """Get, set and remove each kind of token for one client instance."""

    def __init__(
        self,
        config: Configuration,
        storage: Optional[TokenStorage] = None,
        validator: Optional[TokenValidator] = None,
        key_generator: Optional[StorageKeyGenerator] = None,
    ) -> None:
        self._storage = storage if storage is not None else MemoryStorage()
        self._validator = validator or TokenValidator()
        key_generator = key_generator or StorageKeyGenerator(config.client_id)
        self._keys: Dict[TokenKind, str] = {
            kind: key_generator.generate_key(kind.value) for kind in TokenKind
        }

    @property
    def storage(self) -> TokenStorage:
        return self._storage

    def key_for(self, kind: TokenKind) -> str:
        """Storage key used for a token kind."""
        return self._keys[kind]

    def get(self, kind: TokenKind) -> Optional[str]:
        """Get the stored token of the given kind, or None."""
        return self._storage.get(self._keys[kind]) or None

    def set(self, kind: TokenKind, token: str) -> None:
        """
        Store a token.

        Raises:
            MalformedTokenError: If an access or impersonation token cannot
                be decoded; nothing is stored in that case
        """
        if kind in _VALIDATED_KINDS:
            try:
                self._validator.decode(token)
            except InvalidTokenError as e:
                raise MalformedTokenError(
                    f"Cannot store {kind.value}: {e.message}",
                    {"kind": kind.value},
                ) from e
        self._storage.set(self._keys[kind], token)

    def remove(self, kind: TokenKind) -> None:
        """Remove the stored token of the given kind."""
        self._storage.remove(self._keys[kind])

    # =========================================================================
    # Access Tokens
    # =========================================================================

    def get_access_token(self) -> Optional[str]:
        return self.get(TokenKind.ACCESS)

    def set_access_token(self, token: str) -> None:
        self.set(TokenKind.ACCESS, token)

    def remove_access_token(self) -> None:
        self.remove(TokenKind.ACCESS)

    # =========================================================================
    # Refresh Tokens
    # =========================================================================

    def get_refresh_token(self) -> Optional[str]:
        return self.get(TokenKind.REFRESH)

    def set_refresh_token(self, token: str) -> None:
        self.set(TokenKind.REFRESH, token)

    def remove_refresh_token(self) -> None:
        self.remove(TokenKind.REFRESH)

    # =========================================================================
    # Impersonation Tokens
    # =========================================================================

    def get_impersonation_token(self) -> Optional[str]:
        return self.get(TokenKind.IMPERSONATION)

    def set_impersonation_token(self, token: str) -> None:
        self.set(TokenKind.IMPERSONATION, token)

    def remove_impersonation_token(self) -> None:
        self.remove(TokenKind.IMPERSONATION)

    # =========================================================================
    # Identity Tokens
    # =========================================================================

    def get_identity_token(self) -> Optional[str]:
        return self.get(TokenKind.IDENTITY)

    def set_identity_token(self, token: str) -> None:
        self.set(TokenKind.IDENTITY, token)

    def remove_identity_token(self) -> None:
        self.remove(TokenKind.IDENTITY)

    # =========================================================================
    # Identity Provider Access Tokens
    # =========================================================================

    def get_idp_access_token(self) -> Optional[str]:
        return self.get(TokenKind.IDP_ACCESS)

    def set_idp_access_token(self, token: str) -> None:
        self.set(TokenKind.IDP_ACCESS, token)

    def remove_idp_access_token(self) -> None:
        self.remove(TokenKind.IDP_ACCESS)

    def clear(self) -> None:
        """Remove every stored token."""
        for kind in TokenKind:
            self.remove(kind)
        logger.debug("Cleared all stored tokens")
