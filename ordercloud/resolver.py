"""
Access token resolution.

Picks the token a request should carry and renews it through the refresh
grant when it has expired. A failed refresh never raises: the request goes
out with an empty token and the API answers with its own 401.
"""

import logging
from typing import Awaitable, Callable, Optional

from .configuration import Configuration
from .tokens import TokenStore
from .types import AccessToken, Impersonation, RequestIntent
from .validator import TokenValidator


logger = logging.getLogger("ordercloud.resolver")

# refresh_token, client_id -> AccessToken
Refresher = Callable[[str, str], Awaitable[AccessToken]]


class AuthResolver:
    """Resolves the bearer token for each outgoing request."""

    def __init__(
        self,
        config: Configuration,
        token_store: TokenStore,
        validator: TokenValidator,
        refresher: Refresher,
    ) -> None:
        self._config = config
        self._tokens = token_store
        self._validator = validator
        self._refresher = refresher

    async def resolve(self, intent: RequestIntent) -> str:
        """Resolve the token for a request intent."""
        return await self.get_valid_token(intent.options.access_token, intent.impersonation)

    async def get_valid_token(
        self,
        access_token: Optional[str] = None,
        impersonation: Impersonation = Impersonation.NORMAL,
    ) -> str:
        """
        Get a usable token for one request.

        An explicit access_token is returned as-is. Otherwise the stored
        impersonation or access token is used, refreshed at most once if it
        has expired.

        Returns:
            The token, or "" when none is available or refreshing failed
        """
        if access_token:
            return access_token

        if impersonation is Impersonation.IMPERSONATED:
            token = self._tokens.get_impersonation_token() or ""
        else:
            token = self._tokens.get_access_token() or ""

        if not self._validator.is_expired(token):
            return token

        refresh_token = self._tokens.get_refresh_token()
        if not refresh_token:
            return token

        client_id = self._config.client_id or self._client_id_from(token)
        if not client_id:
            logger.debug("Token expired and no client id is available to refresh it")
            return ""

        return await self._refresh(refresh_token, client_id)

    def _client_id_from(self, token: str) -> Optional[str]:
        if not token:
            return None
        return self._validator.get_client_id(token)

    async def _refresh(self, refresh_token: str, client_id: str) -> str:
        try:
            result = await self._refresher(refresh_token, client_id)
            self._tokens.set_access_token(result.access_token)
        except Exception as e:
            # Includes CancellationError; the request proceeds unauthenticated
            logger.debug("Token refresh failed: %s", e)
            return ""
        logger.debug("Access token refreshed")
        return result.access_token
