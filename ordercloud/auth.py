"""
OrderCloud SDK Authentication

OAuth2 grants against the token endpoint. Auth is built after the client's
TokenStore and receives it directly: tokens from a successful grant are
stored for the instance, and the resolver uses refresh_token() to renew an
expired access token.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .configuration import Configuration
from .errors import ValidationError
from .tokens import TokenStore
from .transport import HttpTransport
from .types import AccessToken, RequestOptions


logger = logging.getLogger("ordercloud.auth")

TOKEN_PATH = "oauth/token"

AUTH_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/json",
}


def _check_roles(value: Optional[Sequence[str]], name: str) -> None:
    if value is None:
        return
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list of strings", {name: value})
    if not all(isinstance(role, str) for role in value):
        raise ValidationError(f"{name} must be a list of strings", {name: value})


def build_scope(
    scope: Optional[Sequence[str]] = None,
    custom_roles: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """
    Join requested roles into the space-delimited ``scope`` field.

    Custom roles without base scopes keep a leading space, which is what
    the token endpoint has always received from this SDK.
    """
    _check_roles(scope, "scope")
    _check_roles(custom_roles, "custom_roles")

    if scope and not custom_roles:
        return " ".join(scope)
    if not scope and custom_roles:
        return " " + " ".join(custom_roles)
    if scope and custom_roles:
        return f"{' '.join(scope)} {' '.join(custom_roles)}"
    return None


class Auth:
    """OAuth token grants for one client instance."""

    def __init__(self, config: Configuration, transport: HttpTransport, token_store: TokenStore) -> None:
        self._config = config
        self._transport = transport
        self._tokens = token_store

    def _resolve_client_id(self, client_id: Optional[str]) -> str:
        resolved = client_id or self._config.client_id
        if not resolved:
            raise ValidationError("client_id is required (pass it or set Configuration.client_id)")
        return resolved

    async def login(
        self,
        username: str,
        password: str,
        client_id: Optional[str] = None,
        scope: Optional[List[str]] = None,
        custom_roles: Optional[List[str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> AccessToken:
        """
        Password grant, for client apps where the user is a human.

        Args:
            username: Username of the user logging in
            password: Password of the user logging in
            client_id: Client ID of the application (defaults to the configured one)
            scope: Roles being requested; all assigned roles if omitted
            custom_roles: Custom roles being requested
            options: Cancel token / request type for this call

        Returns:
            AccessToken; its tokens are also stored for this client
        """
        body = {
            "grant_type": "password",
            "username": username,
            "password": password,
            "client_id": self._resolve_client_id(client_id),
            "scope": build_scope(scope, custom_roles),
        }
        return await self._request_token(body, options)

    async def elevated_login(
        self,
        client_secret: str,
        username: str,
        password: str,
        client_id: Optional[str] = None,
        scope: Optional[List[str]] = None,
        custom_roles: Optional[List[str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> AccessToken:
        """Password grant that also sends the client secret."""
        body = {
            "grant_type": "password",
            "scope": build_scope(scope, custom_roles),
            "client_id": self._resolve_client_id(client_id),
            "username": username,
            "password": password,
            "client_secret": client_secret,
        }
        return await self._request_token(body, options)

    async def client_credentials(
        self,
        client_secret: str,
        client_id: Optional[str] = None,
        scope: Optional[List[str]] = None,
        custom_roles: Optional[List[str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> AccessToken:
        """Client credentials grant, best suited for backend systems."""
        body = {
            "grant_type": "client_credentials",
            "scope": build_scope(scope, custom_roles),
            "client_id": self._resolve_client_id(client_id),
            "client_secret": client_secret,
        }
        return await self._request_token(body, options)

    async def anonymous(
        self,
        client_id: Optional[str] = None,
        scope: Optional[List[str]] = None,
        custom_roles: Optional[List[str]] = None,
        anon_user_id: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> AccessToken:
        """
        Anonymous shopper token; requires an anonymous template user.

        Args:
            anon_user_id: Externally generated id used to track this user
                session (tracking events)
        """
        body = {
            "grant_type": "client_credentials",
            "client_id": self._resolve_client_id(client_id),
            "scope": build_scope(scope, custom_roles),
            "anonuserid": anon_user_id,
        }
        return await self._request_token(body, options)

    async def refresh_token(
        self,
        refresh_token: str,
        client_id: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> AccessToken:
        """Exchange a refresh token for a new access token."""
        body = {
            "grant_type": "refresh_token",
            "client_id": self._resolve_client_id(client_id),
            "refresh_token": refresh_token,
        }
        return await self._request_token(body, options)

    async def _request_token(self, body: Dict[str, Any], options: Optional[RequestOptions]) -> AccessToken:
        options = options or RequestOptions()
        form = {key: value for key, value in body.items() if value is not None}
        logger.debug("Requesting token (grant_type=%s)", form["grant_type"])

        result = await self._transport.send(
            "POST",
            TOKEN_PATH,
            headers=dict(AUTH_HEADERS),
            data=form,
            cancel_token=options.cancel_token,
            timeout=options.timeout,
            request_type=options.request_type,
        )
        token = AccessToken.from_dict(result.unwrap() or {})
        self._store_tokens(token)
        return token

    def _store_tokens(self, token: AccessToken) -> None:
        """Store the granted tokens for this client."""
        self._tokens.set_access_token(token.access_token)
        if token.refresh_token:
            self._tokens.set_refresh_token(token.refresh_token)
        if token.identity_token:
            self._tokens.set_identity_token(token.identity_token)
        if token.idp_access_token:
            self._tokens.set_idp_access_token(token.idp_access_token)
