"""
OrderCloud SDK Client

Async entry point for the OrderCloud API. Each client owns its tokens,
transport and resources; two clients never share state unless they are
given the same cookie jar.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .auth import Auth
from .configuration import Configuration
from .http import HttpClient
from .resolver import AuthResolver
from .resources import (
    BundleSubscriptionItems,
    Certs,
    GroupOrders,
    Me,
    Products,
    Resource,
    SubscriptionIntegrations,
    UserInfo,
    Users,
)
from .storage import StorageKeyGenerator
from .tokens import TokenStore, create_storage
from .transport import HttpTransport
from .types import AccessToken
from .validator import TokenValidator


logger = logging.getLogger("ordercloud")


class OrderCloudClient:
    """
    OrderCloud async client.

    Tokens obtained through ``auth`` are stored on the client and attached
    to every resource call; an expired access token is refreshed once per
    call when a refresh token is available.

    Example:
        async with OrderCloudClient(Configuration(client_id="...")) as oc:
            await oc.auth.login("buyer01", "Password1!")
            page = await oc.me.list_products(filters={"xp.Color": "red"})
    """

    def __init__(
        self,
        config: Optional[Configuration] = None,
        *,
        cookies: Optional[httpx.Cookies] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        validator: Optional[TokenValidator] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client configuration (defaults to Configuration())
            cookies: Cookie jar to keep tokens in, shared with the caller
            http_client: httpx.AsyncClient to send requests with; the caller
                keeps ownership and closes it
            validator: Token validator (inject a clock for testing)
        """
        self._config = config or Configuration()
        self._config.validate()
        self._debug = self._config.debug

        self._validator = validator or TokenValidator()
        self._tokens = TokenStore(
            self._config,
            storage=create_storage(self._config, cookies),
            validator=self._validator,
            key_generator=StorageKeyGenerator(self._config.client_id),
        )
        self._transport = HttpTransport(self._config, http_client)
        self._auth = Auth(self._config, self._transport, self._tokens)
        self._resolver = AuthResolver(self._config, self._tokens, self._validator, self._refresh)
        self._http = HttpClient(self._resolver, self._transport)

        # Resources (created lazily)
        self._resources: Dict[type, Resource] = {}

        self._log(f"OrderCloudClient initialized (base_api_url={self._config.base_api_url})")

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[OrderCloud] {message}", *args)

    async def _refresh(self, refresh_token: str, client_id: str) -> AccessToken:
        self._log("Refreshing expired access token")
        return await self._auth.refresh_token(refresh_token, client_id)

    def _resource(self, cls: type) -> Any:
        if cls not in self._resources:
            self._resources[cls] = cls(self._http)
        return self._resources[cls]

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def tokens(self) -> TokenStore:
        """Tokens held by this client."""
        return self._tokens

    @property
    def auth(self) -> Auth:
        return self._auth

    @property
    def http(self) -> HttpClient:
        """Authorized request pipeline, for endpoints without a resource class."""
        return self._http

    @property
    def products(self) -> Products:
        return self._resource(Products)

    @property
    def me(self) -> Me:
        return self._resource(Me)

    @property
    def users(self) -> Users:
        return self._resource(Users)

    @property
    def group_orders(self) -> GroupOrders:
        return self._resource(GroupOrders)

    @property
    def bundle_subscription_items(self) -> BundleSubscriptionItems:
        return self._resource(BundleSubscriptionItems)

    @property
    def subscription_integrations(self) -> SubscriptionIntegrations:
        return self._resource(SubscriptionIntegrations)

    @property
    def user_info(self) -> UserInfo:
        return self._resource(UserInfo)

    @property
    def certs(self) -> Certs:
        return self._resource(Certs)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Close the HTTP client if this client created it."""
        await self._transport.aclose()

    async def __aenter__(self) -> "OrderCloudClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


# =============================================================================
# Factory Functions
# =============================================================================

def create_ordercloud_client(config: Optional[Configuration] = None, **kwargs: Any) -> OrderCloudClient:
    """Create a new OrderCloud client."""
    return OrderCloudClient(config, **kwargs)
