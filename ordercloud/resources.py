"""
OrderCloud API resources.

Each resource maps its methods onto endpoint paths and sends them through
the shared HttpClient. Use ``resource.impersonating()`` to authorize calls
with the stored impersonation token instead of the access token.
"""

import copy
from typing import Any, Dict, List, Mapping, Optional, TypeVar
from urllib.parse import quote

from .http import HttpClient
from .types import Impersonation, RequestOptions


R = TypeVar("R", bound="Resource")


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def list_params(
    search: Optional[str] = None,
    search_on: Optional[List[str]] = None,
    sort_by: Optional[List[str]] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    filters: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the query parameters shared by list endpoints."""
    return {
        "search": search,
        "searchOn": ",".join(search_on) if search_on else None,
        "sortBy": ",".join(sort_by) if sort_by else None,
        "page": page,
        "pageSize": page_size,
        "filters": filters,
    }


class Resource:
    """Base class for API resources."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http
        self._impersonation = Impersonation.NORMAL

    def impersonating(self: R) -> R:
        """Return a view of this resource whose calls use the impersonation token."""
        view = copy.copy(self)
        view._impersonation = Impersonation.IMPERSONATED
        return view

    async def _get(self, path: str, params=None, options: Optional[RequestOptions] = None) -> Any:
        return await self._http.get(path, params=params, options=options, impersonation=self._impersonation)

    async def _post(self, path: str, body=None, options: Optional[RequestOptions] = None) -> Any:
        return await self._http.post(path, body, options=options, impersonation=self._impersonation)

    async def _put(self, path: str, body=None, options: Optional[RequestOptions] = None) -> Any:
        return await self._http.put(path, body, options=options, impersonation=self._impersonation)

    async def _patch(self, path: str, body=None, options: Optional[RequestOptions] = None) -> Any:
        return await self._http.patch(path, body, options=options, impersonation=self._impersonation)

    async def _delete(self, path: str, options: Optional[RequestOptions] = None) -> Any:
        return await self._http.delete(path, options=options, impersonation=self._impersonation)


class Products(Resource):
    """Products catalog endpoints."""

    async def list(self, search=None, search_on=None, sort_by=None, page=None, page_size=None,
                   filters=None, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """List products; returns a ListPage with Meta and Items."""
        params = list_params(search, search_on, sort_by, page, page_size, filters)
        return await self._get("/products", params, options)

    async def get(self, product_id: str, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get(f"/products/{_segment(product_id)}", options=options)

    async def create(self, product: Dict[str, Any], options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._post("/products", product, options)

    async def save(self, product_id: str, product: Dict[str, Any],
                   options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """Create or update a product."""
        return await self._put(f"/products/{_segment(product_id)}", product, options)

    async def patch(self, product_id: str, partial: Dict[str, Any],
                    options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._patch(f"/products/{_segment(product_id)}", partial, options)

    async def delete(self, product_id: str, options: Optional[RequestOptions] = None) -> None:
        await self._delete(f"/products/{_segment(product_id)}", options)


class Me(Resource):
    """Endpoints scoped to the authenticated user."""

    async def get(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get("/me", options=options)

    async def list_products(self, search=None, search_on=None, sort_by=None, page=None, page_size=None,
                            filters=None, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        params = list_params(search, search_on, sort_by, page, page_size, filters)
        return await self._get("/me/products", params, options)

    async def list_orders(self, search=None, search_on=None, sort_by=None, page=None, page_size=None,
                          filters=None, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        params = list_params(search, search_on, sort_by, page, page_size, filters)
        return await self._get("/me/orders", params, options)


class Users(Resource):
    """Buyer user endpoints."""

    async def list(self, buyer_id: str, search=None, search_on=None, sort_by=None, page=None,
                   page_size=None, filters=None, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        params = list_params(search, search_on, sort_by, page, page_size, filters)
        return await self._get(f"/buyers/{_segment(buyer_id)}/users", params, options)

    async def get(self, buyer_id: str, user_id: str, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get(f"/buyers/{_segment(buyer_id)}/users/{_segment(user_id)}", options=options)


class GroupOrders(Resource):
    """Group order invitations."""

    async def get_token(self, invitation_id: str, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """Get a token to act on the group order behind an invitation."""
        return await self._post(f"/grouporders/{_segment(invitation_id)}/token", None, options)


class BundleSubscriptionItems(Resource):
    """Items of a bundle added to a subscription."""

    async def create(self, subscription_id: str, bundle_id: str, bundle_items: Dict[str, Any],
                     options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        path = f"/subscriptions/{_segment(subscription_id)}/bundles/{_segment(bundle_id)}"
        return await self._post(path, bundle_items, options)

    async def delete(self, subscription_id: str, bundle_id: str, bundle_item_id: str,
                     options: Optional[RequestOptions] = None) -> None:
        path = (
            f"/subscriptions/{_segment(subscription_id)}/bundles/{_segment(bundle_id)}"
            f"/{_segment(bundle_item_id)}"
        )
        await self._delete(path, options)


class SubscriptionIntegrations(Resource):
    """Marketplace subscription integration settings."""

    PATH = "/integrations/subscription"

    async def get(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get(self.PATH, options=options)

    async def save(self, integration: Dict[str, Any], options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._put(self.PATH, integration, options)

    async def patch(self, partial: Dict[str, Any], options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._patch(self.PATH, partial, options)

    async def delete(self, options: Optional[RequestOptions] = None) -> None:
        await self._delete(self.PATH, options)


class UserInfo(Resource):
    """OpenID Connect user info."""

    async def get_token(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get("oauth/userinfo", options=options)


class Certs(Resource):
    """Public keys used to sign tokens."""

    async def get_public_key(self, key_id: str, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        return await self._get(f"oauth/certs/{_segment(key_id)}", options=options)
