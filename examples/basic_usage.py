"""
OrderCloud Python SDK - Basic Usage Example

This example demonstrates the basic usage of the OrderCloud Python SDK.
"""

import asyncio
import logging
import os

from ordercloud import (
    AbortManager,
    ApiError,
    CancellationError,
    Configuration,
    OrderCloudClient,
    RequestOptions,
)


async def main():
    """Log in as a buyer, browse products and look at an order as that buyer."""
    logging.basicConfig(level=logging.DEBUG)

    config = Configuration(
        base_api_url="https://sandboxapi.ordercloud.io",
        client_id="YOUR-CLIENT-ID",
        debug=True,
    )

    async with OrderCloudClient(config) as client:
        try:
            await client.auth.login("buyer01", "Password123!", scope=["Shopper", "MeAdmin"])
        except ApiError as e:
            print(f"Login failed: {e.error_code} {e.message}")
            return

        # Tokens are stored on the client and refreshed when they expire
        page = await client.me.list_products(
            search="shirt",
            page_size=10,
            filters={"xp.Color": "red"},
        )
        for product in page.get("Items", []):
            print(f"{product['ID']}: {product['Name']}")

        # Calls can be cancelled or given their own timeout
        cancel_token = AbortManager.create_cancel_token()
        try:
            orders = client.me.list_orders(options=RequestOptions(cancel_token=cancel_token, timeout=5))
            cancel_token.cancel("no longer needed")
            await orders
        except CancellationError as e:
            print(f"Cancelled: {e.message}")

        # Impersonate a user with a token issued to an admin session
        client.tokens.set_impersonation_token(os.environ["ORDERCLOUD_IMPERSONATION_TOKEN"])
        me = await client.me.impersonating().get()
        print(f"Impersonating {me.get('Username')}")


if __name__ == "__main__":
    asyncio.run(main())
