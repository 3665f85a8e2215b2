"""
Request pipeline for resource calls.

Every resource call resolves its token first, then attaches the headers
and dispatches through the transport.
"""

from typing import Any, Dict, Mapping, Optional

from .resolver import AuthResolver
from .transport import HttpTransport
from .types import HttpMethod, Impersonation, RequestIntent, RequestOptions


def bearer_header(token: str) -> str:
    # An empty token still sends the scheme; header values cannot end in whitespace
    return f"Bearer {token}" if token else "Bearer"


class HttpClient:
    """Sends authorized JSON requests to the API."""

    def __init__(self, resolver: AuthResolver, transport: HttpTransport) -> None:
        self._resolver = resolver
        self._transport = transport

    async def request(self, intent: RequestIntent) -> Any:
        """
        Send one API call.

        Raises:
            ApiError: If the API answers with a non-success status
            CancellationError: If the call is cancelled or times out
            httpx.RequestError: Unmodified, for connectivity failures
        """
        options = intent.options
        if options.cancel_token is not None:
            options.cancel_token.raise_if_cancelled()

        token = await self._resolver.resolve(intent)
        headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Authorization": bearer_header(token),
        }

        result = await self._transport.send(
            intent.method,
            intent.path,
            headers=headers,
            json=intent.body,
            params=intent.params,
            cancel_token=options.cancel_token,
            timeout=options.timeout,
            request_type=options.request_type,
        )
        return result.unwrap()

    async def _call(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[RequestOptions] = None,
        impersonation: Impersonation = Impersonation.NORMAL,
    ) -> Any:
        intent = RequestIntent(
            method=method,
            path=path,
            body=body,
            params=params,
            options=options or RequestOptions(),
            impersonation=impersonation,
        )
        return await self.request(intent)

    async def get(self, path: str, params=None, options=None, impersonation=Impersonation.NORMAL) -> Any:
        return await self._call("GET", path, params=params, options=options, impersonation=impersonation)

    async def post(self, path: str, body=None, params=None, options=None, impersonation=Impersonation.NORMAL) -> Any:
        return await self._call("POST", path, body, params, options, impersonation)

    async def put(self, path: str, body=None, params=None, options=None, impersonation=Impersonation.NORMAL) -> Any:
        return await self._call("PUT", path, body, params, options, impersonation)

    async def patch(self, path: str, body=None, params=None, options=None, impersonation=Impersonation.NORMAL) -> Any:
        return await self._call("PATCH", path, body, params, options, impersonation)

    async def delete(self, path: str, params=None, options=None, impersonation=Impersonation.NORMAL) -> Any:
        return await self._call("DELETE", path, params=params, options=options, impersonation=impersonation)
