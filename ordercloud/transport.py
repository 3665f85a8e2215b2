"""
OrderCloud SDK Transport

Performs the network calls for the SDK on top of httpx. Every call returns
a TransportResult tagged with what happened (success, HTTP error, network
error, cancellation) instead of raising, so callers switch on the tag.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from .cancellation import CancelToken
from .configuration import Configuration
from .errors import CancellationError, normalize_error, strip_bom


logger = logging.getLogger("ordercloud.transport")

# Paths containing this segment are not prefixed with the API version
OAUTH_PATH_SEGMENT = "oauth/"


class ResultKind(str, Enum):
    """Outcome of one network exchange."""

    OK = "ok"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    CANCELLED = "cancelled"


@dataclass
class TransportResult:
    """Tagged result of a network exchange."""

    kind: ResultKind
    request: Optional[httpx.Request] = None
    response: Optional[httpx.Response] = None
    # Parsed JSON body (success or error)
    data: Any = None
    # Raw body when it is not JSON (HTML error pages, plain text)
    text: Optional[str] = None
    # Original exception for NETWORK_ERROR and CANCELLED results
    error: Optional[BaseException] = None
    request_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.OK

    def unwrap(self) -> Any:
        """
        Return the response data, or raise the error this result stands for.

        Raises:
            CancellationError: If the request was cancelled or timed out
            ApiError: If the API answered with a non-success status
            httpx.RequestError: Unmodified, for connectivity failures
        """
        if self.kind is ResultKind.OK:
            return self.data
        if self.kind in (ResultKind.CANCELLED, ResultKind.NETWORK_ERROR):
            assert self.error is not None
            raise self.error
        raise normalize_error(self, self.request_type)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize_params(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """
    Serialize query parameters.

    None values are dropped, lists become repeated keys, booleans are
    lowercased. The ``filters`` mapping is flattened into top-level keys;
    any other nested mapping becomes ``key.subkey``.
    """
    if not params:
        return []

    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                name = sub_key if key == "filters" else f"{key}.{sub_key}"
                pairs.extend(_serialize_value(name, sub_value))
        else:
            pairs.extend(_serialize_value(key, value))
    return pairs


def _serialize_value(key: str, value: Any) -> List[Tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [(key, _stringify(v)) for v in value if v is not None]
    return [(key, _stringify(value))]


def _read_body(response: httpx.Response) -> Tuple[Any, Optional[str]]:
    """Return (json_data, text); exactly one is set for a non-empty body."""
    text = strip_bom(response.text)
    if not text:
        return None, None
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return json.loads(text), None
        except ValueError:
            return None, text
    return None, text


class HttpTransport:
    """Sends requests to the API and tags the outcome."""

    def __init__(self, config: Configuration, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._base_url = config.base_api_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._http_client

    def build_url(self, path: str) -> str:
        """
        Build the full URL for a path.

        OAuth endpoints (token, userinfo, certs) have no version segment.
        """
        if OAUTH_PATH_SEGMENT in path:
            return f"{self._base_url}/{path.lstrip('/')}"
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}/{self._config.api_version}{path}"

    async def send(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        cancel_token: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
        request_type: Optional[str] = None,
    ) -> TransportResult:
        """Send one request, retrying network errors and retryable statuses."""
        effective_timeout = timeout if timeout is not None else self._config.timeout
        request = self._get_client().build_request(
            method,
            self.build_url(path),
            headers={**(self._config.headers or {}), **(headers or {})},
            json=json,
            data=data,
            params=serialize_params(params),
            timeout=effective_timeout,
        )
        retry_attempts = self._config.retry_attempts

        for attempt in range(retry_attempts + 1):
            try:
                response = await self._dispatch(request, cancel_token, effective_timeout)
            except CancellationError as e:
                logger.debug("%s %s cancelled: %s", method, request.url, e.message)
                return TransportResult(ResultKind.CANCELLED, request=request, error=e, request_type=request_type)
            except httpx.TimeoutException as e:
                error = CancellationError(
                    f"Request timed out after {effective_timeout}s",
                    {"timeout": effective_timeout},
                )
                error.__cause__ = e
                return TransportResult(ResultKind.CANCELLED, request=request, error=error, request_type=request_type)
            except httpx.RequestError as e:
                if attempt < retry_attempts:
                    logger.debug("%s %s failed (%s), retrying", method, request.url, e)
                    await self._backoff(attempt)
                    continue
                return TransportResult(ResultKind.NETWORK_ERROR, request=request, error=e, request_type=request_type)

            logger.debug("%s %s -> %s", method, request.url, response.status_code)

            if response.is_success:
                body, text = _read_body(response)
                return TransportResult(
                    ResultKind.OK,
                    request=request,
                    response=response,
                    data=body,
                    text=text,
                    request_type=request_type,
                )

            if response.status_code in self._config.retry_statuses and attempt < retry_attempts:
                await self._backoff(attempt)
                continue

            body, text = _read_body(response)
            return TransportResult(
                ResultKind.HTTP_ERROR,
                request=request,
                response=response,
                data=body,
                text=text,
                request_type=request_type,
            )

        # Unreachable: the last attempt always returns
        raise RuntimeError("retry loop exited without a result")

    async def _dispatch(
        self,
        request: httpx.Request,
        cancel_token: Optional[CancelToken],
        timeout: Optional[float],
    ) -> httpx.Response:
        """Send the request, racing it against cancellation and the timeout."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        send_task = asyncio.ensure_future(self._get_client().send(request))
        cancel_task: Optional["asyncio.Future[None]"] = None
        waiters = {send_task}
        if cancel_token is not None:
            cancel_task = asyncio.ensure_future(cancel_token.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if send_task in done:
            return send_task.result()
        if cancel_task is not None and cancel_task in done:
            raise CancellationError(cancel_token.reason or "Request cancelled")
        raise CancellationError(f"Request timed out after {timeout}s", {"timeout": timeout})

    async def _backoff(self, attempt: int) -> None:
        await asyncio.sleep(self._config.retry_delay * (attempt + 1))

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
