"""
Trade-In Client — Backend HTTP Client

Thin async wrapper over the trade-in backend JSON API. Every component that
talks to the backend (catalog, quote config, submissions, tracking) goes
through this client so transport failures are mapped into one error type.

No automatic retries: a retry is always a fresh user action.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tradein.config import settings
from tradein.errors import TransportError

logger = structlog.get_logger(__name__)

_GENERIC_FAILURE = "Request failed. Please try again."


def _server_message(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    return None


class TradeInAPIClient:
    """
    Async client for the trade-in backend.

    Usage:
        async with TradeInAPIClient() as api:
            data = await api.get_json("/cards/search", params={"q": "luffy"})
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> TradeInAPIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def url_for(self, path: str) -> str:
        """Absolute URL for a backend path (used for printable documents)."""
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a single API request and decode the JSON body.

        Raises:
            TransportError: on connection failure, non-2xx status or a
                non-JSON body. Carries the server message when present.
        """
        assert self._client is not None, "Client not initialized. Use 'async with'."

        try:
            response = await self._client.request(method, path, params=params, json=json_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "tradein_http_error",
                method=method,
                path=path,
                status_code=status_code,
            )
            message = _server_message(e.response) or _GENERIC_FAILURE
            raise TransportError(message, status_code=status_code, cause=e) from e
        except httpx.RequestError as e:
            logger.error(
                "tradein_request_error",
                method=method,
                path=path,
                error=str(e),
            )
            raise TransportError(_GENERIC_FAILURE, cause=e) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("tradein_invalid_json", method=method, path=path)
            raise TransportError(_GENERIC_FAILURE, status_code=response.status_code, cause=e) from e

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug("tradein_get", path=path, params=params)
        return await self._request("GET", path, params=params)

    async def post_json(self, path: str, body: dict[str, Any]) -> Any:
        logger.debug("tradein_post", path=path)
        return await self._request("POST", path, json_body=body)
