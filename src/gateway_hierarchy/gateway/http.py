"""Document gateway talking to the gateway admin API over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gateway_hierarchy.core.errors import GatewayError

logger = logging.getLogger(__name__)

_CONFIG_ENDPOINT = "/config"


class HttpDocumentGateway:
    """Read and replace the whole configuration via ``GET``/``POST /config``."""

    def __init__(self, base_url: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self._base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def _request(self, method: str, endpoint: str, json: Any = None) -> httpx.Response:
        try:
            response = await self._client.request(method, endpoint, json=json)
        except httpx.ConnectError as exc:
            raise GatewayError(
                f"Unable to connect to the gateway at {self._base_url}. Please ensure the server is running.",
                status=0,
            ) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"Unexpected error: {exc}") from exc

        if response.status_code == 500:
            raise GatewayError(f"Server configuration error: {response.text}", status=500, configuration_error=True)
        if response.is_error:
            raise GatewayError(
                f"API request failed: {response.status_code} {response.reason_phrase} - {response.text}",
                status=response.status_code,
            )
        return response

    async def fetch(self) -> dict[str, Any]:
        response = await self._request("GET", _CONFIG_ENDPOINT)
        if "application/json" not in response.headers.get("content-type", ""):
            return {}
        document = response.json()
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise GatewayError("Gateway returned a configuration that is not a JSON object")
        return document

    async def persist(self, document: dict[str, Any]) -> None:
        await self._request("POST", _CONFIG_ENDPOINT, json=document)
        logger.info("Persisted configuration to %s", self._base_url)

    async def ping(self) -> bool:
        try:
            await self._request("GET", _CONFIG_ENDPOINT)
        except GatewayError:
            return False
        return True

    async def dispose(self) -> None:
        await self._client.aclose()
