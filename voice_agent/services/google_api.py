import logging
from typing import Any

import httpx

from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.services.google_auth_service import TokenProvider

logger = logging.getLogger(__name__)


def safe_google_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return " ".join(error["message"].split())[:200]
        if isinstance(error, str) and error.strip():
            return " ".join(error.split())[:200]
    text = response.text.strip()
    return " ".join(text.split())[:200] if text else "Request failed without an error payload"


class GoogleApiClient:
    """Bearer-authenticated JSON requests against a Google REST API."""

    service_name = "Google"

    def __init__(self, http_client: httpx.AsyncClient, tokens: TokenProvider) -> None:
        self._http_client = http_client
        self._tokens = tokens

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        response = await self._send(method, url, params, json_body, content, headers, force_refresh=False)
        if response.status_code == 401:
            response = await self._send(method, url, params, json_body, content, headers, force_refresh=True)
        if response.status_code < 200 or response.status_code >= 300:
            logger.warning(
                "%s API %s %s failed (%s): %s",
                self.service_name,
                method,
                url,
                response.status_code,
                safe_google_error_message(response),
            )
            raise UpstreamUnavailable(f"{self.service_name} request failed.")
        if response.status_code == 204 or not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"{self.service_name} returned an invalid response.") from e
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"{self.service_name} returned an unexpected response.")
        return payload

    async def _send(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        json_body: dict[str, Any] | None,
        content: bytes | None,
        headers: dict[str, str] | None,
        *,
        force_refresh: bool,
    ) -> httpx.Response:
        token = await self._tokens.get_access_token(force_refresh=force_refresh)
        all_headers = {"Authorization": f"Bearer {token}"}
        if headers:
            all_headers.update(headers)
        try:
            return await self._http_client.request(
                method,
                url,
                params=params,
                json=json_body,
                content=content,
                headers=all_headers,
            )
        except httpx.HTTPError as e:
            logger.warning("%s API %s %s: %s", self.service_name, method, url, e)
            raise UpstreamUnavailable(f"{self.service_name} is unreachable.") from e
