"""Service-account access tokens for the Google Calendar and Drive APIs."""

import asyncio
import base64
import binascii
import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

import httpx
from jose.exceptions import JOSEError

from voice_agent.core.config import Settings
from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.core.security import (
    GOOGLE_TOKEN_URL,
    JWT_BEARER_GRANT,
    create_service_account_assertion,
)

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/drive",
]
_REFRESH_MARGIN = timedelta(seconds=60)


class TokenProvider(Protocol):
    async def get_access_token(self, *, force_refresh: bool = False) -> str: ...


def load_service_account_info(settings: Settings) -> dict[str, Any] | None:
    """Service-account JSON from GOOGLE_JSON (raw or base64) or the key file; None if absent."""
    raw = settings.google_json.strip()
    if raw:
        if not raw.startswith("{"):
            try:
                raw = base64.b64decode(raw).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise ValueError("GOOGLE_JSON is neither JSON nor base64-encoded JSON") from e
        return _validate_info(json.loads(raw))
    key_path = Path(settings.google_service_account_file)
    if settings.google_service_account_file and key_path.is_file():
        return _validate_info(json.loads(key_path.read_text(encoding="utf-8")))
    return None


def _validate_info(info: Any) -> dict[str, Any]:
    if not isinstance(info, dict):
        raise ValueError("Service account credentials must be a JSON object")
    missing = [k for k in ("client_email", "private_key") if not info.get(k)]
    if missing:
        raise ValueError(f"Service account credentials missing: {', '.join(missing)}")
    return info


class ServiceAccountTokenProvider:
    """Exchanges a signed assertion for an access token and caches it until near expiry."""

    def __init__(
        self,
        info: dict[str, Any],
        http_client: httpx.AsyncClient,
        scopes: list[str] | None = None,
        subject: str | None = None,
    ) -> None:
        self._info = info
        self._http_client = http_client
        self._scopes = scopes or SCOPES
        self._subject = subject or None
        self._token_uri = info.get("token_uri") or GOOGLE_TOKEN_URL
        self._access_token: str | None = None
        self._expires_at: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def client_email(self) -> str:
        return self._info["client_email"]

    def _token_is_fresh(self) -> bool:
        if self._access_token is None or self._expires_at is None:
            return False
        return datetime.now(UTC) < self._expires_at

    async def get_access_token(self, *, force_refresh: bool = False) -> str:
        async with self._lock:
            if force_refresh or not self._token_is_fresh():
                await self._refresh()
            if self._access_token is None:
                raise UpstreamUnavailable("Google sign-in returned no access token.")
            return self._access_token

    async def _refresh(self) -> None:
        try:
            assertion = create_service_account_assertion(
                client_email=self._info["client_email"],
                private_key=self._info["private_key"],
                scopes=self._scopes,
                subject=self._subject,
                private_key_id=self._info.get("private_key_id"),
                audience=self._token_uri,
            )
        except JOSEError as e:
            raise UpstreamUnavailable("Google credentials are invalid.") from e
        try:
            resp = await self._http_client.post(
                self._token_uri,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable("Google sign-in is unavailable.") from e
        if resp.status_code != 200:
            logger.warning(
                "Google token exchange failed: status=%s body=%s",
                resp.status_code,
                resp.text[:500],
            )
            raise UpstreamUnavailable("Google sign-in failed.")
        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamUnavailable("Google sign-in returned an invalid response.") from e
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise UpstreamUnavailable("Google sign-in returned no access token.")
        expires_in = payload.get("expires_in")
        seconds = 3600
        if isinstance(expires_in, int | float) and not isinstance(expires_in, bool) and expires_in > 0:
            seconds = int(expires_in)
        self._access_token = token
        ttl = max(timedelta(seconds=seconds) - _REFRESH_MARGIN, timedelta(seconds=30))
        self._expires_at = datetime.now(UTC) + ttl
        logger.debug("Refreshed Google access token for %s", self.client_email)


class MissingCredentials:
    """Stand-in provider when no service account is configured; every call fails upstream."""

    async def get_access_token(self, *, force_refresh: bool = False) -> str:
        raise UpstreamUnavailable("Google credentials are not configured.")


def build_token_provider(settings: Settings, http_client: httpx.AsyncClient) -> TokenProvider:
    try:
        info = load_service_account_info(settings)
    except (ValueError, json.JSONDecodeError) as e:
        logger.error("AUTH ERROR: %s", e)
        return MissingCredentials()
    if info is None:
        logger.warning(
            "Google service account not configured (set GOOGLE_JSON or %s)",
            settings.google_service_account_file,
        )
        return MissingCredentials()
    return ServiceAccountTokenProvider(
        info, http_client, subject=settings.google_impersonate_user or None
    )
