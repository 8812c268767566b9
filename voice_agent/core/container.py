"""Process-wide collaborators shared by the REST routes and the MCP tools."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache

import httpx
from openai import AsyncOpenAI

from voice_agent.core.config import Settings, settings
from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.services.calendar_service import CalendarClient, GoogleCalendarClient
from voice_agent.services.content_service import ContentProvider, OpenAIContentProvider
from voice_agent.services.delivery_service import DeliveryOrchestrator, build_channels
from voice_agent.services.drive_service import GoogleDriveClient
from voice_agent.services.google_auth_service import build_token_provider
from voice_agent.services.knowledge_service import CorpusStore

logger = logging.getLogger(__name__)


class UnconfiguredContentProvider:
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise UpstreamUnavailable("AI provider is not configured.")


@dataclass
class Container:
    calendar: CalendarClient
    content: ContentProvider
    delivery: DeliveryOrchestrator
    corpus: CorpusStore
    http_client: httpx.AsyncClient | None = field(default=None, repr=False)

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def build_container(cfg: Settings) -> Container:
    http_client = httpx.AsyncClient(timeout=cfg.external_call_timeout_seconds)
    tokens = build_token_provider(cfg, http_client)
    drive = GoogleDriveClient(http_client, tokens)
    if cfg.openai_api_key:
        content: ContentProvider = OpenAIContentProvider(
            AsyncOpenAI(api_key=cfg.openai_api_key, timeout=cfg.external_call_timeout_seconds),
            cfg.openai_model,
        )
    else:
        logger.warning("OPENAI_API_KEY not set; collateral generation is disabled")
        content = UnconfiguredContentProvider()
    return Container(
        calendar=GoogleCalendarClient(http_client, tokens, cfg.time_zone_name),
        content=content,
        delivery=DeliveryOrchestrator(build_channels(cfg, drive), cfg.inline_preview_chars),
        corpus=CorpusStore(cfg.documents_dir),
        http_client=http_client,
    )


@lru_cache
def get_container() -> Container:
    return build_container(settings)
