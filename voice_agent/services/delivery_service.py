"""Hands generated collateral to the requester over an ordered list of channels.

Each channel either returns a reference (success) or raises (failure). The
orchestrator tries them in order, records every attempt, stops at the first
success and otherwise ends with the inline preview, which does no I/O and
cannot fail. A channel is never retried, and side effects of a failed channel
(such as a created but unshared document) are left in place.
"""

import asyncio
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from voice_agent.core.config import Settings
from voice_agent.core.errors import ToolError, UpstreamUnavailable
from voice_agent.models.delivery import (
    DeliveryAttempt,
    DeliveryChannel,
    DeliveryFailure,
    DeliveryOutcome,
    DeliveryRequest,
    DeliverySuccess,
)
from voice_agent.services.drive_service import GoogleDriveClient
from voice_agent.services.email_service import build_collateral_html, send_email

logger = logging.getLogger(__name__)


class Channel(Protocol):
    channel: DeliveryChannel

    async def publish(self, request: DeliveryRequest) -> str: ...

    def describe(self, request: DeliveryRequest, reference: str, failed: list[DeliveryChannel]) -> str: ...


class CloudDocChannel:
    channel = DeliveryChannel.CLOUD_DOC

    def __init__(self, drive: GoogleDriveClient, share_with: str | None = None) -> None:
        self._drive = drive
        self._share_with = share_with

    async def publish(self, request: DeliveryRequest) -> str:
        created = await self._drive.create_document(request.title, request.content)
        if self._share_with:
            await self._drive.share_with(created.id, self._share_with)
        return created.web_view_link

    def describe(self, request: DeliveryRequest, reference: str, failed: list[DeliveryChannel]) -> str:
        return f"I have created the {request.format} as a Google Doc. You can access it here: {reference}"


class EmailChannel:
    channel = DeliveryChannel.EMAIL

    def __init__(self, default_recipient: str | None = None) -> None:
        self._default_recipient = default_recipient

    async def publish(self, request: DeliveryRequest) -> str:
        to_email = request.recipient or self._default_recipient
        if not to_email:
            raise UpstreamUnavailable("No email recipient is configured.")
        await send_email(
            to_email,
            request.title,
            build_collateral_html(request.title, request.content),
            text_body=request.content,
        )
        return to_email

    def describe(self, request: DeliveryRequest, reference: str, failed: list[DeliveryChannel]) -> str:
        if DeliveryChannel.CLOUD_DOC in failed:
            return f"I couldn't save the {request.format} to Google Drive, so I emailed it to {reference} instead."
        return f"I have emailed the {request.format} to {reference}."


def _slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:60] or "collateral"


class StaticFileChannel:
    channel = DeliveryChannel.STATIC_FILE

    def __init__(self, static_dir: str | Path, public_base_url: str) -> None:
        self._static_dir = Path(static_dir)
        self._public_base_url = public_base_url.rstrip("/")

    def _write(self, filename: str, content: str) -> None:
        self._static_dir.mkdir(parents=True, exist_ok=True)
        (self._static_dir / filename).write_text(content, encoding="utf-8")

    async def publish(self, request: DeliveryRequest) -> str:
        stamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S%f")
        filename = f"{_slugify(request.topic)}-{stamp}.md"
        try:
            await asyncio.to_thread(self._write, filename, request.content)
        except OSError as e:
            raise UpstreamUnavailable("Could not save the file.") from e
        return f"{self._public_base_url}/static/{filename}"

    def describe(self, request: DeliveryRequest, reference: str, failed: list[DeliveryChannel]) -> str:
        return f"I have published the {request.format}. You can read it here: {reference}"


def inline_preview(content: str, limit: int) -> str:
    if len(content) <= limit:
        return content
    return content[:limit].rstrip() + "..."


class DeliveryOrchestrator:
    def __init__(self, channels: list[Channel], inline_preview_chars: int = 1500) -> None:
        self._channels = list(channels)
        self._inline_preview_chars = inline_preview_chars

    @property
    def channels(self) -> list[DeliveryChannel]:
        return [c.channel for c in self._channels] + [DeliveryChannel.INLINE]

    async def deliver(self, request: DeliveryRequest) -> DeliveryOutcome:
        attempts: list[DeliveryAttempt] = []
        for channel in self._channels:
            try:
                reference = await channel.publish(request)
            except ToolError as e:
                reason = e.message
            except Exception as e:
                logger.exception("Delivery channel %s crashed", channel.channel.value)
                reason = f"{type(e).__name__}: {e}"
            else:
                failed = [a.channel for a in attempts if not a.succeeded]
                attempts.append(
                    DeliveryAttempt(channel=channel.channel, result=DeliverySuccess(reference=reference))
                )
                logger.info("Delivered %r via %s", request.title, channel.channel.value)
                return DeliveryOutcome(
                    channel=channel.channel,
                    message=channel.describe(request, reference, failed),
                    reference=reference,
                    attempts=attempts,
                )
            attempts.append(
                DeliveryAttempt(channel=channel.channel, result=DeliveryFailure(reason=reason))
            )
            logger.warning("Delivery via %s failed: %s", channel.channel.value, reason)

        preview = inline_preview(request.content, self._inline_preview_chars)
        attempts.append(
            DeliveryAttempt(channel=DeliveryChannel.INLINE, result=DeliverySuccess(reference="inline"))
        )
        logger.info("Delivered %r inline after %d failed channel(s)", request.title, len(attempts) - 1)
        return DeliveryOutcome(
            channel=DeliveryChannel.INLINE,
            message=f"I wrote the {request.format}, but couldn't save or send it. Here it is:\n\n{preview}",
            attempts=attempts,
        )


def build_channels(settings: Settings, drive: GoogleDriveClient) -> list[Channel]:
    """Channels named in DELIVERY_CHANNELS, in the configured order."""
    channels: list[Channel] = []
    for name in settings.delivery_channel_list:
        if name == DeliveryChannel.CLOUD_DOC.value:
            channels.append(CloudDocChannel(drive, share_with=settings.email_user or None))
        elif name == DeliveryChannel.EMAIL.value:
            channels.append(EmailChannel(settings.fallback_email or settings.email_user or None))
        elif name == DeliveryChannel.STATIC_FILE.value:
            channels.append(StaticFileChannel(settings.static_dir, settings.public_base_url))
    return channels
