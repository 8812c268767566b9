import logging
from typing import Protocol

import openai
from openai import AsyncOpenAI

from voice_agent.core.config import settings
from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.models.document import Corpus
from voice_agent.services.knowledge_service import search

logger = logging.getLogger(__name__)


class ContentProvider(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


class OpenAIContentProvider:
    def __init__(self, client: AsyncOpenAI, model: str | None = None) -> None:
        self._client = client
        self._model = model or settings.openai_model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.OpenAIError as e:
            logger.warning("OpenAI completion failed: %s", e)
            raise UpstreamUnavailable("AI generation failed.") from e
        text = completion.choices[0].message.content if completion.choices else None
        if not text or not text.strip():
            raise UpstreamUnavailable("AI generation returned no text.")
        return text


def build_context(topic: str, corpus: Corpus) -> str:
    """Best-matching documents for the topic, capped at the context character budget."""
    hits = search(topic, corpus, limit=settings.context_doc_limit)
    context = "\n\n".join(f"[Source: {h.document.filename}]\n{h.document.normalized_text}" for h in hits)
    return context[: settings.context_char_budget]


def build_prompts(topic: str, format: str, context: str) -> tuple[str, str]:
    system_prompt = f"You are a professional business writer. Write a {format}. Use Markdown formatting."
    user_prompt = f"TOPIC: {topic}\nCONTEXT:\n{context}"
    return system_prompt, user_prompt


async def generate_collateral_text(
    provider: ContentProvider, topic: str, format: str, corpus: Corpus
) -> str:
    system_prompt, user_prompt = build_prompts(topic, format, build_context(topic, corpus))
    return await provider.complete(system_prompt, user_prompt)
