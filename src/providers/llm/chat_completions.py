"""Completion call shared by every backend that speaks the OpenAI chat API.

OpenAI itself, OpenAI-compatible hosts and a local Ollama server differ
only in how the client is built and how credentials are checked; the
request and the error translation live here. A missing answer comes back
as an empty string; callers decide what an empty answer means.
"""

from __future__ import annotations

import openai
import structlog

from src.interfaces.llm_provider import ILLMProvider
from src.utils.errors import UpstreamGenerationError

logger = structlog.get_logger(logger_name=__name__)


class ChatCompletionsProvider(ILLMProvider):
    """Base for :class:`ILLMProvider` adapters over ``chat.completions``.

    Subclasses build ``self._client`` and pass the model and provider
    label; they implement ``is_available`` and ``validate_credentials``.
    """

    def __init__(self, client: openai.AsyncOpenAI, model: str, provider_name: str) -> None:
        self._client = client
        self._model = model
        self._provider_name = provider_name

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise UpstreamGenerationError(
                message=f"{self._model} request timed out",
                provider_name=self._provider_name,
            ) from exc
        except openai.APIError as exc:
            raise UpstreamGenerationError(
                message=f"{self._model} request failed: {exc}",
                provider_name=self._provider_name,
            ) from exc

        text = response.choices[0].message.content if response.choices else None
        logger.info(
            "llm_completion",
            provider=self._provider_name,
            model=self._model,
            tokens=response.usage.total_tokens if response.usage else None,
            empty=not text,
        )
        return text or ""

    def get_provider_name(self) -> str:
        return self._provider_name
