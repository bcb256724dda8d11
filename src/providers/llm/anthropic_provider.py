"""Claude backend for classification and chat, via the Messages API.

The Messages API takes the system prompt as its own parameter and returns
a list of content blocks; only text blocks make up the answer, and a reply
with none of them is an empty answer.
"""

from __future__ import annotations

from typing import Any

import anthropic
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.utils.errors import UpstreamGenerationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"


def _answer_text(response: Any) -> str:
    return "\n".join(block.text for block in response.content if block.type == "text")


class AnthropicLLMProvider(ILLMProvider):
    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.anthropic_api_key
        self._model = settings.anthropic_model or DEFAULT_CLAUDE_MODEL
        self._client = anthropic.AsyncAnthropic(
            api_key=self._api_key,
            timeout=max(settings.llm_timeout, 1.0) + 5.0,
            max_retries=0,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        try:
            response = await self._client.messages.create(
                model=self._model,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except anthropic.APIError as exc:
            raise UpstreamGenerationError(
                message=f"Claude request failed: {exc}",
                provider_name="anthropic",
            ) from exc

        text = _answer_text(response)
        usage = getattr(response, "usage", None)
        logger.info(
            "llm_completion",
            provider="anthropic",
            model=self._model,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
        return text

    def get_provider_name(self) -> str:
        return "anthropic"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """One tiny completion; Anthropic has no free key check."""
        if not self.is_available():
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=1,
                messages=[{"role": "user", "content": "ping"}],
            )
        except anthropic.APIError:
            return False
        return True
