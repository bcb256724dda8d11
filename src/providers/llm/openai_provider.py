"""OpenAI (or OpenAI-compatible host) backend for classification and chat.

``openai_base_url`` points the client at TogetherAI, Fireworks, Groq or a
vLLM server; ``openai_text_model`` overrides the default model.
"""

from __future__ import annotations

import openai

from src.config.settings import Settings
from src.providers.llm.chat_completions import ChatCompletionsProvider

DEFAULT_TEXT_MODEL = "gpt-4o-mini"


class OpenAILLMProvider(ChatCompletionsProvider):
    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        # Just above llm_timeout, so the service-level timeout fires first.
        sdk_timeout = max(settings.llm_timeout, 1.0) + 5.0
        client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=settings.openai_base_url or None,
            timeout=openai.Timeout(sdk_timeout, connect=5.0),
            max_retries=0,
        )
        super().__init__(
            client,
            model=settings.openai_text_model or DEFAULT_TEXT_MODEL,
            provider_name="openai-compatible" if settings.openai_base_url else "openai",
        )

    def is_available(self) -> bool:
        """Key configured; the key itself is not checked."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models, which costs nothing and fails on a bad key."""
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
        except openai.APIError:
            return False
        return True
