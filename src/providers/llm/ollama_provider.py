"""Local Ollama backend, used when no hosted LLM key is configured.

Setup: install Ollama, ``ollama pull llama3.1``, and point
``OLLAMA_BASE_URL`` at the server (default ``http://localhost:11434``).
"""

from __future__ import annotations

import httpx
import openai

from src.config.settings import Settings
from src.providers.llm.chat_completions import ChatCompletionsProvider

DEFAULT_OLLAMA_MODEL = "llama3.1"


class OllamaLLMProvider(ChatCompletionsProvider):
    def __init__(self, settings: Settings) -> None:
        self._server_url = settings.ollama_base_url.rstrip("/")
        client = openai.AsyncOpenAI(
            base_url=f"{self._server_url}/v1",
            api_key="ollama",  # required by the SDK, ignored by Ollama
            max_retries=0,
        )
        super().__init__(
            client,
            model=settings.ollama_text_model or DEFAULT_OLLAMA_MODEL,
            provider_name="ollama",
        )

    def is_available(self) -> bool:
        return bool(self._server_url)

    async def validate_credentials(self) -> bool:
        """Ollama has no credentials; a responding ``/api/tags`` is enough."""
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._server_url}/api/tags")
        except httpx.HTTPError:
            return False
        return response.status_code == 200
