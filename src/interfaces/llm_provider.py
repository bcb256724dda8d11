"""Generative-text backend contract.

The classifier asks it a yes/no question; the chat engine asks it for a
JSON answer. Both go through :meth:`ILLMProvider.complete`, one turn at a
time, with no streaming.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Implementations (src/providers/llm/):
#   AnthropicLLMProvider, OpenAILLMProvider, OllamaLLMProvider
class ILLMProvider(ABC):
    """A single-turn completion backend."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        """Return the model's text for one system + user prompt pair.

        Parameters
        ----------
        system_prompt:
            Fixed instruction for the task (classification or answering).
        user_prompt:
            The rendered question, including any document text.
        temperature:
            0.0 for the classifier's deterministic verdict.
        max_tokens:
            Response length cap; the classifier uses 10.

        Raises
        ------
        src.utils.errors.UpstreamGenerationError
            The request failed or produced no text.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short label for logs and /health, e.g. ``"anthropic"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Configuration check only; no request is made."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Make the cheapest request that proves the backend accepts us."""
