"""Prompt template providers."""

from src.providers.prompt.static_prompt_provider import DEFAULT_CHAT_PROMPT, StaticPromptProvider

__all__ = ["DEFAULT_CHAT_PROMPT", "StaticPromptProvider"]
