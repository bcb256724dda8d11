"""Generative-text backends implementing ``ILLMProvider``.

main.py picks the first configured one, in this order:

    AnthropicLLMProvider  Claude Messages API          (ANTHROPIC_API_KEY)
    OpenAILLMProvider     OpenAI or compatible host    (OPENAI_API_KEY)
    OllamaLLMProvider     local Ollama server          (always available)

OpenAI and Ollama share ChatCompletionsProvider.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.chat_completions import ChatCompletionsProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = [
    "AnthropicLLMProvider",
    "ChatCompletionsProvider",
    "OllamaLLMProvider",
    "OpenAILLMProvider",
]
