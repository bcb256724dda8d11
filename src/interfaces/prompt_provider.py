"""Abstract base class for prompt template configuration."""

from __future__ import annotations

from abc import ABC, abstractmethod

# Placeholders every chat template must contain.
CHAT_PROMPT_PLACEHOLDERS: tuple[str, ...] = (
    "{{DOCUMENT_CONTENT}}",
    "{{CONVERSATION_HISTORY}}",
    "{{USER_MESSAGE}}",
    "{{FRESH_CONVERSATION_INSTRUCTION}}",
)

# Placeholders every document analysis template must contain.
ANALYSIS_PROMPT_PLACEHOLDERS: tuple[str, ...] = (
    "{{PARTY_PERSPECTIVE}}",
    "{{ANALYSIS_BIAS}}",
    "{{ANALYSIS_DEPTH}}",
    "{{DOCUMENT_CONTENT}}",
)

PARTY_PROMPT_PLACEHOLDERS: tuple[str, ...] = ("{{DOCUMENT_CONTENT}}",)


class IPromptProvider(ABC):
    """Supplies prompt templates to the chat and analysis services."""

    @abstractmethod
    def get_chat_prompt(self) -> str:
        """Return the chat template containing :data:`CHAT_PROMPT_PLACEHOLDERS`."""

    @abstractmethod
    def get_analysis_prompt(self) -> str:
        """Return the analysis template containing :data:`ANALYSIS_PROMPT_PLACEHOLDERS`."""

    @abstractmethod
    def get_party_extraction_prompt(self) -> str:
        """Return the party template containing :data:`PARTY_PROMPT_PLACEHOLDERS`."""
