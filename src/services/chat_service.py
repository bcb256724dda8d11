"""Document-grounded chat engine.

Answers one user question about one stored document:

  1. READY CHECK   -- the document must exist and carry a non-empty vector;
                      otherwise nothing else is called.
  2. EMBED QUERY   -- the question is embedded through the single-text path.
  3. SIMILARITY    -- dot product of the query vector and the stored
                      document vector.  Logged for observability; it does
                      not gate the answer.
  4. RENDER PROMPT -- the template from the prompt provider is filled with
                      the document text, prior conversation and question.
  5. GENERATE      -- exactly one LLM call, no retries, under a timeout.
  6. PARSE         -- fenced-code wrappers are stripped and the text must
                      validate against :class:`~src.models.chat.ChatAnswer`.
                      Anything else raises ``InvalidModelResponseError``
                      with the raw text attached.
  7. REPLY         -- the answer becomes an assistant message carrying at
                      most five references; extra citations are dropped.

The engine persists nothing; conversation history is supplied by the
caller on every call.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

import structlog
from pydantic import ValidationError

from src.interfaces.document_store import IDocumentStore
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.prompt_provider import IPromptProvider
from src.models.chat import ChatAnswer, ChatMessage, ChatRole
from src.services.ingestion.embedding_client import EmbeddingClient
from src.utils.concurrency import with_timeout
from src.utils.errors import (
    DocumentNotReadyError,
    InvalidModelResponseError,
    LegalDocError,
    UpstreamGenerationError,
)
from src.utils.llm_response import strip_code_fences
from src.utils.logging import document_log_context, get_logger
from src.utils.vectors import dot_product

logger: structlog.BoundLogger = get_logger(__name__)

MAX_REFERENCES = 5

FRESH_CONVERSATION_INSTRUCTION = (
    "6. Treat this as a fresh conversation without any prior context."
)

_PLACEHOLDER = re.compile(
    r"\{\{(DOCUMENT_CONTENT|CONVERSATION_HISTORY|USER_MESSAGE|FRESH_CONVERSATION_INSTRUCTION)\}\}"
)


def format_history(prior_messages: Sequence[ChatMessage]) -> str:
    """Render prior turns as ``role: content`` lines."""
    return "\n".join(f"{msg.role.value}: {msg.content}" for msg in prior_messages)


def render_chat_prompt(
    template: str,
    document_content: str,
    message: str,
    prior_messages: Sequence[ChatMessage],
) -> str:
    """Fill the four placeholders of *template* in a single pass.

    Substituted values are never re-scanned, so placeholder-like text inside
    the document or the question is left alone.
    """
    values = {
        "DOCUMENT_CONTENT": document_content,
        "CONVERSATION_HISTORY": (
            f"Previous conversation:\n{format_history(prior_messages)}\n"
            if prior_messages
            else ""
        ),
        "USER_MESSAGE": message,
        "FRESH_CONVERSATION_INSTRUCTION": "" if prior_messages else FRESH_CONVERSATION_INSTRUCTION,
    }
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)


def parse_chat_answer(raw_text: str) -> ChatAnswer:
    """Strip fences and validate the model output against :class:`ChatAnswer`."""
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise InvalidModelResponseError(raw_text=raw_text) from exc

    if not isinstance(data, dict):
        raise InvalidModelResponseError(
            raw_text=raw_text,
            message="AI response JSON was not an object",
        )
    try:
        return ChatAnswer.model_validate(data)
    except ValidationError as exc:
        raise InvalidModelResponseError(
            raw_text=raw_text,
            message=f"AI response did not match the answer schema: {exc.error_count()} error(s)",
        ) from exc


class ChatService:
    """Answers questions about a single document.

    Parameters
    ----------
    document_store:
        Source of the document text and stored vector.
    embedding_client:
        Embeds the incoming question.
    llm:
        Generative model producing the JSON answer.
    prompt_provider:
        Supplies the chat template.
    llm_timeout:
        Seconds allowed for the generation call.
    """

    _SYSTEM_PROMPT = (
        "You answer questions about a single legal document using only its "
        "content. Reply with exactly one JSON object and nothing else."
    )

    def __init__(
        self,
        document_store: IDocumentStore,
        embedding_client: EmbeddingClient,
        llm: ILLMProvider,
        prompt_provider: IPromptProvider,
        llm_timeout: float | None = 60.0,
    ) -> None:
        self._documents = document_store
        self._embeddings = embedding_client
        self._llm = llm
        self._prompts = prompt_provider
        self._llm_timeout = llm_timeout

    async def chat(
        self,
        document_id: str,
        message: str,
        prior_messages: Sequence[ChatMessage] = (),
    ) -> ChatMessage:
        """Produce one assistant message answering *message*.

        Raises
        ------
        DocumentNotReadyError
            Missing document or no stored vector.
        DimensionMismatchError
            Query and document vectors differ in length.
        UpstreamGenerationError
            The generation call failed or timed out.
        InvalidModelResponseError
            The model output is not a valid answer object.
        """
        with document_log_context(document_id):
            document = await self._documents.get(document_id)
            if document is None or not document.is_chat_ready:
                raise DocumentNotReadyError()

            query_vector = await self._embeddings.embed_query(message)
            similarity = dot_product(query_vector, document.vector_embedding or [])
            logger.info(
                "chat_similarity",
                similarity=round(similarity, 6),
                history_length=len(prior_messages),
            )

            prompt = render_chat_prompt(
                self._prompts.get_chat_prompt(),
                document_content=document.content,
                message=message,
                prior_messages=prior_messages,
            )
            raw_text = await self._generate(prompt)
            answer = parse_chat_answer(raw_text)

            logger.info(
                "chat_answered",
                answer_chars=len(answer.content),
                references=len(answer.references),
            )
            return ChatMessage(
                role=ChatRole.ASSISTANT,
                content=answer.content,
                references=answer.references[:MAX_REFERENCES],
            )

    async def _generate(self, prompt: str) -> str:
        provider = self._llm.get_provider_name()

        def _timeout_error(seconds: float) -> UpstreamGenerationError:
            return UpstreamGenerationError(
                message=f"Generation timed out after {seconds:g}s",
                provider_name=provider,
            )

        try:
            return await with_timeout(
                self._llm.complete(
                    system_prompt=self._SYSTEM_PROMPT,
                    user_prompt=prompt,
                    temperature=0.3,
                    max_tokens=2000,
                ),
                self._llm_timeout,
                _timeout_error,
            )
        except LegalDocError:
            raise
        except Exception as exc:
            raise UpstreamGenerationError(
                message=f"Generation failed: {exc}",
                provider_name=provider,
            ) from exc
