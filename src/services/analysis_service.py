"""Structured analysis and party extraction for stored documents.

Both operations read the extracted content of one document, make exactly
one LLM call under a timeout, and validate the reply against a pydantic
schema.  Nothing is persisted and the document status is never touched;
results go straight back to the caller.

The analysis prompt is preceded by an instruction asking the model to
answer ``{"statuscode": "NOT_LEGAL_DOCUMENT", "note": ...}`` for text that
is not legal.  That reply is a normal result with ``is_legal=False``, not
an error.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any

import structlog
from pydantic import ValidationError

from src.interfaces.document_store import IDocumentStore
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.prompt_provider import IPromptProvider
from src.models.analysis import (
    NOT_LEGAL_STATUS_CODE,
    AnalysisBias,
    AnalysisResult,
    DocumentAnalysis,
    PartyExtractionResult,
)
from src.models.document import Document
from src.utils.concurrency import with_timeout
from src.utils.errors import (
    DocumentNotFoundError,
    DocumentNotReadyError,
    InvalidModelResponseError,
    LegalDocError,
    UpstreamGenerationError,
)
from src.utils.llm_response import extract_json_block
from src.utils.logging import document_log_context, get_logger

logger: structlog.BoundLogger = get_logger(__name__)

ANALYSIS_DEPTH = "full"
DEFAULT_PARTY_CHAR_LIMIT = 10000
DEFAULT_NOT_LEGAL_NOTE = "This document is not a legal document, contract, policy, or agreement."

NOT_LEGAL_INSTRUCTION = (
    "IMPORTANT: If the provided document is NOT a legal document, contract, "
    "policy, agreement, or similar legal text, respond ONLY with the following "
    f'JSON: {{"statuscode": "{NOT_LEGAL_STATUS_CODE}", "note": '
    f'"{DEFAULT_NOT_LEGAL_NOTE}"}} and nothing else.'
)

_PLACEHOLDER = re.compile(
    r"\{\{(PARTY_PERSPECTIVE|ANALYSIS_BIAS|ANALYSIS_DEPTH|DOCUMENT_CONTENT)\}\}"
)

_NOT_APPLICABLE = {"n/a", "na", "none", "null"}


def render_template(template: str, values: dict[str, str]) -> str:
    """Substitute ``{{NAME}}`` placeholders in one pass.

    Text inside substituted values is never expanded again, so a document
    that happens to contain ``{{PARTY_PERSPECTIVE}}`` is sent as written.
    Placeholders without a value are left in place.
    """
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def parse_analysis(raw_text: str) -> tuple[DocumentAnalysis | None, str | None]:
    """Parse the analysis reply into ``(analysis, not_legal_note)``.

    Exactly one side of the pair is set.

    Raises
    ------
    InvalidModelResponseError
        No JSON object, or an object matching neither shape.
    """
    block = extract_json_block(raw_text, "{", "}")
    if block is None:
        raise InvalidModelResponseError(
            raw_text=raw_text,
            message="AI response contained no JSON object",
        )
    try:
        data: Any = json.loads(block)
    except json.JSONDecodeError as exc:
        raise InvalidModelResponseError(raw_text=raw_text) from exc
    if not isinstance(data, dict):
        raise InvalidModelResponseError(raw_text=raw_text, message="AI response JSON was not an object")

    status_code = data.get("statuscode") or data.get("statusCode")
    if status_code == NOT_LEGAL_STATUS_CODE:
        note = data.get("note")
        return None, note if isinstance(note, str) and note.strip() else DEFAULT_NOT_LEGAL_NOTE

    try:
        return DocumentAnalysis.model_validate(data), None
    except ValidationError as exc:
        raise InvalidModelResponseError(
            raw_text=raw_text,
            message=f"AI response did not match the analysis schema: {exc.error_count()} error(s)",
        ) from exc


def parse_parties(raw_text: str) -> list[str]:
    """Parse the party reply into distinct names, first spelling wins.

    Names are compared case-insensitively with inner whitespace collapsed.
    Blank entries and "N/A" style placeholders are dropped.

    Raises
    ------
    InvalidModelResponseError
        No JSON array, or an array holding anything but strings.
    """
    block = extract_json_block(raw_text, "[", "]")
    if block is None:
        raise InvalidModelResponseError(
            raw_text=raw_text,
            message="AI response contained no JSON array",
        )
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        raise InvalidModelResponseError(raw_text=raw_text) from exc
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise InvalidModelResponseError(raw_text=raw_text, message="Invalid parties format")

    parties: list[str] = []
    seen: set[str] = set()
    for item in data:
        name = " ".join(item.split())
        key = name.casefold()
        if not name or key in _NOT_APPLICABLE or key in seen:
            continue
        seen.add(key)
        parties.append(name)
    return parties


class AnalysisService:
    """Runs document analysis and party extraction against the LLM.

    Parameters
    ----------
    document_store:
        Source of the extracted document content.
    llm:
        Generative model producing the JSON replies.
    prompt_provider:
        Supplies the analysis and party templates.
    llm_timeout:
        Seconds allowed for each generation call.
    party_char_limit:
        Leading characters of content sent for party extraction.
    """

    _SYSTEM_PROMPT = (
        "You are a careful legal document analyst. Base every statement on the "
        "document provided and reply with JSON only."
    )

    def __init__(
        self,
        document_store: IDocumentStore,
        llm: ILLMProvider,
        prompt_provider: IPromptProvider,
        llm_timeout: float | None = 60.0,
        party_char_limit: int = DEFAULT_PARTY_CHAR_LIMIT,
    ) -> None:
        self._documents = document_store
        self._llm = llm
        self._prompts = prompt_provider
        self._llm_timeout = llm_timeout
        self._party_char_limit = party_char_limit

    async def analyze_document(
        self,
        document_id: str,
        party_perspective: str,
        bias: AnalysisBias = AnalysisBias.NEUTRAL,
    ) -> AnalysisResult:
        """Analyse the document from *party_perspective* with the given *bias*.

        Raises
        ------
        DocumentNotFoundError
            Unknown document id.
        DocumentNotReadyError
            The document has no extracted content yet.
        UpstreamGenerationError
            The generation call failed or timed out.
        InvalidModelResponseError
            The reply is neither an analysis nor a not-legal notice.
        """
        with document_log_context(document_id):
            started = time.monotonic()
            document = await self._load(document_id)
            prompt = "\n\n".join(
                (
                    NOT_LEGAL_INSTRUCTION,
                    render_template(
                        self._prompts.get_analysis_prompt(),
                        {
                            "PARTY_PERSPECTIVE": party_perspective,
                            "ANALYSIS_BIAS": bias.value,
                            "ANALYSIS_DEPTH": ANALYSIS_DEPTH,
                            "DOCUMENT_CONTENT": document.content,
                        },
                    ),
                )
            )
            raw_text = await self._generate(prompt, temperature=0.2, max_tokens=8000)
            analysis, note = parse_analysis(raw_text)
            if analysis is not None:
                analysis = analysis.model_copy(
                    update={"document": analysis.document.model_copy(update={"id": document_id})}
                )

            result = AnalysisResult(
                document_id=document_id,
                party_perspective=party_perspective,
                bias=bias,
                is_legal=analysis is not None,
                analysis=analysis,
                note=note,
                elapsed_seconds=time.monotonic() - started,
            )
            logger.info(
                "analysis_completed",
                is_legal=result.is_legal,
                bias=bias.value,
                risk_score=analysis.risk_score if analysis else None,
                elapsed_seconds=round(result.elapsed_seconds, 3),
            )
            return result

    async def extract_parties(self, document_id: str) -> PartyExtractionResult:
        """List the distinct parties named in the opening of the document.

        Raises the same errors as :meth:`analyze_document`.
        """
        with document_log_context(document_id):
            document = await self._load(document_id)
            prompt = render_template(
                self._prompts.get_party_extraction_prompt(),
                {"DOCUMENT_CONTENT": document.content[: self._party_char_limit]},
            )
            raw_text = await self._generate(prompt, temperature=0.0, max_tokens=500)
            parties = parse_parties(raw_text)
            logger.info("parties_extracted", party_count=len(parties))
            return PartyExtractionResult(document_id=document_id, parties=parties)

    async def _load(self, document_id: str) -> Document:
        document = await self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        if not document.content.strip():
            raise DocumentNotReadyError(message="Document has no extracted content")
        return document

    async def _generate(self, prompt: str, temperature: float, max_tokens: int) -> str:
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
                    temperature=temperature,
                    max_tokens=max_tokens,
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
