"""Prompt template provider for chat, analysis and party extraction.

Serves the built-in templates, or the contents of override files when
``chat_prompt_path``, ``analysis_prompt_path`` or ``party_prompt_path`` is
configured.  Overrides are validated at construction so a template missing
a placeholder fails at startup rather than on the first request.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from src.interfaces.prompt_provider import (
    ANALYSIS_PROMPT_PLACEHOLDERS,
    CHAT_PROMPT_PLACEHOLDERS,
    PARTY_PROMPT_PLACEHOLDERS,
    IPromptProvider,
)
from src.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHAT_PROMPT = """
You are a helpful AI assistant analyzing a legal document. Please answer the user's question by returning a single JSON object in the following format:

{
  "content": string,
  "references"?: [
    {
      "page": number,
      "text": string
    }
  ]
}

You must always include 'content' and, if possible, 'references' as described above.

STRICT RULES:
- Do NOT use the exact same wording from the document. Paraphrase and synthesize the information to create a new paragraph.
- Do NOT mention page numbers or roman numerals in the content.
- In the 'references' array, the 'text' field must be a single, meaningful line (up to 200 characters) from the relevant section of the document. Do NOT use just one or two words; provide a full line that best represents the referenced information.
- Do NOT provide more than 5 references in the 'references' array.
- Be clear, concise, and professional in your responses.
- Focus on providing accurate information based on the document content.

Context from the document:
{{DOCUMENT_CONTENT}}

{{CONVERSATION_HISTORY}}

User's question: {{USER_MESSAGE}}

Instructions:
1. Directly answer the user's question using the most relevant information from the document.
2. Use specific information from the document context to support your answer.
3. Be clear, concise, and easy to understand.
4. When citing information from the document, include only the 'text' field in references as a single, meaningful line (up to 200 characters).
5. Output ONLY a valid JSON object as described above, nothing else. Do NOT wrap your response in Markdown or any code block.
{{FRESH_CONVERSATION_INSTRUCTION}}
"""


DEFAULT_ANALYSIS_PROMPT = """
You are a legal document analysis assistant. Analyze the provided legal document from the perspective of {{PARTY_PERSPECTIVE}} with a {{ANALYSIS_BIAS}} bias and {{ANALYSIS_DEPTH}} depth.

Return a single JSON object with this structure:

{
  "document": {
    "id": string,
    "title": string,
    "type": "contract" | "agreement" | "nda" | "license" | "other",
    "status": string,
    "parties": [string],
    "effectiveDate": string,
    "expirationDate"?: string,
    "value"?: string
  },
  "riskScore": number,
  "keyClauses": [
    {"title": string, "section": string, "text": string, "importance": string, "analysis": string, "recommendation"?: string}
  ],
  "negotiableTerms": [
    {"title": string, "description": string, "priority": string, "currentLanguage": string, "suggestedLanguage": string, "rationale"?: string}
  ],
  "redFlags": [
    {"title": string, "description": string, "severity": string, "location"?: string}
  ],
  "recommendations": [
    {"title": string, "description": string}
  ],
  "overallImpression": {
    "summary": string,
    "pros": [string],
    "cons": [string],
    "conclusion": string
  }
}

Guidelines:
1. Focus on the interests of {{PARTY_PERSPECTIVE}}.
2. For the {{ANALYSIS_BIAS}} bias:
   - "neutral": balanced analysis without bias
   - "favorable": highlight every advantage, benefit and strength for the selected party
   - "risk": focus on potential risks and issues
3. For the {{ANALYSIS_DEPTH}} depth:
   - "summary": a concise overview with fewer details
   - "full": a comprehensive analysis with all details
4. Write red flags, recommendations and similar sections in plain language a non-lawyer can follow.
5. Extract accurate metadata: title, type, status, parties, dates and value. Write "not mentioned" for a date the document does not state.
6. The title has at most 4 words, for example "Employment Agreement" or "Software License".
7. The type is exactly one of "contract", "agreement", "nda", "license", "other".
8. The risk score is a number from 0 to 100 reflecting the overall risk.
9. Identify 3-5 key clauses, 2-4 negotiable terms and 2-4 red flags with severity and location.
10. Provide 3-5 actionable recommendations and an overall impression with 3-5 pros, 3-5 cons and a conclusion.

Document to analyze:
{{DOCUMENT_CONTENT}}

Return ONLY the JSON object with no additional text, explanations, or markdown formatting.
"""

DEFAULT_PARTY_PROMPT = """
You are a legal document analyzer. Extract all parties named in this legal document.

Rules:
- Return ONLY a JSON array of party names, like ["Party Name 1", "Party Name 2"].
- Each name is concise (2-4 words) in title case, without titles, roles or descriptions.
- Names must be distinct. When two names refer to the same entity, keep only the primary one.
- Return no more than 3 parties; prefer the main parties to the agreement.

Good names: "John Smith", "ABC Corporation", "City of New York".
Bad names: "JOHN SMITH, ESQ., ATTORNEY AT LAW", "ABC CORPORATION, A DELAWARE CORPORATION".

Document to analyze:
{{DOCUMENT_CONTENT}}

Return ONLY the JSON array with no additional text, explanations, or markdown formatting.
"""


def _load_template(
    path: str | Path | None,
    default: str,
    placeholders: tuple[str, ...],
    kind: str,
) -> str:
    if path:
        path = Path(path)
        try:
            template = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {kind} prompt template {path}: {exc}") from exc
        source = str(path)
    else:
        template = default
        source = "builtin"

    missing = [p for p in placeholders if p not in template]
    if missing:
        raise ConfigurationError(
            f"{kind.capitalize()} prompt template {source} is missing placeholders: {', '.join(missing)}"
        )
    logger.debug("prompt_loaded", kind=kind, source=source, length=len(template))
    return template


class StaticPromptProvider(IPromptProvider):
    """Returns fixed templates, each optionally loaded from a file."""

    def __init__(
        self,
        template_path: str | Path | None = None,
        analysis_template_path: str | Path | None = None,
        party_template_path: str | Path | None = None,
    ) -> None:
        self._template = _load_template(
            template_path, DEFAULT_CHAT_PROMPT, CHAT_PROMPT_PLACEHOLDERS, "chat"
        )
        self._analysis_template = _load_template(
            analysis_template_path, DEFAULT_ANALYSIS_PROMPT, ANALYSIS_PROMPT_PLACEHOLDERS, "analysis"
        )
        self._party_template = _load_template(
            party_template_path, DEFAULT_PARTY_PROMPT, PARTY_PROMPT_PLACEHOLDERS, "party"
        )

    def get_chat_prompt(self) -> str:
        return self._template

    def get_analysis_prompt(self) -> str:
        return self._analysis_template

    def get_party_extraction_prompt(self) -> str:
        return self._party_template
