"""Document analysis and party extraction models.

The analysis models mirror the JSON the generative model is asked to
return, so field aliases are camelCase (``riskScore``, ``keyClauses``) and
validation accepts either the alias or the Python field name.  Responses
serialise with the aliases, which keeps the wire shape identical to the
model's own output.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOT_LEGAL_STATUS_CODE = "NOT_LEGAL_DOCUMENT"


class AnalysisBias(str, Enum):
    """Slant of the analysis towards the chosen party."""

    NEUTRAL = "neutral"
    FAVORABLE = "favorable"
    RISK = "risk"


class _ModelOutput(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AnalysisDocumentInfo(_ModelOutput):
    """Metadata the model reads out of the document."""

    id: str = ""
    title: str
    type: str
    status: str
    parties: list[str] = Field(default_factory=list)
    effective_date: str
    expiration_date: str | None = None
    value: str | None = None


class KeyClause(_ModelOutput):
    title: str
    section: str
    text: str
    importance: str
    analysis: str
    recommendation: str | None = None


class NegotiableTerm(_ModelOutput):
    title: str
    description: str
    priority: str
    current_language: str
    suggested_language: str
    rationale: str | None = None


class RedFlag(_ModelOutput):
    title: str
    description: str
    severity: str
    location: str | None = None


class Recommendation(_ModelOutput):
    title: str
    description: str


class OverallImpression(_ModelOutput):
    summary: str
    pros: list[str] = Field(default_factory=list)
    cons: list[str]
    conclusion: str


class DocumentAnalysis(_ModelOutput):
    """Full structured analysis of one legal document."""

    document: AnalysisDocumentInfo
    risk_score: float
    key_clauses: list[KeyClause]
    negotiable_terms: list[NegotiableTerm]
    red_flags: list[RedFlag]
    recommendations: list[Recommendation]
    overall_impression: OverallImpression


class AnalysisResult(BaseModel):
    """Outcome of :meth:`AnalysisService.analyze_document`.

    ``is_legal`` is ``False`` when the model declined the document as not
    legal; ``analysis`` is then ``None`` and ``note`` carries its reason.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    party_perspective: str
    bias: AnalysisBias
    is_legal: bool
    analysis: DocumentAnalysis | None = None
    note: str | None = None
    elapsed_seconds: float = 0.0


class PartyExtractionResult(BaseModel):
    """Distinct party names found in a document, in order of appearance."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    parties: list[str] = Field(default_factory=list)
