"""Cleanup of raw LLM text before JSON parsing.

Models frequently wrap JSON answers in Markdown code fences even when told
not to.  :func:`strip_code_fences` removes a leading ```` ```json ```` or
```` ``` ```` marker and a trailing ```` ``` ```` marker so the remainder can
go straight to a JSON parser; :func:`extract_json_block` goes further and
cuts the outermost JSON object or array out of surrounding prose.
"""

from __future__ import annotations

import re

_LEADING_JSON_FENCE = re.compile(r"^```json[\r\n]*", re.IGNORECASE)
_LEADING_FENCE = re.compile(r"^```[\r\n]*")
_TRAILING_FENCE = re.compile(r"```\s*$")


def strip_code_fences(text: str) -> str:
    """Return *text* trimmed, with fenced-code delimiters removed.

    Text without fences is returned trimmed but otherwise unchanged.
    """
    clean = text.strip()
    if clean.lower().startswith("```json"):
        clean = _LEADING_JSON_FENCE.sub("", clean, count=1)
    if clean.startswith("```"):
        clean = _LEADING_FENCE.sub("", clean, count=1)
    if clean.endswith("```"):
        clean = _TRAILING_FENCE.sub("", clean, count=1)
    return clean.strip()


def extract_json_block(text: str, opening: str = "{", closing: str = "}") -> str | None:
    """Return the span from the first *opening* to the last *closing* bracket.

    Models sometimes add a sentence before or after the JSON they were asked
    for; the widest bracketed span is what gets parsed.  ``None`` means the
    text holds no such span.
    """
    clean = strip_code_fences(text)
    start = clean.find(opening)
    end = clean.rfind(closing)
    if start == -1 or end < start:
        return None
    return clean[start : end + 1]
