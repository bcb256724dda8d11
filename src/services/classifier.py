"""Legal-document classifier backed by the generative LLM.

Asks the model a plain yes/no question about the opening of a document
and turns the free-text answer into a boolean verdict:

* an answer containing the word "no" (any case) means *not legal*;
* anything else, including empty or rambling answers, means *legal*.

Uncertainty therefore keeps the document.  A failed or timed-out call
raises :class:`~src.utils.errors.ClassifierServiceError`; callers must not
read that as a negative verdict.
"""

from __future__ import annotations

import re

import structlog

from src.interfaces.llm_provider import ILLMProvider
from src.utils.concurrency import with_timeout
from src.utils.errors import ClassifierServiceError, LegalDocError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHAR_LIMIT = 20000

_QUESTION = "Is the following document a legal document? Answer 'yes' or 'no'."

_NEGATIVE_PATTERN = re.compile(r"\bno\b", re.IGNORECASE)


def is_negative_verdict(response: str) -> bool:
    """Return ``True`` if the model's answer reads as "no"."""
    return bool(_NEGATIVE_PATTERN.search(response))


def build_classifier_prompt(content: str, char_limit: int = DEFAULT_CHAR_LIMIT) -> str:
    """Question, blank line, then the first *char_limit* characters of *content*."""
    return f"{_QUESTION}\n\n{content[:char_limit]}"


class LegalDocumentClassifier:
    """Decides whether extracted content is a legal document."""

    _SYSTEM_PROMPT = (
        "You classify documents. Reply with a single word: yes if the document "
        "is a legal document (contract, agreement, statute, court filing, policy, "
        "terms, deed, or similar), otherwise no."
    )

    def __init__(
        self,
        llm_provider: ILLMProvider,
        char_limit: int = DEFAULT_CHAR_LIMIT,
        timeout_seconds: float | None = 60.0,
    ) -> None:
        self._llm = llm_provider
        self._char_limit = char_limit
        self._timeout = timeout_seconds

    async def classify(self, content: str) -> bool:
        """Return the legal verdict for *content*.

        Raises
        ------
        ClassifierServiceError
            If no verdict could be obtained.
        """
        provider = self._llm.get_provider_name()

        def _timeout_error(seconds: float) -> ClassifierServiceError:
            return ClassifierServiceError(
                message=f"Classification timed out after {seconds:g}s",
                provider_name=provider,
            )

        try:
            response = await with_timeout(
                self._llm.complete(
                    system_prompt=self._SYSTEM_PROMPT,
                    user_prompt=build_classifier_prompt(content, self._char_limit),
                    temperature=0.0,
                    max_tokens=10,
                ),
                self._timeout,
                _timeout_error,
            )
        except ClassifierServiceError:
            raise
        except LegalDocError as exc:
            raise ClassifierServiceError(
                message=f"Classification failed: {exc.message}",
                provider_name=exc.provider_name or provider,
            ) from exc
        except Exception as exc:
            raise ClassifierServiceError(
                message=f"Classification failed: {exc}",
                provider_name=provider,
            ) from exc

        is_legal = not is_negative_verdict(response or "")
        logger.info(
            "legal_verdict",
            provider=provider,
            is_legal=is_legal,
            answer=(response or "").strip()[:40],
        )
        return is_legal
