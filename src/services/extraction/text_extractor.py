"""Text extraction from uploaded document files.

Dispatches on the document's declared media type:

- ``application/pdf`` -- PyMuPDF (fitz) page-by-page extraction, one
  :class:`~src.models.document.TextSegment` per page with text (1-based
  page numbers).  Pages with no extractable text are skipped, so a scanned
  PDF without a text layer yields no segments at all.
- ``text/*`` -- the whole file as a single segment reported as page 1.
- anything else -- :class:`~src.utils.errors.UnsupportedMediaTypeError`.

Extraction is synchronous and CPU/disk bound; the ingestion service runs it
through ``asyncio.to_thread``.
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from src.models.document import TextSegment
from src.utils.errors import ExtractionError, UnsupportedMediaTypeError

logger = structlog.get_logger(logger_name=__name__)

PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_PREFIX = "text/"


def normalize_media_type(media_type: str) -> str:
    """Lower-case *media_type* and drop parameters such as ``; charset=utf-8``."""
    return media_type.split(";", 1)[0].strip().lower()


class TextExtractor:
    """Converts a file on disk into ordered, page-attributed text segments."""

    def extract(self, file_path: str | Path, media_type: str) -> list[TextSegment]:
        """Extract text segments from *file_path*.

        Raises
        ------
        UnsupportedMediaTypeError
            If *media_type* is neither PDF nor ``text/*``.  The original
            string is preserved on the exception.
        ExtractionError
            If the file cannot be opened or decoded.
        """
        normalized = normalize_media_type(media_type)
        if normalized == PDF_MEDIA_TYPE:
            segments = self._extract_pdf(Path(file_path))
        elif normalized.startswith(TEXT_MEDIA_PREFIX):
            segments = self._extract_text(Path(file_path))
        else:
            raise UnsupportedMediaTypeError(media_type)

        logger.info(
            "text_extracted",
            media_type=normalized,
            segments=len(segments),
            characters=sum(len(s.text) for s in segments),
        )
        return segments

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_pdf(file_path: Path) -> list[TextSegment]:
        try:
            doc = fitz.open(str(file_path))
        except Exception as exc:  # noqa: BLE001 - fitz raises several unrelated types
            raise ExtractionError(
                message=f"Could not open PDF {file_path.name}: {exc}",
                provider_name="pymupdf",
            ) from exc

        segments: list[TextSegment] = []
        try:
            for page_num in range(len(doc)):
                text = doc[page_num].get_text("text").strip()
                if text:
                    segments.append(TextSegment(text=text, page_number=page_num + 1))
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(
                message=f"Could not read PDF {file_path.name}: {exc}",
                provider_name="pymupdf",
            ) from exc
        finally:
            doc.close()

        if not segments:
            logger.warning("pdf_no_text_extracted", file_name=file_path.name)
        return segments

    @staticmethod
    def _extract_text(file_path: Path) -> list[TextSegment]:
        try:
            raw = file_path.read_bytes()
        except OSError as exc:
            raise ExtractionError(message=f"Could not read {file_path.name}: {exc}") from exc

        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            # Legacy single-byte encodings; latin-1 maps every byte.
            text = raw.decode("latin-1")

        text = text.strip()
        if not text:
            return []
        return [TextSegment(text=text, page_number=1)]
