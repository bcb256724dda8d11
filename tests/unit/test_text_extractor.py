"""Unit tests for TextExtractor - PDF and plain-text extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.services.extraction.text_extractor import TextExtractor, normalize_media_type
from src.utils.errors import ExtractionError, UnsupportedMediaTypeError


@pytest.fixture
def extractor() -> TextExtractor:
    return TextExtractor()


class TestNormalizeMediaType:
    def test_strips_parameters_and_case(self) -> None:
        assert normalize_media_type("Text/Plain; charset=UTF-8") == "text/plain"

    def test_plain_value_unchanged(self) -> None:
        assert normalize_media_type("application/pdf") == "application/pdf"


class TestPdfExtraction:
    def test_one_segment_per_page(self, extractor: TextExtractor, tmp_path: Path, pdf_builder) -> None:
        path = tmp_path / "lease.pdf"
        path.write_bytes(pdf_builder(["Lease agreement page one", "Signatures page two"]))

        segments = extractor.extract(path, "application/pdf")

        assert [s.page_number for s in segments] == [1, 2]
        assert "Lease agreement page one" in segments[0].text
        assert "Signatures page two" in segments[1].text

    def test_blank_pages_are_skipped(self, extractor: TextExtractor, tmp_path: Path, pdf_builder) -> None:
        path = tmp_path / "gaps.pdf"
        path.write_bytes(pdf_builder(["First", "", "Third"]))

        segments = extractor.extract(path, "application/pdf")

        assert [s.page_number for s in segments] == [1, 3]

    def test_scanned_pdf_yields_nothing(self, extractor: TextExtractor, tmp_path: Path, pdf_builder) -> None:
        path = tmp_path / "scan.pdf"
        path.write_bytes(pdf_builder(["", ""]))
        assert extractor.extract(path, "application/pdf") == []

    def test_corrupt_pdf_raises(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(path, "application/pdf")
        assert exc_info.value.provider_name == "pymupdf"


class TestTextExtraction:
    def test_text_is_single_page(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "terms.txt"
        path.write_text("  Terms of service.\n\nSection 2.  \n", encoding="utf-8")

        segments = extractor.extract(path, "text/plain")

        assert len(segments) == 1
        assert segments[0].page_number == 1
        assert segments[0].text == "Terms of service.\n\nSection 2."

    def test_utf8_bom_removed(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "bom.txt"
        path.write_bytes("\ufeffClause".encode("utf-8"))
        assert extractor.extract(path, "text/plain")[0].text == "Clause"

    def test_latin1_fallback(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "legacy.txt"
        path.write_bytes("Société Générale".encode("latin-1"))
        assert extractor.extract(path, "text/markdown")[0].text == "Société Générale"

    def test_empty_text_file(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "empty.txt"
        path.write_text("   \n", encoding="utf-8")
        assert extractor.extract(path, "text/plain") == []

    def test_missing_file_raises(self, extractor: TextExtractor, tmp_path: Path) -> None:
        with pytest.raises(ExtractionError):
            extractor.extract(tmp_path / "nope.txt", "text/plain")


class TestUnsupported:
    def test_unknown_type_keeps_original_string(self, extractor: TextExtractor, tmp_path: Path) -> None:
        path = tmp_path / "file.docx"
        path.write_bytes(b"PK")
        declared = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            extractor.extract(path, declared)
        assert exc_info.value.media_type == declared
