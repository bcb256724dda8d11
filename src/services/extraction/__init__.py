"""Text extraction from uploaded document files."""

from src.services.extraction.text_extractor import TextExtractor, normalize_media_type

__all__ = ["TextExtractor", "normalize_media_type"]
