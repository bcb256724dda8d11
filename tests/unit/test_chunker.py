"""Unit tests for the TextChunker - bounded, overlapping, boundary-aware chunking."""

from __future__ import annotations

import pytest

from src.models.document import TextSegment
from src.services.ingestion.chunker import CONTENT_SEPARATOR, TextChunker

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_chunker(chunk_size: int = 100, overlap: int = 20) -> TextChunker:
    """Build a TextChunker with a predictable configuration."""
    return TextChunker(chunk_size=chunk_size, overlap=overlap)


def _segment(text: str, page: int | None = 1) -> TextSegment:
    return TextSegment(text=text, page_number=page)


_SENTENCES = " ".join(
    f"Clause {i} binds the parties to the obligations stated herein." for i in range(1, 40)
)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self) -> None:
        chunker = TextChunker()
        assert chunker.chunk_size == 6000
        assert chunker.overlap == 200

    @pytest.mark.parametrize(("size", "overlap"), [(0, 0), (-5, 0), (100, 100), (100, -1)])
    def test_invalid_configuration_rejected(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            TextChunker(chunk_size=size, overlap=overlap)


class TestBasicChunking:
    def test_empty_input_gives_no_chunks(self) -> None:
        assert _make_chunker().chunk([]) == []

    def test_whitespace_segments_are_skipped(self) -> None:
        chunks = _make_chunker().chunk([_segment("   \n\t "), _segment("Real text.", 2)])
        assert len(chunks) == 1
        assert chunks[0].text == "Real text."
        assert chunks[0].page_number == 2
        assert chunks[0].segment_index == 1

    def test_short_segment_is_single_chunk(self) -> None:
        chunks = _make_chunker().chunk([_segment("Short clause.")])
        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.text == "Short clause."
        assert (chunk.start, chunk.end, chunk.overlap) == (0, 13, 0)

    def test_indices_are_sequential_across_segments(self) -> None:
        chunker = _make_chunker()
        chunks = chunker.chunk([_segment(_SENTENCES, 1), _segment(_SENTENCES, 2)])
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_every_chunk_within_size_limit(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=30)
        chunks = chunker.chunk([_segment(_SENTENCES)])
        assert len(chunks) > 1
        assert all(0 < len(c.text) <= 120 for c in chunks)

    def test_deterministic(self) -> None:
        segments = [_segment(_SENTENCES, 1), _segment("Sec. 2 applies.\n\n" + _SENTENCES, 2)]
        chunker = _make_chunker(chunk_size=120, overlap=30)
        first = chunker.chunk(segments)
        assert chunker.chunk(segments) == first
        assert _make_chunker(chunk_size=120, overlap=30).chunk(segments) == first


class TestOverlap:
    def test_consecutive_chunks_share_overlap_region(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=30)
        chunks = chunker.chunk([_segment(_SENTENCES)])
        for previous, current in zip(chunks, chunks[1:]):
            assert current.start == previous.end - 30
            assert current.overlap == 30
            assert previous.text.endswith(current.text[:30])

    def test_chunks_always_advance(self) -> None:
        chunker = _make_chunker(chunk_size=50, overlap=40)
        chunks = chunker.chunk([_segment("x" * 500)])
        starts = [c.start for c in chunks]
        assert starts == sorted(set(starts))
        assert chunks[-1].end == 500

    def test_reassemble_reproduces_segment(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=30)
        chunks = chunker.chunk([_segment(_SENTENCES)])
        assert TextChunker.reassemble(chunks) == _SENTENCES

    def test_reassemble_joins_segments_with_blank_line(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=30)
        chunks = chunker.chunk([_segment(_SENTENCES, 1), _segment("Page two text.", 2)])
        assert TextChunker.reassemble(chunks) == _SENTENCES + CONTENT_SEPARATOR + "Page two text."


class TestBoundaries:
    def test_prefers_paragraph_break(self) -> None:
        first = "A" * 60
        text = first + "\n\n" + "B. " * 40
        chunks = _make_chunker(chunk_size=100, overlap=10).chunk([_segment(text)])
        assert chunks[0].text == first + "\n\n"

    def test_falls_back_to_sentence_end(self) -> None:
        sentence = "The lessee pays rent monthly on the first day. "
        text = sentence + "word " * 30
        chunks = _make_chunker(chunk_size=60, overlap=10).chunk([_segment(text)])
        assert chunks[0].text == sentence

    def test_early_paragraph_break_is_not_preferred(self) -> None:
        text = "Short heading.\n\n" + "The landlord repairs the roof. " * 10
        chunks = _make_chunker(chunk_size=100, overlap=10).chunk([_segment(text)])
        assert len(chunks[0].text) >= 50

    def test_short_paragraph_between_long_ones_does_not_stall(self) -> None:
        sentence = "The tenant shall keep the premises in good repair. "
        first = (sentence * 200)[:6120]
        second = (sentence * 200)[:6000]
        text = first + "\n\n" + "Schedule A" + "\n\n" + second
        chunker = TextChunker()
        chunks = chunker.chunk([_segment(text)])

        for chunk in chunks[:-1]:
            new_chars = chunk.end - chunk.start - chunk.overlap
            assert new_chars >= chunker.chunk_size // 2 - chunker.overlap
        assert TextChunker.reassemble(chunks) == text

    def test_abbreviation_is_not_a_sentence_end(self) -> None:
        text = "Refer to Sec. 4 and Sch. 2 for the payment terms" + " more" * 30
        chunker = _make_chunker(chunk_size=30, overlap=5)
        first = chunker.chunk([_segment(text)])[0]
        assert not first.text.endswith("Sec. ")
        assert not first.text.endswith("Sch. ")

    def test_whitespace_cut_when_no_sentence(self) -> None:
        text = " ".join(["indemnify"] * 30)
        chunks = _make_chunker(chunk_size=50, overlap=10).chunk([_segment(text)])
        assert chunks[0].text.endswith(" ")
        assert len(chunks[0].text) <= 50

    def test_hard_cut_without_any_boundary(self) -> None:
        chunks = _make_chunker(chunk_size=40, overlap=10).chunk([_segment("z" * 100)])
        assert len(chunks[0].text) == 40


class TestPageAttribution:
    def test_chunks_never_span_segments(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=30)
        segments = [_segment(_SENTENCES, 1), _segment(_SENTENCES, 2), _segment("Tail.", 3)]
        chunks = chunker.chunk(segments)
        for chunk in chunks:
            source = segments[chunk.segment_index].text
            assert source[chunk.start : chunk.end] == chunk.text
            assert chunk.page_number == segments[chunk.segment_index].page_number

    def test_join_content_uses_blank_lines(self) -> None:
        chunker = _make_chunker()
        chunks = chunker.chunk([_segment("One.", 1), _segment("Two.", 2)])
        assert TextChunker.join_content(chunks) == "One.\n\nTwo."
