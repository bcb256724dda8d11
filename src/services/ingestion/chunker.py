"""Text chunking with overlapping character windows and natural break points.

Splits extracted :class:`~src.models.document.TextSegment` objects into
:class:`~src.models.document.TextChunk` objects of at most ``chunk_size``
characters (default 6000), with ``overlap`` characters (default 200)
repeated between consecutive chunks of the same segment.

The chunking strategy has three goals:

1. **Natural boundaries** -- Inside each window the cut prefers the last
   paragraph break (blank line), then the last sentence end, then the last
   whitespace, looking first in the back half of the window and only then
   closer to the start.  A hard character cut is used only when the window
   contains none of these.

2. **Page attribution** -- Chunks never cross a segment (page) boundary,
   so every chunk inherits exactly one page number.

3. **Lossless slicing** -- Chunks are raw slices of the segment text.
   Dropping each chunk's ``overlap`` prefix and joining the remainders
   reproduces the segment exactly (see :meth:`TextChunker.reassemble`).

Sentence ends are detected with an abbreviation-aware pattern so "Dr.",
"Sec." or "Inc." inside a clause do not count as a break.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import structlog

from src.models.document import TextChunk, TextSegment

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHUNK_SIZE = 6000
DEFAULT_CHUNK_OVERLAP = 200

# Separator used between chunks in stored content and between segments on
# reassembly.
CONTENT_SEPARATOR = "\n\n"

# Abbreviations whose trailing period must NOT count as a sentence end.
_ABBREVIATIONS = frozenset(
    {
        "Dr",
        "Mr",
        "Mrs",
        "Ms",
        "Prof",
        "Jr",
        "Sr",
        "St",
        "No",
        "Nos",
        "vs",
        "v",
        "etc",
        "approx",
        "dept",
        "est",
        "govt",
        "Inc",
        "Ltd",
        "Co",
        "Corp",
        "Art",
        "Sec",
        "Secs",
        "para",
        "paras",
        "cl",
        "cf",
        "ibid",
        "Ch",
        "Pt",
        "Sch",
        "e.g",
        "i.e",
        "U.S",
    }
)

_ABBREVIATION_PATTERN = re.compile(
    r"\b(?:" + "|".join(sorted((re.escape(a) for a in _ABBREVIATIONS), key=len, reverse=True)) + r")\."
)

# Sentence terminator, optional closing quote/bracket, then whitespace.
_SENTENCE_END = re.compile(r"[.!?][\"'”’)\]]*\s")

_WHITESPACE = re.compile(r"\s")


def _mask_abbreviations(text: str) -> str:
    """Replace abbreviation periods with NUL, keeping offsets aligned."""
    return _ABBREVIATION_PATTERN.sub(lambda m: m.group(0)[:-1] + "\x00", text)


class TextChunker:
    """Splits page-attributed text into bounded, overlapping chunks.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 6000).
    overlap:
        Characters shared between consecutive chunks of one segment
        (default 200).  Must be smaller than *chunk_size*.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> None:
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        if not 0 <= overlap < chunk_size:
            msg = f"overlap must be in [0, chunk_size), got {overlap}"
            raise ValueError(msg)
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, segments: Sequence[TextSegment]) -> list[TextChunk]:
        """Split *segments* into a flat, ordered list of chunks.

        Whitespace-only segments are skipped.  Empty input (or input with
        no visible text) returns an empty list; the caller decides whether
        that is an error.
        """
        chunks: list[TextChunk] = []
        for segment_index, segment in enumerate(segments):
            if not segment.text.strip():
                continue
            for start, end, overlap in self._windows(segment.text):
                chunks.append(
                    TextChunk(
                        index=len(chunks),
                        text=segment.text[start:end],
                        page_number=segment.page_number,
                        segment_index=segment_index,
                        start=start,
                        end=end,
                        overlap=overlap,
                    )
                )

        logger.debug(
            "chunking_complete",
            num_segments=len(segments),
            num_chunks=len(chunks),
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return chunks

    @staticmethod
    def join_content(chunks: Sequence[TextChunk]) -> str:
        """Join chunk texts with blank lines: the canonical stored content."""
        return CONTENT_SEPARATOR.join(chunk.text for chunk in chunks)

    @staticmethod
    def reassemble(chunks: Sequence[TextChunk]) -> str:
        """Rebuild the source text from *chunks* with overlaps removed.

        Segments are joined with a blank line.
        """
        segments: list[str] = []
        current_segment: int | None = None
        for chunk in chunks:
            if chunk.segment_index != current_segment:
                segments.append(chunk.text)
                current_segment = chunk.segment_index
            else:
                segments[-1] += chunk.text[chunk.overlap :]
        return CONTENT_SEPARATOR.join(segments)

    # ------------------------------------------------------------------
    # Window computation
    # ------------------------------------------------------------------

    def _windows(self, text: str) -> list[tuple[int, int, int]]:
        """Return ``(start, end, overlap)`` triples covering *text*."""
        length = len(text)
        if length <= self._chunk_size:
            return [(0, length, 0)]

        masked = _mask_abbreviations(text)
        windows: list[tuple[int, int, int]] = []
        start = 0
        leading_overlap = 0
        while True:
            if length - start <= self._chunk_size:
                windows.append((start, length, leading_overlap))
                return windows
            cut = self._find_cut(text, masked, start, start + self._chunk_size)
            windows.append((start, cut, leading_overlap))
            start = cut - self._overlap
            leading_overlap = self._overlap

    def _find_cut(self, text: str, masked: str, start: int, limit: int) -> int:
        """Pick the end offset of the chunk beginning at *start*.

        The cut lies in ``(start + overlap, limit]`` so every chunk advances
        past the region it shares with its predecessor.  Boundaries in the
        back half of the window win over any boundary before it, so a break
        near the start never yields a chunk that is mostly overlap.
        """
        floor = start + self._overlap
        preferred = max(floor, start + self._chunk_size // 2)
        for low in dict.fromkeys((preferred, floor)):
            cut = self._last_boundary(text, masked, low, limit)
            if cut is not None:
                return cut
        return limit

    @staticmethod
    def _last_boundary(text: str, masked: str, low: int, limit: int) -> int | None:
        """Offset just past the best break in ``text[low:limit]``, if any."""
        window = text[low:limit]

        paragraph = window.rfind("\n\n")
        if paragraph != -1:
            return low + paragraph + 2

        last_sentence = None
        for match in _SENTENCE_END.finditer(masked, low, limit):
            last_sentence = match
        if last_sentence is not None:
            return last_sentence.end()

        last_space = None
        for match in _WHITESPACE.finditer(window):
            last_space = match
        if last_space is not None:
            return low + last_space.end()

        return None
