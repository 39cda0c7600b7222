import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from pdftext.geometry import GlyphRecord, Word, glyph_box

logger = logging.getLogger(__name__)


@dataclass
class SegmentState:
    """Fold state for one page: pending glyphs, the last accepted glyph and the words so far."""

    pending: List[GlyphRecord] = field(default_factory=list)
    last: Optional[GlyphRecord] = None
    words: List[Word] = field(default_factory=list)
    dropped: int = 0


class WordSegmenter:
    """
    Turns a page's glyph stream into words, in stream order.

    Word breaks come from the parser's separator glyphs and from implicit
    boundaries: a baseline jump of more than half a glyph height (line break)
    or a horizontal gap wider than half a space.
    """

    def __init__(self, page_height: float):
        self.page_height = page_height

    def segment(self, glyphs: Iterable[GlyphRecord]) -> List[Word]:
        state = SegmentState()
        for glyph in glyphs:
            state = self.step(state, glyph)
        self._flush(state)
        if state.dropped:
            logger.debug("Dropped %d malformed glyphs", state.dropped)
        return state.words

    def step(self, state: SegmentState, glyph: GlyphRecord) -> SegmentState:
        """Consume one glyph."""
        if glyph.is_separator:
            self._flush(state)
            state.last = None
            return state

        if not glyph.is_well_formed():
            state.dropped += 1
            return state

        if state.last is not None and self.is_boundary(state.last, glyph):
            # keep `last`: the next word still measures its first gap from here
            self._flush(state)

        state.pending.append(glyph)
        state.last = glyph
        return state

    @staticmethod
    def gap_threshold(prev: GlyphRecord, glyph: GlyphRecord) -> float:
        space = prev.space_width
        if space is None or not space > 0:
            space = (prev.width + glyph.width) / 2.0
        return space / 2.0

    @classmethod
    def is_boundary(cls, prev: GlyphRecord, glyph: GlyphRecord) -> bool:
        # 1. Baseline jump -> new line
        if abs(glyph.y - prev.y) > prev.height / 2.0:
            return True
        # 2. Gap along the writing direction
        gap = glyph.x - prev.right
        return gap > cls.gap_threshold(prev, glyph)

    def _flush(self, state: SegmentState) -> None:
        if not state.pending:
            return
        text = "".join(g.text for g in state.pending).strip()
        if text:
            state.words.append(Word(text=text, bbox=glyph_box(state.pending, self.page_height)))
        state.pending = []


def segment_words(glyphs: Iterable[GlyphRecord], page_height: float) -> List[Word]:
    return WordSegmenter(page_height).segment(glyphs)
