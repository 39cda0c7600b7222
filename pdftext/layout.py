import logging
import numpy as np
from typing import List, Optional

from pdftext.config import AnalysisConfig
from pdftext.geometry import Line, Paragraph, Word

logger = logging.getLogger(__name__)


class LayoutEngine:
    """
    Groups a page's words into visual lines and lines into paragraphs.

    Paragraph breaks are vertical gaps larger than an adaptive threshold derived
    from the average line height of the page.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def group_words_into_lines(self, words: List[Word]) -> List[Line]:
        """
        Sorts words by (y, x) and starts a new line whenever a word's y differs
        from the line reference by at least `same_line_tolerance`.
        """
        if not words:
            return []

        tol = self.config.same_line_tolerance
        running = self.config.line_reference == "mean"

        ordered = sorted(words, key=lambda w: (w.bbox.y, w.bbox.x))

        lines: List[Line] = []
        current: List[Word] = []
        ref_y = 0.0
        for w in ordered:
            y = w.bbox.y
            if current and abs(y - ref_y) < tol:
                current.append(w)
                if running:
                    ref_y += (y - ref_y) / len(current)
                continue
            if current:
                lines.append(Line(words=current, reference_y=ref_y))
            current = [w]
            ref_y = y

        if current:
            lines.append(Line(words=current, reference_y=ref_y))
        return lines

    def average_line_height(self, lines: List[Line]) -> float:
        """Mean of the tallest word per line, over lines with positive height."""
        heights = [ln.height for ln in lines if ln.words and ln.height > 0]
        if not heights:
            return float(self.config.default_line_height)
        return float(np.mean(heights))

    def paragraph_break_threshold(self, lines: List[Line]) -> float:
        avg = self.average_line_height(lines)
        return max(avg * self.config.paragraph_break_multiplier, self.config.min_paragraph_gap)

    def group_lines_into_paragraphs(self, lines: List[Line],
                                    threshold: Optional[float] = None) -> List[Paragraph]:
        """
        Walks the lines in order and closes the current paragraph whenever the
        gap between this line's top and the previous line's bottom exceeds the
        threshold. Empty lines are skipped and leave the previous bottom untouched.
        """
        if threshold is None:
            threshold = self.paragraph_break_threshold(lines)

        paragraphs: List[Paragraph] = []
        current: List[Word] = []
        prev_bottom: Optional[float] = None

        for line in lines:
            if not line.words:
                continue

            if prev_bottom is not None:
                gap = line.top - prev_bottom
                if gap > threshold and current:
                    paragraphs.append(Paragraph.from_words(len(paragraphs), current))
                    logger.debug("Paragraph #%d closed by gap of %.2f pt", len(paragraphs) - 1, gap)
                    current = []

            current.extend(line.words)
            prev_bottom = line.bottom

        if current:
            paragraphs.append(Paragraph.from_words(len(paragraphs), current))
        return paragraphs

    def extract_paragraphs(self, words: List[Word]) -> List[Paragraph]:
        if words is None:
            raise ValueError("words must not be None")
        if not words:
            return []

        # 1. Lines
        lines = self.group_words_into_lines(words)
        # 2. Adaptive threshold
        threshold = self.paragraph_break_threshold(lines)
        # 3. Paragraphs
        paragraphs = self.group_lines_into_paragraphs(lines, threshold)

        logger.debug("%d words -> %d lines -> %d paragraphs (threshold %.2f pt)",
                     len(words), len(lines), len(paragraphs), threshold)
        return paragraphs
