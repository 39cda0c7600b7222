import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from pdftext.config import AnalysisConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageSignal:
    """Per-page summary folded into the document verdict."""

    text_length: int
    has_large_images: bool = False


class DocumentClassifier:
    """
    Decides whether a document is scanned (text is really a picture) or born-digital.

    A document is scanned when its average text per page is very low, or when
    any page is dominated by raster images and the text is still sparse.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    @staticmethod
    def image_coverage_ratio(image_sizes: Iterable[Tuple[float, float]],
                             page_width: float, page_height: float) -> float:
        """
        Total pixel area of the page's images over the page area in points.
        Ignores placement, scaling and overlap.
        """
        page_area = page_width * page_height
        if page_area <= 0:
            return 0.0
        total = sum(float(w) * float(h) for w, h in image_sizes)
        return total / page_area

    def has_large_images(self, image_sizes: Optional[Sequence[Tuple[float, float]]],
                         page_width: float, page_height: float) -> bool:
        # None: the parser could not enumerate the page's images
        if not image_sizes:
            return False
        ratio = self.image_coverage_ratio(image_sizes, page_width, page_height)
        large = ratio > self.config.image_coverage_threshold
        if large:
            logger.debug("Page has large images - coverage ratio: %.2f", ratio)
        return large

    def average_text_per_page(self, signals: Iterable[PageSignal], total_pages: int) -> float:
        if total_pages < 1:
            raise ValueError(f"total_pages must be at least 1, got {total_pages}")
        return sum(s.text_length for s in signals) / total_pages

    def is_scanned(self, signals: Sequence[PageSignal], total_pages: Optional[int] = None) -> bool:
        if total_pages is None:
            total_pages = len(signals)
        avg = self.average_text_per_page(signals, total_pages)
        any_large = any(s.has_large_images for s in signals)
        scanned = self.decide(avg, any_large)
        logger.info("Scanned: %s (avg text/page %.1f, large images: %s)", scanned, avg, any_large)
        return scanned

    def decide(self, avg_text_per_page: float, any_large_images: bool) -> bool:
        cfg = self.config
        if avg_text_per_page < cfg.text_threshold_per_page:
            return True
        return any_large_images and avg_text_per_page < cfg.text_threshold_with_images
