import math
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Sequence, Tuple

EXTRACTED_CONFIDENCE = 1.0


@dataclass(frozen=True)
class GlyphRecord:
    """
    One rendered character as handed over by the PDF parser.

    Coordinates are direction-adjusted and use the parser's top-left origin:
    `x` runs along the writing direction and `y` is the baseline, so the
    visual top of the glyph is `y - height`. For text that is not written
    left to right, `page_box` keeps the glyph's (x0, y0, x1, y1) rectangle
    in page space for the word bounding box.
    """

    text: str
    x: float
    y: float
    width: float
    height: float
    space_width: Optional[float] = None
    is_separator: bool = False
    page_box: Optional[Tuple[float, float, float, float]] = None

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y - self.height

    def is_well_formed(self) -> bool:
        """True when position is finite and both dimensions are finite and positive."""
        values = (self.x, self.y, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            return False
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in page points (x, y, width, height)."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"BoundingBox needs non-negative size, got {self.width}x{self.height}")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def from_edges(cls, x0: float, y0: float, x1: float, y1: float) -> "BoundingBox":
        return cls(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def union_boxes(boxes: Sequence[BoundingBox]) -> Optional[BoundingBox]:
    """Tightest box covering every input box, or None for an empty input."""
    if not boxes:
        return None
    min_x, min_y = math.inf, math.inf
    max_x, max_y = -math.inf, -math.inf
    for b in boxes:
        min_x = min(min_x, b.x)
        min_y = min(min_y, b.y)
        max_x = max(max_x, b.right)
        max_y = max(max_y, b.bottom)
    return BoundingBox.from_edges(min_x, min_y, max_x, max_y)


def glyph_box(glyphs: Sequence[GlyphRecord], page_height: float) -> BoundingBox:
    """
    Bounding box of a run of glyphs, converted to the bottom-left page origin.

    Glyph edges are taken in the parser's top-left space (top = baseline - height,
    bottom = baseline, or the glyph's `page_box` when set) and the y axis is
    flipped against the page height.
    """
    min_left, min_top = math.inf, math.inf
    max_right, max_bottom = -math.inf, -math.inf
    for g in glyphs:
        if g.page_box is not None:
            left, top, right, bottom = g.page_box
        else:
            left, top, right, bottom = g.x, g.top, g.right, g.y
        min_left = min(min_left, left)
        min_top = min(min_top, top)
        max_right = max(max_right, right)
        max_bottom = max(max_bottom, bottom)
    return BoundingBox(
        x=min_left,
        y=page_height - max_bottom,
        width=max_right - min_left,
        height=max_bottom - min_top,
    )


@dataclass(frozen=True)
class Word:
    text: str
    bbox: BoundingBox
    confidence: float = EXTRACTED_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "boundingBox": self.bbox.to_dict(),
            "confidence": self.confidence,
        }


@dataclass
class Line:
    """Words sharing one visual line, left to right. `reference_y` is the line's anchor."""

    words: List[Word]
    reference_y: float

    @property
    def top(self) -> float:
        return min(w.bbox.y for w in self.words)

    @property
    def bottom(self) -> float:
        return max(w.bbox.bottom for w in self.words)

    @property
    def height(self) -> float:
        return max((w.bbox.height for w in self.words), default=0.0)


@dataclass(frozen=True)
class Paragraph:
    paragraph_index: int
    words: List[Word]
    text: str
    bbox: BoundingBox
    confidence: float = EXTRACTED_CONFIDENCE

    @classmethod
    def from_words(cls, paragraph_index: int, words: Sequence[Word]) -> "Paragraph":
        words = list(words)
        return cls(
            paragraph_index=paragraph_index,
            words=words,
            text=" ".join(w.text for w in words),
            bbox=union_boxes([w.bbox for w in words]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paragraphIndex": self.paragraph_index,
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
            "boundingBox": self.bbox.to_dict(),
            "confidence": self.confidence,
        }


@dataclass
class PageResult:
    page_number: int
    width: float
    height: float
    words: List[Word] = field(default_factory=list)
    paragraphs: List[Paragraph] = field(default_factory=list)
    text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "width": self.width,
            "height": self.height,
            "textContent": self.text,
            "words": [w.to_dict() for w in self.words],
            "paragraphs": [p.to_dict() for p in self.paragraphs],
        }


@dataclass(frozen=True)
class DocumentMetadata:
    author: Optional[str] = None
    title: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "author": self.author,
            "title": self.title,
            "subject": self.subject,
            "creator": self.creator,
            "producer": self.producer,
        }


@dataclass
class DocumentResult:
    file_name: str
    pages: List[PageResult]
    is_scanned: bool
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isScanned": self.is_scanned,
            "fileName": self.file_name,
            "totalPages": self.total_pages,
            "pages": [p.to_dict() for p in self.pages],
            "metadata": self.metadata.to_dict(),
        }
