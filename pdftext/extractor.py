import logging
import fitz
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from pdftext.geometry import DocumentMetadata, GlyphRecord

logger = logging.getLogger(__name__)

METADATA_KEYS = ("author", "title", "subject", "creator", "producer")

HORIZONTAL = (1.0, 0.0)


@dataclass
class PageInput:
    """Everything the core pipeline needs for one page, already in memory."""

    page_number: int
    width: float
    height: float
    glyphs: List[GlyphRecord] = field(default_factory=list)
    # None when the page's images could not be enumerated
    image_sizes: Optional[List[Tuple[int, int]]] = field(default_factory=list)
    # mediabox size for the image coverage test; None falls back to width/height
    media_width: Optional[float] = None
    media_height: Optional[float] = None


class GlyphExtractor:
    """
    Reads PyMuPDF pages into glyph streams.

    Characters come from `page.get_text("rawdict")` in block/line/span order,
    which is the order MuPDF met them in the content stream. Positions keep
    PyMuPDF's top-left origin; `y` is the character baseline. Lines that are
    not written left to right are rotated by their `dir` vector so that `x`
    advances along the text.
    """

    def __init__(self, flags: int = fitz.TEXTFLAGS_RAWDICT & ~fitz.TEXT_PRESERVE_IMAGES):
        self.flags = flags

    def glyphs(self, page: fitz.Page) -> List[GlyphRecord]:
        raw = page.get_text("rawdict", flags=self.flags)
        return self.glyphs_from_rawdict(raw)

    def glyphs_from_rawdict(self, raw: Dict[str, Any]) -> List[GlyphRecord]:
        out: List[GlyphRecord] = []
        for b in raw.get("blocks", []):
            if b.get("type", 0) != 0:
                continue
            for l in b.get("lines", []):
                direction = tuple(float(v) for v in l.get("dir", HORIZONTAL))
                for s in l.get("spans", []):
                    chars = s.get("chars", [])
                    space_w = self._span_space_width(chars, direction)
                    for ch in chars:
                        out.append(self._glyph(ch, space_w, direction))
        return out

    @staticmethod
    def _extent(bbox, direction: Tuple[float, float]) -> Tuple[float, float]:
        """Smallest and largest projection of the bbox corners on `direction`."""
        x0, y0, x1, y1 = bbox
        cos, sin = direction
        proj = [x * cos + y * sin for x in (x0, x1) for y in (y0, y1)]
        return min(proj), max(proj)

    @classmethod
    def _span_space_width(cls, chars: List[Dict[str, Any]],
                          direction: Tuple[float, float] = HORIZONTAL) -> Optional[float]:
        for ch in chars:
            c = ch.get("c", "")
            if c and c.isspace():
                lo, hi = cls._extent(ch["bbox"], direction)
                if hi - lo > 0:
                    return float(hi - lo)
        return None

    @classmethod
    def _glyph(cls, ch: Dict[str, Any], space_w: Optional[float],
               direction: Tuple[float, float] = HORIZONTAL) -> GlyphRecord:
        c = ch.get("c", "")
        x0, y0, x1, y1 = (float(v) for v in ch["bbox"])
        ox, oy = (float(v) for v in ch["origin"])

        if direction == HORIZONTAL:
            return GlyphRecord(
                text=c,
                x=x0,
                y=oy,
                width=x1 - x0,
                height=oy - y0,
                space_width=space_w,
                is_separator=not c.strip(),
            )

        # rotate into the text's own frame; "up" is the baseline normal
        cos, sin = direction
        lo, hi = cls._extent((x0, y0, x1, y1), direction)
        up_lo, up_hi = cls._extent((x0 - ox, y0 - oy, x1 - ox, y1 - oy), (sin, -cos))
        return GlyphRecord(
            text=c,
            x=lo,
            y=oy * cos - ox * sin,
            width=hi - lo,
            height=up_hi,
            space_width=space_w,
            is_separator=not c.strip(),
            page_box=(x0, y0, x1, y1),
        )

    @staticmethod
    def image_sizes(page: fitz.Page) -> List[Tuple[int, int]]:
        """
        Pixel (width, height) of the raster images in the page's own resources.
        Images nested inside Form XObjects have a non-zero referencer and are skipped.
        """
        return [(int(img[2]), int(img[3])) for img in page.get_images(full=True) if img[-1] == 0]

    def read_page(self, page: fitz.Page, page_number: int) -> PageInput:
        rect = page.rect
        media = page.mediabox
        try:
            sizes: Optional[List[Tuple[int, int]]] = self.image_sizes(page)
        except Exception as e:
            logger.warning("Error checking for images on page %d: %s", page_number, e)
            sizes = None

        return PageInput(
            page_number=page_number,
            width=float(rect.width),
            height=float(rect.height),
            glyphs=self.glyphs(page),
            image_sizes=sizes,
            media_width=float(media.width),
            media_height=float(media.height),
        )

    @staticmethod
    def metadata(doc: fitz.Document) -> DocumentMetadata:
        info = doc.metadata or {}
        values = {k: (info.get(k) or None) for k in METADATA_KEYS}
        return DocumentMetadata(**values)
